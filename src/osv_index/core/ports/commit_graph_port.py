from __future__ import annotations

from typing import Protocol


class CommitGraphPort(Protocol):
    def is_ancestor(self, commit_a: str, commit_b: str) -> bool:
        """Return True when commit_a is an ancestor of commit_b (or the same commit)."""
        ...
