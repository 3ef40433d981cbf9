from __future__ import annotations

from typing import Protocol, Sequence

from ..domain.enums import AliasPolicy
from ..domain.models import Advisory


class AdvisoryIndexPort(Protocol):
    def insert(self, advisory: Advisory, *, policy: AliasPolicy | None = None) -> Advisory | None:
        """Insert or replace an advisory by id. Return the replaced record, if any.

        Raises AliasConflict when an alias already maps to another advisory and the
        policy is REJECT; the index is left unchanged in that case.
        """
        ...

    def remove(self, id: str) -> Advisory | None:
        """Remove an advisory and every secondary entry pointing at it."""
        ...

    def get_by_id(self, id: str) -> Advisory | None:
        ...

    def get_by_alias(self, alias: str) -> Advisory | None:
        ...

    def find_by_package(self, ecosystem: str, name: str) -> Sequence[Advisory]:
        """Return advisories with an affected entry for (ecosystem, name), ordered by id."""
        ...

    def list(self, *, ecosystem: str | None = None) -> Sequence[Advisory]:
        """Return every advisory (optionally scoped to one ecosystem), ordered by id."""
        ...
