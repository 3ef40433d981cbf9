from __future__ import annotations

from functools import cmp_to_key
from typing import Protocol, Sequence

from ..domain.enums import RangeType
from ..domain.models import Event


class VersionOrdering(Protocol):
    """Ordering capability for one family of version strings.

    `compare(a, b)` returns a negative number, zero or a positive number when
    `a` sorts before, equal to or after `b`. Implementations raise
    UnsupportedVersion for strings they cannot order.
    """

    name: str

    def compare(self, a: str, b: str) -> int:
        ...

    def sort_events(self, events: Sequence[Event]) -> list[Event]:
        """Return events ordered by boundary, the origin sentinel first. The sort is stable."""

        def _cmp(x: Event, y: Event) -> int:
            if x.is_origin or y.is_origin:
                return int(y.is_origin) - int(x.is_origin)
            return self.compare(x.version, y.version)

        return sorted(events, key=cmp_to_key(_cmp))


class VersionOrderingProvider(Protocol):
    def for_range(self, ecosystem: str, range_type: RangeType) -> VersionOrdering | None:
        """Return the ordering for a range of the given type in the given ecosystem, or None."""
        ...
