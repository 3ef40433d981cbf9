from __future__ import annotations

import logging

from ..domain.enums import EventKind, Verdict
from ..domain.errors import UnsupportedVersion
from ..domain.models import Range
from ..ports.version_port import VersionOrderingProvider

logger = logging.getLogger(__name__)


class RangeEvaluator:
    """Decide whether a concrete version falls inside an OSV range.

    Events are ordered by the range's VersionOrdering and walked with an
    "affected" flag that starts out false. Each event whose boundary is at or
    below the version is applied: `introduced` sets the flag (inclusive),
    `fixed` and `limit` clear it (exclusive), `last_affected` clears it only
    for versions strictly above the boundary (inclusive). The flag left after
    the walk is the answer.

    The result is INDETERMINATE, never NOT_AFFECTED, when no ordering exists
    for the range or when the ordering cannot parse a version involved.
    """

    def __init__(self, orderings: VersionOrderingProvider) -> None:
        self._orderings = orderings

    def is_affected(self, ecosystem: str, rng: Range, version: str) -> Verdict:
        ordering = self._orderings.for_range(ecosystem, rng.type)
        if ordering is None:
            logger.debug(f"No version ordering for {rng.type_tag} range in {ecosystem}")
            return Verdict.INDETERMINATE

        try:
            # Reject an unorderable query version even when only the origin sentinel would be consulted
            ordering.compare(version, version)
            affected = False
            for event in ordering.sort_events(rng.events):
                if event.kind is EventKind.INTRODUCED:
                    if event.is_origin or ordering.compare(version, event.version) >= 0:
                        affected = True
                elif event.kind is EventKind.LAST_AFFECTED:
                    if ordering.compare(version, event.version) > 0:
                        affected = False
                elif ordering.compare(version, event.version) >= 0:
                    affected = False
        except UnsupportedVersion as exc:
            logger.debug(f"Cannot evaluate {version!r} in {ecosystem}: {exc}")
            return Verdict.INDETERMINATE

        return Verdict.AFFECTED if affected else Verdict.NOT_AFFECTED
