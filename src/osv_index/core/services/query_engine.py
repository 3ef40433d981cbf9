from __future__ import annotations

import logging

from ..domain.enums import Verdict
from ..domain.models import Advisory, LookupResult, Match
from ..ports.index_port import AdvisoryIndexPort
from ...shared.ecosystems import normalize_package_name
from .range_evaluator import RangeEvaluator

logger = logging.getLogger(__name__)


class QueryEngine:
    def __init__(self, index: AdvisoryIndexPort, evaluator: RangeEvaluator, *, include_withdrawn: bool = False) -> None:
        self._index = index
        self._evaluator = evaluator
        self._include_withdrawn = include_withdrawn

    def lookup(self, ecosystem: str, name: str, version: str) -> LookupResult:
        """Return the advisories affecting `name` at `version` in `ecosystem`.

        Confirmed hits land in `matches`. Ranges that cannot be evaluated
        (no ordering for the ecosystem, unparseable version, GIT range without
        a commit graph) land in `indeterminate` so callers can tell "known
        safe" from "unknown". An unknown package yields an empty result.
        """
        matches: list[Match] = []
        indeterminate: list[Match] = []
        candidates = self._index.find_by_package(ecosystem, name)
        logger.debug(f"Lookup {ecosystem}/{name}@{version}: {len(candidates)} candidate advisories")

        for advisory in candidates:
            if advisory.is_withdrawn and not self._include_withdrawn:
                logger.debug(f"Skipping withdrawn advisory {advisory.id}")
                continue
            self._match_advisory(advisory, ecosystem, name, version, matches, indeterminate)

        return LookupResult(matches=tuple(matches), indeterminate=tuple(indeterminate))

    def _match_advisory(
        self,
        advisory: Advisory,
        ecosystem: str,
        name: str,
        version: str,
        matches: list[Match],
        indeterminate: list[Match],
    ) -> None:
        wanted = normalize_package_name(ecosystem, name)
        for i, pkg in enumerate(advisory.affected):
            if pkg.ecosystem != ecosystem or normalize_package_name(pkg.ecosystem, pkg.name) != wanted:
                continue
            if version in pkg.versions:
                matches.append(Match(advisory, i, None, Verdict.AFFECTED))

            # Every range is evaluated; each confirmed or indeterminate verdict is reported
            for j, rng in enumerate(pkg.ranges):
                verdict = self._evaluator.is_affected(pkg.ecosystem, rng, version)
                if verdict is Verdict.AFFECTED:
                    matches.append(Match(advisory, i, j, verdict))
                elif verdict is Verdict.INDETERMINATE:
                    indeterminate.append(Match(advisory, i, j, verdict))
