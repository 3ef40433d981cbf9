from __future__ import annotations

import logging
import re
from typing import Optional, Sequence

from packaging.version import InvalidVersion, Version

from ..core.domain.enums import RangeType
from ..core.domain.errors import UnsupportedVersion
from ..core.domain.models import Event
from ..core.ports.commit_graph_port import CommitGraphPort
from ..core.ports.version_port import VersionOrdering, VersionOrderingProvider
from ..shared.ecosystems import NATURAL_ECOSYSTEMS, PEP440_ECOSYSTEMS, SEMVER_ECOSYSTEMS, base_ecosystem

logger = logging.getLogger(__name__)


def _sign(a: object, b: object) -> int:
    return (a > b) - (a < b)  # type: ignore[operator]


# Lenient SemVer 2.0: optional "v" prefix, minor/patch may be omitted.
SEMVER_RE = re.compile(
    r"^v?(?P<major>\d+)(?:\.(?P<minor>\d+))?(?:\.(?P<patch>\d+))?"
    r"(?:-(?P<pre>[0-9A-Za-z.-]+))?(?:\+(?P<build>[0-9A-Za-z.-]+))?$"
)


class SemverOrdering(VersionOrdering):
    """Semantic Versioning 2.0 precedence; build metadata is ignored."""

    name = "semver"

    def key(self, version: str) -> tuple:
        m = SEMVER_RE.match(version.strip())
        if not m:
            raise UnsupportedVersion(version, self.name)
        core = (int(m.group("major")), int(m.group("minor") or 0), int(m.group("patch") or 0))
        pre = m.group("pre")
        if pre is None:
            # A release sorts after every pre-release of the same core version
            return core + ((1,),)
        idents = []
        for ident in pre.split("."):
            if ident.isdigit():
                idents.append((0, int(ident), ""))
            else:
                idents.append((1, 0, ident))
        return core + ((0, tuple(idents)),)

    def compare(self, a: str, b: str) -> int:
        return _sign(self.key(a), self.key(b))


class Pep440Ordering(VersionOrdering):
    """PyPI versions, ordered by the packaging library."""

    name = "pep440"

    def compare(self, a: str, b: str) -> int:
        return _sign(self._parse(a), self._parse(b))

    def _parse(self, version: str) -> Version:
        try:
            return Version(version)
        except InvalidVersion as exc:
            raise UnsupportedVersion(version, self.name) from exc


_TOKEN_RE = re.compile(r"\d+|[a-z]+")


class NaturalOrdering(VersionOrdering):
    """Numeric-aware segment ordering for registries without a formal version grammar.

    Numbers compare numerically, words lexically, a word sorts before a number
    in the same position ("1.0.beta" < "1.0.0"), and missing numeric segments
    count as zero ("1.0" == "1.0.0", "1.0" > "1.0.rc1").
    """

    name = "natural"

    def tokens(self, version: str) -> list[int | str]:
        raw = _TOKEN_RE.findall(version.lower())
        if not raw:
            raise UnsupportedVersion(version, self.name)
        return [int(t) if t.isdigit() else t for t in raw]

    def compare(self, a: str, b: str) -> int:
        ta, tb = self.tokens(a), self.tokens(b)
        for i in range(max(len(ta), len(tb))):
            x = ta[i] if i < len(ta) else None
            y = tb[i] if i < len(tb) else None
            if x is None:
                if isinstance(y, str):
                    return 1
                x = 0
            if y is None:
                if isinstance(x, str):
                    return -1
                y = 0
            if isinstance(x, int) and isinstance(y, int):
                c = _sign(x, y)
            elif isinstance(x, str) and isinstance(y, str):
                c = _sign(x, y)
            else:
                c = 1 if isinstance(x, int) else -1
            if c:
                return c
        return 0


class GitOrdering(VersionOrdering):
    """Commit positions ordered by ancestry in an injected commit graph.

    Only `version >= boundary` questions are meaningful here: compare returns
    0 for the same commit, 1 when the boundary is an ancestor of the version
    and -1 otherwise (including unrelated branches). Events keep the order in
    which the record lists them.
    """

    name = "git"

    def __init__(self, commit_graph: CommitGraphPort) -> None:
        self._graph = commit_graph

    def compare(self, a: str, b: str) -> int:
        if a == b:
            return 0
        return 1 if self._graph.is_ancestor(b, a) else -1

    def sort_events(self, events: Sequence[Event]) -> list[Event]:
        return list(events)


class VersionOrderingRegistry(VersionOrderingProvider):
    """Select the VersionOrdering for a range.

    SEMVER ranges always use SemVer precedence, GIT ranges use the commit
    graph (when one is configured) and ECOSYSTEM ranges use the ordering
    registered for the package's ecosystem. None means "no capability".
    """

    def __init__(self, commit_graph: CommitGraphPort | None = None) -> None:
        self._semver = SemverOrdering()
        self._git: Optional[GitOrdering] = GitOrdering(commit_graph) if commit_graph is not None else None
        self._by_ecosystem: dict[str, VersionOrdering] = {}
        natural = NaturalOrdering()
        pep440 = Pep440Ordering()
        for eco in SEMVER_ECOSYSTEMS:
            self._by_ecosystem[eco] = self._semver
        for eco in NATURAL_ECOSYSTEMS:
            self._by_ecosystem[eco] = natural
        for eco in PEP440_ECOSYSTEMS:
            self._by_ecosystem[eco] = pep440

    def register(self, ecosystem: str, ordering: VersionOrdering) -> None:
        logger.debug(f"Registering {ordering.name} ordering for ecosystem {ecosystem}")
        self._by_ecosystem[ecosystem] = ordering

    def for_range(self, ecosystem: str, range_type: RangeType) -> Optional[VersionOrdering]:
        if range_type is RangeType.SEMVER:
            return self._semver
        if range_type is RangeType.GIT:
            return self._git
        if range_type is RangeType.ECOSYSTEM:
            return self._by_ecosystem.get(ecosystem) or self._by_ecosystem.get(base_ecosystem(ecosystem))
        return None
