from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .enums import EventKind, NoticeCode, RangeType, ReferenceType, SeverityLevel, Verdict
from ...shared.ecosystems import base_ecosystem


ORIGIN_VERSION = "0"


def freeze(value: Any) -> Any:
    """Read-only copy of a JSON value: objects become mapping proxies, arrays become tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


def _empty_bag() -> Mapping[str, Any]:
    return MappingProxyType({})


@dataclass(frozen=True)
class Event:
    kind: EventKind
    version: str

    @property
    def is_origin(self) -> bool:
        """True for the `introduced: "0"` sentinel (affected since the beginning of history)."""
        return self.kind is EventKind.INTRODUCED and self.version == ORIGIN_VERSION

    def to_dict(self) -> dict[str, str]:
        return {self.kind.value: self.version}


@dataclass(frozen=True)
class Range:
    type: RangeType
    events: tuple[Event, ...]
    repo: Optional[str] = None
    # Original tag as it appeared in the record; differs from type.value for unsupported types.
    raw_type: Optional[str] = None

    @property
    def type_tag(self) -> str:
        return self.raw_type or self.type.value


@dataclass(frozen=True)
class AffectedPackage:
    ecosystem: str
    name: str
    purl: Optional[str] = None
    ranges: tuple[Range, ...] = field(default_factory=tuple)
    versions: tuple[str, ...] = field(default_factory=tuple)
    ecosystem_specific: Mapping[str, Any] = field(default_factory=_empty_bag, hash=False)
    # Advisory metadata only (e.g. last_known_affected_version_range); never used for matching.
    database_specific: Mapping[str, Any] = field(default_factory=_empty_bag, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "ecosystem_specific", freeze(self.ecosystem_specific))
        object.__setattr__(self, "database_specific", freeze(self.database_specific))

    @property
    def base_ecosystem(self) -> str:
        """Ecosystem without its release suffix, e.g. "Debian:11" -> "Debian"."""
        return base_ecosystem(self.ecosystem)


@dataclass(frozen=True)
class Severity:
    type: str
    score: str
    recognized: bool = True
    level: Optional[SeverityLevel] = None


@dataclass(frozen=True)
class Reference:
    type: str
    url: str

    @property
    def kind(self) -> ReferenceType:
        try:
            return ReferenceType(self.type)
        except ValueError:
            return ReferenceType.OTHER


@dataclass(frozen=True)
class ValidationNotice:
    """A non-fatal finding recorded while validating a record."""

    code: NoticeCode
    field: str
    message: str


@dataclass(frozen=True)
class Digests:
    sha256: str
    sha384: str
    sha512: str


@dataclass(frozen=True)
class DocumentSource:
    name: Optional[str] = None
    digests: Optional[Digests] = None
    labels: Mapping[str, str] = field(default_factory=_empty_bag, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", freeze(self.labels))


@dataclass(frozen=True)
class Advisory:
    id: str
    modified: datetime
    published: Optional[datetime] = None
    withdrawn: Optional[datetime] = None
    schema_version: Optional[str] = None

    aliases: tuple[str, ...] = field(default_factory=tuple)
    related: tuple[str, ...] = field(default_factory=tuple)

    summary: Optional[str] = None
    details: Optional[str] = None

    severity: tuple[Severity, ...] = field(default_factory=tuple)
    affected: tuple[AffectedPackage, ...] = field(default_factory=tuple)
    references: tuple[Reference, ...] = field(default_factory=tuple)
    database_specific: Mapping[str, Any] = field(default_factory=_empty_bag, hash=False)

    notices: tuple[ValidationNotice, ...] = field(default_factory=tuple)
    source: Optional[DocumentSource] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "database_specific", freeze(self.database_specific))

    @property
    def cve_id(self) -> Optional[str]:
        if self.id.startswith("CVE-"):
            return self.id
        for alias in self.aliases:
            if alias.startswith("CVE-"):
                return alias
        return None

    @property
    def is_withdrawn(self) -> bool:
        return self.withdrawn is not None

    @property
    def severity_level(self) -> Optional[SeverityLevel]:
        """Most severe level among the severity entries that could be scored."""
        best: Optional[SeverityLevel] = None
        for entry in self.severity:
            if entry.level is None:
                continue
            if best is None or entry.level.rank > best.rank:
                best = entry.level
        return best

    @property
    def ecosystems(self) -> tuple[str, ...]:
        seen: dict[str, None] = {}
        for pkg in self.affected:
            seen.setdefault(pkg.ecosystem, None)
        return tuple(seen)

    def with_updates(self, **kwargs) -> "Advisory":
        return replace(self, **kwargs)


@dataclass(frozen=True)
class Match:
    advisory: Advisory
    affected_index: int
    # None when the version matched the explicit `versions` list rather than a range.
    range_index: Optional[int]
    verdict: Verdict


@dataclass(frozen=True)
class LookupResult:
    matches: tuple[Match, ...] = field(default_factory=tuple)
    indeterminate: tuple[Match, ...] = field(default_factory=tuple)

    @property
    def advisory_ids(self) -> tuple[str, ...]:
        seen: dict[str, None] = {}
        for m in self.matches:
            seen.setdefault(m.advisory.id, None)
        return tuple(seen)


@dataclass(frozen=True)
class IngestFailure:
    source: Optional[str]
    error: Exception


@dataclass
class IngestReport:
    inserted: int = 0
    updated: int = 0
    failures: list[IngestFailure] = field(default_factory=list)
    cancelled: bool = False

    @property
    def processed(self) -> int:
        return self.inserted + self.updated + len(self.failures)
