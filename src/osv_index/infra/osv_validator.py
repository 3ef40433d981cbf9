from __future__ import annotations

import json
import logging
import re
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from ..core.domain.enums import EventKind, NoticeCode, RangeType, SeverityType
from ..core.domain.errors import (
    InvalidIdentifier,
    InvalidRange,
    MalformedDocument,
    MalformedTimestamp,
    MissingField,
    UnknownEcosystemTag,
)
from ..core.domain.models import (
    Advisory,
    AffectedPackage,
    Event,
    Range,
    Reference,
    Severity,
    ValidationNotice,
)
from ..shared.ecosystems import is_known_ecosystem
from ..shared.severity import severity_from_osv_score
from .schemas import OsvAffected, OsvEvent, OsvRange, OsvSeverity, OsvVulnerability

logger = logging.getLogger(__name__)


# <DATABASE PREFIX>-<ENTRY ID>, e.g. GHSA-wc9m-r3v6-9p5h, PYSEC-2021-1, RHSA-2020:1234
ADVISORY_ID_RE = re.compile(r"[A-Za-z][A-Za-z0-9]*-[A-Za-z0-9._:-]+")

# RFC 3339 date-time: full date, "T", time with seconds, then "Z" or a numeric offset
RFC3339_RE = re.compile(r"\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})")

REQUIRED_FIELDS = ("id", "modified", "affected")
TIMESTAMP_FIELDS = ("modified", "published", "withdrawn")


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 date-time. Date-only, basic-format and offset-less values are rejected."""
    text = value.strip()
    if not RFC3339_RE.fullmatch(text):
        raise ValueError(f"{value!r} is not an RFC 3339 date-time")
    return datetime.fromisoformat(text.upper().replace("Z", "+00:00"))


def _format_loc(loc: Sequence[int | str]) -> str:
    out = ""
    for part in loc:
        if isinstance(part, int):
            out += f"[{part}]"
        else:
            out += f".{part}" if out else str(part)
    return out or "<document>"


def _decode(raw: bytes | str | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(raw, Mapping):
        return dict(raw)
    try:
        text = raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw
        data = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedDocument(f"not a JSON document ({exc})", field="<document>") from exc
    if not isinstance(data, dict):
        raise MalformedDocument("expected a JSON object", field="<document>")
    return data


class OsvValidator:
    """Turn a raw OSV record into an Advisory, or raise a ValidationError.

    Checks run in a fixed order (required fields, identifier, timestamps,
    structure, affected packages, ranges, severity) so the first problem
    reported is stable for a given input. The validator holds no state
    between calls.
    """

    def __init__(self, *, require_schema_version: bool = False, known_ecosystems_only: bool = False) -> None:
        self._require_schema_version = require_schema_version
        self._known_ecosystems_only = known_ecosystems_only

    def validate(self, raw: bytes | str | Mapping[str, Any]) -> Advisory:
        data = _decode(raw)
        record_id = data.get("id") if isinstance(data.get("id"), str) else None
        notices: list[ValidationNotice] = []

        for name in REQUIRED_FIELDS:
            if data.get(name) is None:
                raise MissingField("required field is missing", field=name, record_id=record_id)
        if data.get("schema_version") is None:
            if self._require_schema_version:
                raise MissingField("required field is missing", field="schema_version", record_id=record_id)
            notices.append(
                ValidationNotice(NoticeCode.MISSING_SCHEMA_VERSION, "schema_version", "schema_version not set")
            )

        if record_id is None or not ADVISORY_ID_RE.fullmatch(record_id):
            raise InvalidIdentifier(
                f"{data.get('id')!r} is not a <PREFIX>-<ENTRY> advisory identifier", field="id", record_id=record_id
            )

        timestamps = self._check_timestamps(data, record_id)

        try:
            osv = OsvVulnerability.model_validate(data)
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            error_cls = MissingField if first["type"] == "missing" else MalformedDocument
            raise error_cls(first["msg"], field=_format_loc(first["loc"]), record_id=record_id) from exc

        affected = tuple(
            self._to_affected(aff, f"affected[{i}]", record_id, notices) for i, aff in enumerate(osv.affected)
        )
        severity = tuple(self._to_severity(s, f"severity[{i}]", notices) for i, s in enumerate(osv.severity or []))

        advisory = Advisory(
            id=osv.id,
            modified=timestamps["modified"],
            published=timestamps.get("published"),
            withdrawn=timestamps.get("withdrawn"),
            schema_version=osv.schema_version,
            aliases=tuple(dict.fromkeys(osv.aliases or [])),
            related=tuple(dict.fromkeys(osv.related or [])),
            summary=osv.summary,
            details=osv.details,
            severity=severity,
            affected=affected,
            references=tuple(Reference(type=r.type or "OTHER", url=r.url) for r in (osv.references or [])),
            database_specific=dict(osv.database_specific or {}),
            notices=tuple(notices),
        )
        logger.debug(f"Validated {advisory.id}: {len(affected)} affected, {len(notices)} notices")
        return advisory

    def _check_timestamps(self, data: Mapping[str, Any], record_id: Optional[str]) -> dict[str, datetime]:
        parsed: dict[str, datetime] = {}
        for name in TIMESTAMP_FIELDS:
            value = data.get(name)
            if value is None:
                continue
            if not isinstance(value, str):
                raise MalformedTimestamp("expected an RFC 3339 string", field=name, record_id=record_id)
            try:
                parsed[name] = parse_timestamp(value)
            except ValueError as exc:
                raise MalformedTimestamp(f"{value!r} is not an RFC 3339 timestamp", field=name, record_id=record_id) from exc
        published = parsed.get("published")
        if published is not None and published > parsed["modified"]:
            raise MalformedTimestamp(
                f"published ({data['published']}) is later than modified ({data['modified']})",
                field="published",
                record_id=record_id,
            )
        return parsed

    def _to_affected(
        self,
        aff: OsvAffected,
        path: str,
        record_id: Optional[str],
        notices: list[ValidationNotice],
    ) -> AffectedPackage:
        ecosystem = aff.package.ecosystem.strip()
        name = aff.package.name.strip()
        if not ecosystem:
            raise MissingField("ecosystem must be a non-empty string", field=f"{path}.package.ecosystem", record_id=record_id)
        if not name:
            raise MissingField("name must be a non-empty string", field=f"{path}.package.name", record_id=record_id)
        if not is_known_ecosystem(ecosystem):
            message = f"ecosystem {ecosystem!r} is not known; ranges will evaluate as indeterminate"
            if self._known_ecosystems_only:
                raise UnknownEcosystemTag(message, field=f"{path}.package.ecosystem", record_id=record_id)
            notices.append(ValidationNotice(NoticeCode.UNKNOWN_ECOSYSTEM_TAG, f"{path}.package.ecosystem", message))

        ranges = tuple(
            self._to_range(rng, f"{path}.ranges[{j}]", record_id, notices) for j, rng in enumerate(aff.ranges or [])
        )
        return AffectedPackage(
            ecosystem=ecosystem,
            name=name,
            purl=aff.package.purl,
            ranges=ranges,
            versions=tuple(aff.versions or []),
            ecosystem_specific=dict(aff.ecosystem_specific or {}),
            database_specific=dict(aff.database_specific or {}),
        )

    def _to_range(
        self,
        rng: OsvRange,
        path: str,
        record_id: Optional[str],
        notices: list[ValidationNotice],
    ) -> Range:
        if not rng.events:
            raise InvalidRange("a range needs at least one event", field=f"{path}.events", record_id=record_id)

        range_type = RangeType.parse(rng.type)
        if range_type is RangeType.UNSUPPORTED:
            notices.append(
                ValidationNotice(
                    NoticeCode.UNKNOWN_ECOSYSTEM_TAG,
                    f"{path}.type",
                    f"range type {rng.type!r} is not supported; kept as opaque",
                )
            )
        if range_type is RangeType.GIT and not rng.repo:
            raise InvalidRange("a GIT range needs a repo", field=f"{path}.repo", record_id=record_id)

        events = tuple(self._to_event(ev, f"{path}.events[{k}]", record_id) for k, ev in enumerate(rng.events))
        if not any(ev.kind is EventKind.INTRODUCED for ev in events):
            raise InvalidRange("a range needs an introduced event", field=f"{path}.events", record_id=record_id)

        is_open = False
        for k, ev in enumerate(events):
            if ev.kind is EventKind.INTRODUCED:
                if is_open:
                    raise InvalidRange(
                        f"introduced {ev.version!r} follows another introduced without a fixed or last_affected",
                        field=f"{path}.events[{k}]",
                        record_id=record_id,
                    )
                is_open = True
            elif ev.kind.closes_interval:
                if not is_open:
                    raise InvalidRange(
                        f"{ev.kind.value} {ev.version!r} does not close an introduced interval",
                        field=f"{path}.events[{k}]",
                        record_id=record_id,
                    )
                is_open = False

        return Range(type=range_type, events=events, repo=rng.repo, raw_type=rng.type)

    def _to_event(self, ev: OsvEvent, path: str, record_id: Optional[str]) -> Event:
        present = [(kind, getattr(ev, kind.value)) for kind in EventKind if getattr(ev, kind.value) is not None]
        if len(present) != 1:
            names = ", ".join(kind.value for kind, _ in present) or "none"
            raise InvalidRange(f"an event sets exactly one field (got: {names})", field=path, record_id=record_id)
        kind, version = present[0]
        if not version.strip():
            raise InvalidRange(f"{kind.value} must not be empty", field=f"{path}.{kind.value}", record_id=record_id)
        return Event(kind=kind, version=version.strip())

    def _to_severity(self, entry: OsvSeverity, path: str, notices: list[ValidationNotice]) -> Severity:
        score = str(entry.score)
        if SeverityType.parse(entry.type) is None:
            notices.append(
                ValidationNotice(
                    NoticeCode.UNKNOWN_SEVERITY_TYPE,
                    f"{path}.type",
                    f"severity type {entry.type!r} is not recognized; score kept uninterpreted",
                )
            )
            return Severity(type=entry.type, score=score, recognized=False)
        return Severity(type=entry.type, score=score, level=severity_from_osv_score(entry.type, entry.score))


_default_validator = OsvValidator()


def validate(raw: bytes | str | Mapping[str, Any]) -> Advisory:
    """Validate with default settings (schema_version optional, unknown ecosystems tolerated)."""
    return _default_validator.validate(raw)
