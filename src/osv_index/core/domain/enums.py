from __future__ import annotations

from enum import Enum
from typing import Optional


class SeverityLevel(Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_label(cls, value: str) -> Optional["SeverityLevel"]:
        """Parse a qualitative label (case-insensitive). 'moderate' maps to MEDIUM."""
        label_map = {
            "CRITICAL": cls.CRITICAL,
            "HIGH": cls.HIGH,
            "MEDIUM": cls.MEDIUM,
            "MODERATE": cls.MEDIUM,
            "LOW": cls.LOW,
            "NEGLIGIBLE": cls.LOW,
            "UNKNOWN": cls.UNKNOWN,
        }
        return label_map.get(value.strip().upper())

    @property
    def rank(self) -> int:
        order = {
            SeverityLevel.CRITICAL: 4,
            SeverityLevel.HIGH: 3,
            SeverityLevel.MEDIUM: 2,
            SeverityLevel.LOW: 1,
            SeverityLevel.UNKNOWN: 0,
        }
        return order[self]


class SeverityType(Enum):
    CVSS_V2 = "CVSS_V2"
    CVSS_V3 = "CVSS_V3"
    CVSS_V4 = "CVSS_V4"
    UBUNTU = "Ubuntu"

    @classmethod
    def parse(cls, value: str) -> Optional["SeverityType"]:
        for member in cls:
            if member.value == value:
                return member
        return None


class ReferenceType(Enum):
    ADVISORY = "ADVISORY"
    ARTICLE = "ARTICLE"
    DETECTION = "DETECTION"
    DISCUSSION = "DISCUSSION"
    REPORT = "REPORT"
    FIX = "FIX"
    INTRODUCED = "INTRODUCED"
    GIT = "GIT"
    PACKAGE = "PACKAGE"
    EVIDENCE = "EVIDENCE"
    WEB = "WEB"
    OTHER = "OTHER"


class RangeType(Enum):
    ECOSYSTEM = "ECOSYSTEM"
    SEMVER = "SEMVER"
    GIT = "GIT"
    # Forward compatibility: range types this library does not interpret.
    UNSUPPORTED = "UNSUPPORTED"

    @classmethod
    def parse(cls, value: str) -> "RangeType":
        try:
            parsed = cls(value)
        except ValueError:
            return cls.UNSUPPORTED
        return parsed


class EventKind(Enum):
    INTRODUCED = "introduced"
    FIXED = "fixed"
    LAST_AFFECTED = "last_affected"
    LIMIT = "limit"

    @property
    def closes_interval(self) -> bool:
        return self in (EventKind.FIXED, EventKind.LAST_AFFECTED)


class Verdict(Enum):
    AFFECTED = "AFFECTED"
    NOT_AFFECTED = "NOT_AFFECTED"
    INDETERMINATE = "INDETERMINATE"


class AliasPolicy(Enum):
    REJECT = "reject"
    OVERWRITE = "overwrite"


class DocumentFormat(Enum):
    OSV = "OSV"
    CSAF = "CSAF"
    CVE = "CVE"
    UNKNOWN = "UNKNOWN"


class NoticeCode(Enum):
    UNKNOWN_ECOSYSTEM_TAG = "UnknownEcosystemTag"
    UNKNOWN_SEVERITY_TYPE = "UnknownSeverityType"
    MISSING_SCHEMA_VERSION = "MissingSchemaVersion"
