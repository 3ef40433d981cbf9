from __future__ import annotations

from typing import Optional


class OsvIndexError(Exception):
    """Base class for every error raised by osv_index."""


class ValidationError(OsvIndexError):
    """A raw record was rejected; it never enters the index.

    The message always names the offending field and, when it could be read,
    the record id.
    """

    def __init__(self, message: str, *, field: str, record_id: Optional[str] = None) -> None:
        self.field = field
        self.record_id = record_id
        self.reason = message
        where = f"{record_id or '<unknown id>'}: {field}"
        super().__init__(f"{where}: {message}")


class MalformedDocument(ValidationError):
    pass


class MissingField(ValidationError):
    pass


class InvalidIdentifier(ValidationError):
    pass


class MalformedTimestamp(ValidationError):
    pass


class InvalidRange(ValidationError):
    pass


class UnknownEcosystemTag(ValidationError):
    """Only raised when the validator is configured to reject unknown ecosystems."""


class AliasConflict(OsvIndexError):
    def __init__(self, alias: str, existing_id: str, incoming_id: str) -> None:
        self.alias = alias
        self.existing_id = existing_id
        self.incoming_id = incoming_id
        super().__init__(f"alias {alias} already maps to {existing_id}; refusing to map it to {incoming_id}")


class UnsupportedFormat(OsvIndexError):
    pass


class UnsupportedVersion(OsvIndexError):
    """A version string cannot be ordered by the selected version ordering."""

    def __init__(self, version: str, ordering: str) -> None:
        self.version = version
        self.ordering = ordering
        super().__init__(f"{ordering} cannot order version {version!r}")
