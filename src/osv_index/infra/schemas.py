from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel


class OsvSeverity(BaseModel):
	"""Severity entry (e.g. a CVSS vector)"""
	type: str
	score: str | float


class OsvPackage(BaseModel):
	"""Identity of an affected package"""
	ecosystem: str
	name: str
	purl: Optional[str] = None


class OsvEvent(BaseModel):
	"""One boundary of a version range; exactly one field is expected to be set"""
	introduced: Optional[str] = None
	fixed: Optional[str] = None
	last_affected: Optional[str] = None
	limit: Optional[str] = None


class OsvRange(BaseModel):
	"""Affected version range"""
	type: str
	repo: Optional[str] = None
	events: list[OsvEvent]
	database_specific: Optional[dict[str, Any]] = None


class OsvAffected(BaseModel):
	"""Affected package with its ranges and explicit versions"""
	package: OsvPackage
	ranges: Optional[list[OsvRange]] = None
	versions: Optional[list[str]] = None
	ecosystem_specific: Optional[dict[str, Any]] = None
	database_specific: Optional[dict[str, Any]] = None


class OsvReference(BaseModel):
	"""External reference link"""
	type: str | None = None
	url: str


class OsvVulnerability(BaseModel):
	"""Top-level OSV record"""
	schema_version: Optional[str] = None
	id: str
	modified: str
	published: Optional[str] = None
	withdrawn: Optional[str] = None
	aliases: Optional[list[str]] = None
	related: Optional[list[str]] = None
	summary: Optional[str] = None
	details: Optional[str] = None
	severity: Optional[list[OsvSeverity]] = None
	affected: list[OsvAffected]
	references: Optional[list[OsvReference]] = None
	# Opaque passthrough: kept as a JSON mapping, never interpreted
	database_specific: Optional[dict[str, Any]] = None
