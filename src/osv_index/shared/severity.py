from __future__ import annotations

import logging
from typing import Optional

from cvss import CVSS2, CVSS3, CVSS4
from cvss.exceptions import CVSSError

from ..core.domain.enums import SeverityLevel, SeverityType

logger = logging.getLogger(__name__)


def map_score_to_severity(score: float) -> Optional[SeverityLevel]:
	if score >= 9.0:
		return SeverityLevel.CRITICAL
	if score >= 7.0:
		return SeverityLevel.HIGH
	if score >= 4.0:
		return SeverityLevel.MEDIUM
	if score > 0.0:
		return SeverityLevel.LOW
	return None


def _base_score(vector: str) -> Optional[float]:
	u = vector.upper()
	if u.startswith("CVSS:4.0/"):
		return float(CVSS4(vector).base_score)
	if u.startswith("CVSS:3."):
		return float(CVSS3(vector).scores()[0])
	# CVSS v2 vectors carry no "CVSS:" prefix
	if u.startswith("AV:"):
		return float(CVSS2(vector).scores()[0])
	return None


def severity_from_osv_score(type_tag: str, score: object) -> Optional[SeverityLevel]:
	"""Convert an OSV severity entry into a SeverityLevel.

	Accepts:
	- CVSS v2/v3/v4 vector strings, base score computed with the cvss library
	- numeric scores (float or numeric string)
	- qualitative labels (Ubuntu priorities, CRITICAL/HIGH/...)

	Returns None when the score cannot be interpreted; the entry is still kept
	on the advisory as written.
	"""
	if isinstance(score, (int, float)):
		return map_score_to_severity(float(score))
	if not isinstance(score, str) or not score.strip():
		return None
	value = score.strip()

	kind = SeverityType.parse(type_tag)
	if kind is SeverityType.UBUNTU:
		return SeverityLevel.from_label(value)

	try:
		base = _base_score(value)
	except CVSSError as exc:
		logger.debug(f"Unparseable CVSS vector {value!r}: {exc}")
		return None
	if base is not None:
		return map_score_to_severity(base)

	try:
		return map_score_to_severity(float(value))
	except ValueError:
		return SeverityLevel.from_label(value)
