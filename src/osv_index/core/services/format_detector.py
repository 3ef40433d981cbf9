from __future__ import annotations

import json
from typing import Any

from ..domain.enums import DocumentFormat


def detect_format(raw: bytes | str) -> DocumentFormat:
    """Classify a raw advisory document by its top-level keys.

    CSAF documents carry `document.csaf_version`, CVE records a top-level
    `dataType`, OSV records a top-level `id`. The checks run in that order
    since CSAF and CVE documents can also contain an `id` key.
    """
    try:
        text = raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw
        data: Any = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError):
        return DocumentFormat.UNKNOWN
    if not isinstance(data, dict):
        return DocumentFormat.UNKNOWN

    document = data.get("document")
    if isinstance(document, dict) and "csaf_version" in document:
        return DocumentFormat.CSAF
    if "dataType" in data:
        return DocumentFormat.CVE
    if "id" in data:
        return DocumentFormat.OSV
    return DocumentFormat.UNKNOWN
