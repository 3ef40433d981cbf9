from __future__ import annotations

import json

import pytest

from osv_index.core.domain.enums import DocumentFormat
from osv_index.core.services.format_detector import detect_format


def test_sample_is_osv(sample_bytes):
    assert detect_format(sample_bytes) is DocumentFormat.OSV


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"document": {"csaf_version": "2.0"}, "vulnerabilities": []}, DocumentFormat.CSAF),
        ({"dataType": "CVE_RECORD", "cveMetadata": {"cveId": "CVE-2024-1"}}, DocumentFormat.CVE),
        ({"id": "GO-2022-0001", "modified": "2022-01-01T00:00:00Z"}, DocumentFormat.OSV),
        ({"spdxVersion": "SPDX-2.3"}, DocumentFormat.UNKNOWN),
        ([{"id": "GHSA-1"}], DocumentFormat.UNKNOWN),
    ],
)
def test_detect_by_top_level_keys(payload, expected):
    assert detect_format(json.dumps(payload).encode("utf-8")) is expected


def test_csaf_checked_before_id():
    payload = {"id": "x", "document": {"csaf_version": "2.0"}}
    assert detect_format(json.dumps(payload)) is DocumentFormat.CSAF


def test_non_json_is_unknown():
    assert detect_format(b"<xml/>") is DocumentFormat.UNKNOWN
