from __future__ import annotations

from datetime import datetime, timezone

import pytest

from osv_index.core.domain.enums import EventKind, ReferenceType, SeverityLevel
from osv_index.core.domain.models import (
    AffectedPackage,
    Advisory,
    DocumentSource,
    Event,
    IngestFailure,
    IngestReport,
    Reference,
    Severity,
)
from osv_index.shared.ecosystems import base_ecosystem

MODIFIED = datetime(2024, 3, 1, tzinfo=timezone.utc)


def test_with_updates_returns_new_instance():
    a = Advisory(id="PYSEC-2024-1", modified=MODIFIED)
    b = a.with_updates(summary="changed")
    assert a.summary is None
    assert b.summary == "changed"
    assert b.id == a.id


def test_source_is_ignored_by_equality():
    a = Advisory(id="PYSEC-2024-1", modified=MODIFIED)
    assert a == a.with_updates(source=DocumentSource(name="x.json"))


def test_cve_id_prefers_id_then_alias():
    assert Advisory(id="CVE-2024-1", modified=MODIFIED, aliases=("CVE-2024-2",)).cve_id == "CVE-2024-1"
    assert Advisory(id="GHSA-1", modified=MODIFIED, aliases=("PYSEC-1", "CVE-2024-2")).cve_id == "CVE-2024-2"
    assert Advisory(id="GHSA-1", modified=MODIFIED).cve_id is None


def test_severity_level_takes_most_severe_scored_entry():
    a = Advisory(
        id="GHSA-1",
        modified=MODIFIED,
        severity=(
            Severity(type="Ubuntu", score="medium", level=SeverityLevel.MEDIUM),
            Severity(type="VENDOR", score="?", recognized=False),
            Severity(type="CVSS_V3", score="...", level=SeverityLevel.CRITICAL),
        ),
    )
    assert a.severity_level is SeverityLevel.CRITICAL
    assert Advisory(id="GHSA-2", modified=MODIFIED).severity_level is None


def test_ecosystems_deduplicated_in_order():
    a = Advisory(
        id="GHSA-1",
        modified=MODIFIED,
        affected=(
            AffectedPackage(ecosystem="npm", name="a"),
            AffectedPackage(ecosystem="Debian:12", name="b"),
            AffectedPackage(ecosystem="npm", name="c"),
        ),
    )
    assert a.ecosystems == ("npm", "Debian:12")
    assert a.affected[1].base_ecosystem == "Debian"


def test_event_origin_and_dict():
    assert Event(EventKind.INTRODUCED, "0").is_origin
    assert not Event(EventKind.FIXED, "0").is_origin
    assert Event(EventKind.LAST_AFFECTED, "1.2").to_dict() == {"last_affected": "1.2"}


def test_reference_kind_falls_back_to_other():
    assert Reference(type="FIX", url="https://example.com").kind is ReferenceType.FIX
    assert Reference(type="BLOG", url="https://example.com").kind is ReferenceType.OTHER


def test_ingest_report_processed():
    report = IngestReport(inserted=2, updated=1)
    report.failures.append(IngestFailure(source=None, error=ValueError("x")))
    assert report.processed == 4


def test_opaque_bags_are_read_only_and_advisory_hashable():
    a = Advisory(
        id="GHSA-1",
        modified=MODIFIED,
        database_specific={"cwe_ids": ["CWE-79"], "nested": {"k": "v"}},
        affected=(AffectedPackage(ecosystem="npm", name="a", ecosystem_specific={"imports": ["x"]}),),
    )
    with pytest.raises(TypeError):
        a.database_specific["cwe_ids"] = []
    with pytest.raises(TypeError):
        a.database_specific["nested"]["k"] = "changed"
    with pytest.raises(TypeError):
        a.affected[0].ecosystem_specific["imports"] = []
    assert a.database_specific["cwe_ids"] == ("CWE-79",)
    assert a.database_specific == {"cwe_ids": ("CWE-79",), "nested": {"k": "v"}}
    assert hash(a) == hash(a.with_updates(database_specific={"other": 1}))
    assert {a, a.with_updates()} == {a}


def test_input_dict_is_copied():
    bag = {"severity": "HIGH"}
    a = Advisory(id="GHSA-1", modified=MODIFIED, database_specific=bag)
    bag["severity"] = "LOW"
    assert a.database_specific["severity"] == "HIGH"


def test_base_ecosystem_matches_shared_helper():
    assert AffectedPackage(ecosystem="Ubuntu:22.04:LTS", name="a").base_ecosystem == base_ecosystem("Ubuntu:22.04:LTS")
