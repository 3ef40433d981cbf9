from __future__ import annotations

import threading

import pytest

from osv_index.core.domain.enums import AliasPolicy
from osv_index.core.domain.errors import AliasConflict
from osv_index.infra.memory_index import InMemoryAdvisoryIndex
from osv_index.infra.osv_validator import validate


def test_insert_then_get_by_id_round_trip(index, sample_advisory):
    assert index.insert(sample_advisory) is None
    assert index.get_by_id("GHSA-wc9m-r3v6-9p5h") == sample_advisory
    assert "GHSA-wc9m-r3v6-9p5h" in index
    assert len(index) == 1


def test_get_by_alias(index, sample_advisory):
    index.insert(sample_advisory)
    for alias in sample_advisory.aliases:
        assert index.get_by_alias(alias).id == sample_advisory.id
    assert index.get_by_alias("CVE-1999-0001") is None


def test_find_by_package_sample(index, sample_advisory):
    index.insert(sample_advisory)
    found = index.find_by_package("SwiftURL", "github.com/sparkle-project/Sparkle")
    assert [a.id for a in found] == ["GHSA-wc9m-r3v6-9p5h"]
    assert index.find_by_package("SwiftURL", "github.com/other/Other") == []
    assert index.find_by_package("npm", "github.com/sparkle-project/Sparkle") == []


def test_missing_lookups_return_none(index):
    assert index.get_by_id("GHSA-none") is None
    assert index.get_by_alias("CVE-none") is None
    assert index.remove("GHSA-none") is None


def test_insert_is_idempotent(index, sample_advisory):
    index.insert(sample_advisory)
    snapshot = (index.ids(), index.aliases(), index.find_by_package("SwiftURL", "github.com/sparkle-project/Sparkle"))
    previous = index.insert(sample_advisory)
    assert previous == sample_advisory
    assert (index.ids(), index.aliases(), index.find_by_package("SwiftURL", "github.com/sparkle-project/Sparkle")) == snapshot


def test_alias_conflict_rejected_by_default(index, sample_advisory, make_record):
    index.insert(sample_advisory)
    other = validate(make_record("GHSA-xxxx-yyyy-zzzz", aliases=["CVE-2025-0509"]))
    with pytest.raises(AliasConflict) as exc:
        index.insert(other)
    assert exc.value.alias == "CVE-2025-0509"
    assert exc.value.existing_id == "GHSA-wc9m-r3v6-9p5h"
    assert exc.value.incoming_id == "GHSA-xxxx-yyyy-zzzz"
    # Rejected insert leaves no trace
    assert index.get_by_id("GHSA-xxxx-yyyy-zzzz") is None
    assert index.get_by_alias("CVE-2025-0509").id == "GHSA-wc9m-r3v6-9p5h"
    assert index.find_by_package("PyPI", "example") == []


def test_alias_conflict_overwrite_policy(sample_advisory, make_record):
    index = InMemoryAdvisoryIndex(default_policy=AliasPolicy.OVERWRITE)
    index.insert(sample_advisory)
    other = validate(make_record("GHSA-xxxx-yyyy-zzzz", aliases=["CVE-2025-0509"]))
    index.insert(other)
    assert index.get_by_alias("CVE-2025-0509").id == "GHSA-xxxx-yyyy-zzzz"
    # Removing the former owner must not drop the alias from its new owner
    index.remove("GHSA-wc9m-r3v6-9p5h")
    assert index.get_by_alias("CVE-2025-0509").id == "GHSA-xxxx-yyyy-zzzz"


def test_per_call_policy_overrides_default(index, sample_advisory, make_record):
    index.insert(sample_advisory)
    other = validate(make_record("GHSA-xxxx-yyyy-zzzz", aliases=["CVE-2025-0509"]))
    index.insert(other, policy=AliasPolicy.OVERWRITE)
    assert index.get_by_alias("CVE-2025-0509").id == "GHSA-xxxx-yyyy-zzzz"


def test_reinsert_replaces_whole_record(index, make_record):
    index.insert(validate(make_record("PYSEC-2024-1", aliases=["CVE-2024-1"], name="alpha")))
    updated = validate(make_record("PYSEC-2024-1", aliases=["CVE-2024-2"], name="beta"))
    previous = index.insert(updated)
    assert previous is not None and previous.aliases == ("CVE-2024-1",)
    assert index.get_by_id("PYSEC-2024-1") == updated
    assert index.get_by_alias("CVE-2024-1") is None
    assert index.get_by_alias("CVE-2024-2").id == "PYSEC-2024-1"
    assert index.find_by_package("PyPI", "alpha") == []
    assert [a.id for a in index.find_by_package("PyPI", "beta")] == ["PYSEC-2024-1"]


def test_remove_clears_every_map(index, sample_advisory):
    index.insert(sample_advisory)
    removed = index.remove(sample_advisory.id)
    assert removed == sample_advisory
    assert index.get_by_id(sample_advisory.id) is None
    assert index.get_by_alias("CVE-2025-0509") is None
    assert index.find_by_package("SwiftURL", "github.com/sparkle-project/Sparkle") == []
    assert len(index) == 0


def test_self_alias_is_ignored(index, make_record):
    a = validate(make_record("CVE-2024-1234", aliases=["CVE-2024-1234"]))
    index.insert(a)
    assert index.aliases() == {}


def test_pypi_names_are_normalized(index, make_record):
    index.insert(validate(make_record("PYSEC-2024-7", name="Foo_Bar")))
    assert [a.id for a in index.find_by_package("PyPI", "foo-bar")] == ["PYSEC-2024-7"]
    assert [a.id for a in index.find_by_package("PyPI", "FOO.BAR")] == ["PYSEC-2024-7"]


def test_list_by_ecosystem_and_clear(index, sample_advisory, make_record):
    index.insert(sample_advisory)
    index.insert(validate(make_record("PYSEC-2024-1")))
    assert [a.id for a in index.list()] == ["GHSA-wc9m-r3v6-9p5h", "PYSEC-2024-1"]
    assert [a.id for a in index.list(ecosystem="PyPI")] == ["PYSEC-2024-1"]
    index.clear()
    assert len(index) == 0
    assert index.aliases() == {}


def test_concurrent_readers_see_consistent_alias_and_id(make_record):
    index = InMemoryAdvisoryIndex()
    advisories = [validate(make_record(f"PYSEC-2024-{i}", aliases=[f"CVE-2024-{i}"])) for i in range(50)]
    errors: list[str] = []
    stop = threading.Event()

    def reader() -> None:
        while not stop.is_set():
            for i in range(50):
                hit = index.get_by_alias(f"CVE-2024-{i}")
                if hit is not None and hit.id != f"PYSEC-2024-{i}":
                    errors.append(f"alias CVE-2024-{i} resolved to {hit.id}")

    def writer() -> None:
        for _ in range(20):
            for a in advisories:
                index.insert(a)
            for a in advisories:
                index.remove(a.id)

    readers = [threading.Thread(target=reader) for _ in range(4)]
    for t in readers:
        t.start()
    writer()
    stop.set()
    for t in readers:
        t.join()
    assert errors == []
    assert len(index) == 0
