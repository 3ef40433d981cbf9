"""tests/osv_index/conftest.py

Common fixtures for the entire test suite.
"""

import copy
import json
from pathlib import Path

import pytest

from osv_index.core.services.range_evaluator import RangeEvaluator
from osv_index.infra.memory_index import InMemoryAdvisoryIndex
from osv_index.infra.osv_validator import OsvValidator
from osv_index.infra.versioning import VersionOrderingRegistry

FIXTURES = Path(__file__).parent / "fixtures"
SAMPLE_ID = "GHSA-wc9m-r3v6-9p5h"
SPARKLE = ("SwiftURL", "github.com/sparkle-project/Sparkle")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep OSV_INDEX_* variables from the developer's shell out of the tests."""
    import os

    for key in list(os.environ):
        if key.upper().startswith("OSV_INDEX_"):
            monkeypatch.delenv(key)


@pytest.fixture
def sample_bytes() -> bytes:
    return (FIXTURES / f"{SAMPLE_ID}.json").read_bytes()


@pytest.fixture
def sample_record(sample_bytes) -> dict:
    return json.loads(sample_bytes)


@pytest.fixture
def validator() -> OsvValidator:
    return OsvValidator()


@pytest.fixture
def sample_advisory(validator, sample_bytes):
    return validator.validate(sample_bytes)


@pytest.fixture
def index() -> InMemoryAdvisoryIndex:
    return InMemoryAdvisoryIndex()


@pytest.fixture
def evaluator() -> RangeEvaluator:
    return RangeEvaluator(VersionOrderingRegistry())


@pytest.fixture
def make_record():
    """Factory fixture building a minimal valid OSV record.

    Keyword arguments replace top-level fields; `events`, `ecosystem`, `name`
    and `range_type` shape the single affected entry.
    """

    def _make(
        id: str = "OSV-2024-0001",
        *,
        ecosystem: str = "PyPI",
        name: str = "example",
        range_type: str = "ECOSYSTEM",
        events: list[dict] | None = None,
        **overrides,
    ) -> dict:
        record = {
            "schema_version": "1.4.0",
            "id": id,
            "modified": "2024-03-01T00:00:00Z",
            "published": "2024-02-01T00:00:00Z",
            "aliases": [],
            "affected": [
                {
                    "package": {"ecosystem": ecosystem, "name": name},
                    "ranges": [
                        {
                            "type": range_type,
                            "events": copy.deepcopy(events) if events is not None else [{"introduced": "0"}, {"fixed": "1.0.0"}],
                        }
                    ],
                }
            ],
        }
        record.update(overrides)
        return record

    return _make
