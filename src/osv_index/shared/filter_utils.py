from __future__ import annotations

from typing import Sequence, TYPE_CHECKING

from asteval import Interpreter

if TYPE_CHECKING:
    from ..core.domain.models import Advisory


def filter_advisories(advisories: Sequence[Advisory], filter_expr: str) -> list[Advisory]:
    """Filter advisories using an asteval expression.

    Available variables in filter expression:
    - id: str - advisory identifier
    - aliases: list[str] - alternate identifiers
    - cve_id: str | None - first CVE identifier (id or alias)
    - has_cve: bool - Whether a CVE identifier exists
    - severity: str | None - Most severe level (CRITICAL, HIGH, MEDIUM, LOW, UNKNOWN)
    - summary: str | None - Summary text
    - details: str | None - Details text
    - published_at: datetime | None - Published timestamp
    - modified_at: datetime - Modified timestamp
    - withdrawn: bool - Whether the advisory was withdrawn
    - ecosystems: list[str] - Ecosystems of the affected packages
    - packages: list[str] - Names of the affected packages
    - affected_count: int - Number of affected packages
    - reference_count: int - Number of references
    """
    aeval = Interpreter()
    filtered = []

    for a in advisories:
        level = a.severity_level
        ctx = {
            "id": a.id,
            "aliases": list(a.aliases),
            "cve_id": a.cve_id,
            "has_cve": a.cve_id is not None,
            "severity": level.name if level else None,
            "summary": a.summary,
            "details": a.details,
            "published_at": a.published,
            "modified_at": a.modified,
            "withdrawn": a.is_withdrawn,
            "ecosystems": list(a.ecosystems),
            "packages": [pkg.name for pkg in a.affected],
            "affected_count": len(a.affected),
            "reference_count": len(a.references),
        }

        for key, value in ctx.items():
            aeval.symtable[key] = value

        result = aeval(filter_expr)
        if aeval.error:
            error_msg = aeval.error[0].get_error()
            raise ValueError(f"Filter evaluation error: {error_msg}")
        if result:
            filtered.append(a)

    return filtered
