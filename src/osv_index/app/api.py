from __future__ import annotations

from threading import Event
from typing import Any, Iterable, Mapping, Sequence

from dependency_injector import providers

from .container import Container
from ..config.settings import AppConfig
from ..core.domain.enums import AliasPolicy, Verdict
from ..core.domain.models import Advisory, IngestReport, LookupResult, Range
from ..core.ports.commit_graph_port import CommitGraphPort
from ..core.usecases.ingest_advisories import RawDocument, SourcedDocument


class OsvIndexClient:
    """Client for validating, indexing and querying OSV advisories.

    The container and the in-memory index are created once and reused across
    calls; closing the client releases the index.

    Example:
        with OsvIndexClient() as client:
            client.ingest([("GHSA-wc9m-r3v6-9p5h.json", raw_bytes)])
            result = client.lookup("SwiftURL", "github.com/sparkle-project/Sparkle", "2.6.3")
            for match in result.matches:
                print(match.advisory.id)

        # Customize settings
        with OsvIndexClient(alias_policy="overwrite", include_withdrawn=True) as client:
            ...

        # Evaluate GIT ranges through a commit graph
        with OsvIndexClient(commit_graph=my_repo_graph) as client:
            ...
    """

    def __init__(
        self,
        *,
        alias_policy: AliasPolicy | str | None = None,
        require_schema_version: bool | None = None,
        include_withdrawn: bool | None = None,
        known_ecosystems_only: bool | None = None,
        commit_graph: CommitGraphPort | None = None,
    ):
        """Initialize the client.

        Args:
            alias_policy: "reject" (default) or "overwrite"; what happens when an
                         advisory claims an alias another advisory already owns.
                         If None, uses OSV_INDEX_ALIAS_POLICY or the default.
            require_schema_version: Reject records without schema_version.
                                    If None, uses OSV_INDEX_REQUIRE_SCHEMA_VERSION or False.
            include_withdrawn: Report withdrawn advisories from lookups.
                               If None, uses OSV_INDEX_INCLUDE_WITHDRAWN or False.
            known_ecosystems_only: Reject records naming an unknown ecosystem.
                                   If None, uses OSV_INDEX_KNOWN_ECOSYSTEMS_ONLY or False.
            commit_graph: Optional collaborator exposing is_ancestor(a, b), used to
                          evaluate GIT ranges. Without it GIT ranges are indeterminate.
        """
        self._container = Container()

        # Build config dict with only provided values
        config_dict: dict[str, Any] = {}
        if alias_policy is not None:
            config_dict["alias_policy"] = AliasPolicy(alias_policy)
        if require_schema_version is not None:
            config_dict["require_schema_version"] = require_schema_version
        if include_withdrawn is not None:
            config_dict["include_withdrawn"] = include_withdrawn
        if known_ecosystems_only is not None:
            config_dict["known_ecosystems_only"] = known_ecosystems_only

        # Environment is read here rather than at import time
        config = AppConfig(**config_dict)
        self._container.config.from_pydantic(config)
        if commit_graph is not None:
            self._container.commit_graph.override(providers.Object(commit_graph))

        self._container.init_resources()

    def validate(self, raw: RawDocument) -> Advisory:
        """Validate a raw OSV record without indexing it.

        Raises:
            ValidationError: naming the offending field and the record id.
        """
        return self._container.validator().validate(raw)

    def ingest(
        self,
        documents: Iterable[RawDocument | SourcedDocument],
        *,
        labels: Mapping[str, str] | None = None,
        cancel: Event | None = None,
    ) -> IngestReport:
        """Validate and index many documents, collecting per-record failures.

        Args:
            documents: Raw records (bytes, str or decoded mappings), or
                       (source_name, raw) pairs so failures can be traced.
            labels: Labels attached to every ingested advisory (a "type": "osv"
                    label is always added).
            cancel: Checked between records; once set, the run stops and the
                    report is marked as cancelled.

        Returns:
            IngestReport with inserted/updated counts and failures.
        """
        uc = self._container.ingest_uc()
        return uc.execute(documents, labels=labels, cancel=cancel)

    def insert(self, record: Advisory | RawDocument, *, policy: AliasPolicy | None = None) -> Advisory:
        """Validate (when given raw input) and insert a single record.

        Raises:
            ValidationError: the record is malformed.
            AliasConflict: an alias belongs to another advisory and the policy is REJECT.
        """
        advisory = record if isinstance(record, Advisory) else self.validate(record)
        self._container.index().insert(advisory, policy=policy)
        return advisory

    def remove(self, id: str) -> Advisory | None:
        return self._container.index().remove(id)

    def get(self, id: str) -> Advisory | None:
        """Return an advisory by id, falling back to alias resolution (e.g. a CVE id)."""
        index = self._container.index()
        return index.get_by_id(id) or index.get_by_alias(id)

    def get_by_id(self, id: str) -> Advisory | None:
        return self._container.index().get_by_id(id)

    def get_by_alias(self, alias: str) -> Advisory | None:
        return self._container.index().get_by_alias(alias)

    def find_by_package(self, ecosystem: str, name: str) -> Sequence[Advisory]:
        return self._container.index().find_by_package(ecosystem, name)

    def is_affected(self, ecosystem: str, rng: Range, version: str) -> Verdict:
        return self._container.evaluator().is_affected(ecosystem, rng, version)

    def lookup(self, ecosystem: str, name: str, version: str) -> LookupResult:
        """Return advisories affecting a package version.

        Example:
            with OsvIndexClient() as client:
                client.ingest(documents)
                result = client.lookup("PyPI", "jinja2", "2.10")
                confirmed = result.advisory_ids
                unverifiable = [m.advisory.id for m in result.indeterminate]
        """
        uc = self._container.lookup_uc()
        return uc.execute(ecosystem, name, version)

    def list_advisories(
        self,
        *,
        ecosystem: str | None = None,
        limit: int | None = None,
        skip: int = 0,
        filter_expr: str | None = None,
    ) -> Sequence[Advisory]:
        """Return indexed advisories ordered by id.

        Args:
            ecosystem: Only advisories with an affected package in this ecosystem.
            limit: Maximum number of results to return. If None, returns all results.
            skip: Number of results to skip (default: 0). Useful for pagination.
            filter_expr: Filter expression using Python syntax.
                        Examples: 'has_cve', 'severity == "HIGH"', '"npm" in ecosystems'.
                        Filter variables: id, aliases, cve_id, has_cve, severity, summary,
                        details, published_at, modified_at, withdrawn, ecosystems,
                        packages, affected_count, reference_count.

        Raises:
            ValueError: If filter_expr is invalid or contains syntax errors.
        """
        uc = self._container.list_uc()
        return uc.execute(ecosystem=ecosystem, limit=limit, skip=skip, filter_expr=filter_expr)

    def __len__(self) -> int:
        return len(self._container.index())

    def close(self) -> None:
        """Release the index. Use the context manager for automatic cleanup."""
        self._container.shutdown_resources()

    def __enter__(self) -> OsvIndexClient:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()


__all__ = [
    "OsvIndexClient",
    "AppConfig",
]
