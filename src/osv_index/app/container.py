from __future__ import annotations

import logging

from dependency_injector import containers, providers

from ..config.settings import AppConfig
from ..core.domain.enums import AliasPolicy
from ..core.services.query_engine import QueryEngine
from ..core.services.range_evaluator import RangeEvaluator
from ..core.usecases.ingest_advisories import IngestAdvisoriesUseCase
from ..core.usecases.list_advisories import ListAdvisoriesUseCase
from ..core.usecases.lookup_package import LookupPackageUseCase
from ..infra.memory_index import InMemoryAdvisoryIndex
from ..infra.osv_validator import OsvValidator
from ..infra.versioning import VersionOrderingRegistry

logger = logging.getLogger(__name__)


def index_resource(alias_policy):
	policy = AliasPolicy(alias_policy)
	logger.info(f"Initializing advisory index (alias policy: {policy.value})")
	index = InMemoryAdvisoryIndex(default_policy=policy)
	try:
		yield index
	finally:
		logger.debug(f"Releasing advisory index ({len(index)} advisories)")
		index.clear()


class Container(containers.DeclarativeContainer):
	config = providers.Configuration(pydantic_settings=[AppConfig()])

	# Commit graph collaborator for GIT ranges; override with an object exposing is_ancestor()
	commit_graph = providers.Object(None)

	orderings = providers.Singleton(VersionOrderingRegistry, commit_graph=commit_graph)

	validator = providers.Singleton(
		OsvValidator,
		require_schema_version=config.require_schema_version,
		known_ecosystems_only=config.known_ecosystems_only,
	)

	index = providers.Resource(index_resource, alias_policy=config.alias_policy)

	evaluator = providers.Singleton(RangeEvaluator, orderings=orderings)

	query_engine = providers.Singleton(
		QueryEngine,
		index=index,
		evaluator=evaluator,
		include_withdrawn=config.include_withdrawn,
	)

	ingest_uc = providers.Factory(IngestAdvisoriesUseCase, index=index, validator=validator)
	list_uc = providers.Factory(ListAdvisoriesUseCase, index=index)
	lookup_uc = providers.Factory(LookupPackageUseCase, engine=query_engine)
