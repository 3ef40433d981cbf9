from __future__ import annotations

import logging

from ..domain.models import LookupResult
from ..services.query_engine import QueryEngine

logger = logging.getLogger(__name__)


class LookupPackageUseCase:
    def __init__(self, engine: QueryEngine) -> None:
        self._engine = engine

    def execute(self, ecosystem: str, name: str, version: str) -> LookupResult:
        result = self._engine.lookup(ecosystem, name, version)
        logger.info(
            f"{ecosystem}/{name}@{version}: {len(result.matches)} matches, "
            f"{len(result.indeterminate)} indeterminate"
        )
        return result
