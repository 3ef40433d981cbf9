from __future__ import annotations

import logging
from typing import Sequence

from ..domain.models import Advisory
from ..ports.index_port import AdvisoryIndexPort
from ...shared.filter_utils import filter_advisories

logger = logging.getLogger(__name__)


class ListAdvisoriesUseCase:
    def __init__(self, index: AdvisoryIndexPort) -> None:
        self._index = index

    def execute(
        self,
        *,
        ecosystem: str | None = None,
        limit: int | None = None,
        skip: int = 0,
        filter_expr: str | None = None,
    ) -> Sequence[Advisory]:
        logger.info(f"Listing advisories: ecosystem={ecosystem}, limit={limit}, skip={skip}, filter={filter_expr}")
        items = self._index.list(ecosystem=ecosystem)

        if filter_expr:
            items = filter_advisories(items, filter_expr)
            logger.debug(f"{len(items)} advisories matched filter '{filter_expr}'")

        result = list(items[skip:])
        if limit is not None:
            result = result[:limit]
        logger.info(f"Found {len(result)} advisories")
        return result
