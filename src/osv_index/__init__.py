"""osv_index package: app/core/infra/shared.

Validate OSV advisories, index them in memory by id, alias and package, and
answer "is version V of package P affected" queries.
"""

from .app.api import AppConfig, OsvIndexClient
from .core.domain.enums import AliasPolicy, Verdict
from .core.domain.errors import AliasConflict, OsvIndexError, ValidationError
from .core.domain.models import Advisory, LookupResult, Match
from .infra.osv_validator import validate

import logging

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

__all__ = [
    "OsvIndexClient",
    "AppConfig",
    "Advisory",
    "AliasConflict",
    "AliasPolicy",
    "LookupResult",
    "Match",
    "OsvIndexError",
    "ValidationError",
    "Verdict",
    "validate",
]
