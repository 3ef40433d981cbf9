from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.domain.enums import AliasPolicy


class AppConfig(BaseSettings):
    """Application configuration with automatic environment variable loading.

    All settings can be overridden via environment variables with the OSV_INDEX_ prefix.
    For example:
        - OSV_INDEX_ALIAS_POLICY=overwrite
        - OSV_INDEX_REQUIRE_SCHEMA_VERSION=true
        - OSV_INDEX_INCLUDE_WITHDRAWN=true
        - OSV_INDEX_KNOWN_ECOSYSTEMS_ONLY=true

    Alternatively, settings can be provided programmatically:
        OsvIndexClient(alias_policy="overwrite")
    """

    model_config = SettingsConfigDict(
        env_prefix="OSV_INDEX_",
        case_sensitive=False,
        extra="forbid",
    )

    alias_policy: AliasPolicy = Field(
        default=AliasPolicy.REJECT,
        description="What to do when an inserted advisory claims an alias owned by another advisory",
    )

    require_schema_version: bool = Field(
        default=False,
        description="Reject records without schema_version instead of recording a notice",
    )

    include_withdrawn: bool = Field(
        default=False,
        description="Report withdrawn advisories from package lookups",
    )

    known_ecosystems_only: bool = Field(
        default=False,
        description="Reject records naming an ecosystem outside the OSV list instead of recording a notice",
    )
