"""Pydantic v2 configuration models.

These models provide:
- Type-safe configuration loading
- Automatic validation
- Default values
- Environment variable override support
"""

from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pkgpublish.config.defaults import (
    DEFAULT_INFO_CONCURRENCY,
    DEFAULT_PUBLISH_CONCURRENCY,
    DEFAULT_TAG,
)

# Variables whose mere presence marks a CI run
CI_VENDOR_VARIABLES = (
    "CONTINUOUS_INTEGRATION",
    "BUILD_NUMBER",
    "RUN_ID",
    "GITHUB_ACTIONS",
    "GITLAB_CI",
    "BUILDKITE",
    "CIRCLECI",
    "TF_BUILD",
)


class Environment(BaseSettings):
    """Ambient process environment the publisher reacts to.

    Read fresh on construction; nothing here is configurable from a file.
    """

    npm_config_registry: str | None = Field(
        default=None,
        description="Registry override, forced onto every spawned package manager",
    )
    ci: str | None = Field(
        default=None,
        description="Generic CI marker; any value except 'false'/'0' means CI",
    )
    ci_vendor: str | None = Field(
        default=None,
        validation_alias=AliasChoices(*CI_VENDOR_VARIABLES),
        description="Set when any vendor-specific CI variable is present",
    )

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    @property
    def is_ci(self) -> bool:
        """True when no interactive operator can be expected."""
        if self.ci is not None and self.ci.strip().lower() not in ("", "false", "0"):
            return True
        return bool(self.ci_vendor)


class PublishOptionsConfig(BaseModel):
    """Options passed to every publish invocation."""

    tag: str = Field(
        default=DEFAULT_TAG,
        description="Distribution tag (npm publish --tag)",
    )
    access: Literal["public", "restricted"] | None = Field(
        default=None,
        description="Access level (npm publish --access); omitted when unset",
    )

    @field_validator("tag")
    @classmethod
    def validate_tag(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("tag must not be empty")
        return v.strip()


class ConcurrencyConfig(BaseModel):
    """Admission limits for registry traffic."""

    info: int = Field(
        default=DEFAULT_INFO_CONCURRENCY,
        ge=1,
        description="Maximum concurrent registry queries (publishes included)",
    )
    publish: int = Field(
        default=DEFAULT_PUBLISH_CONCURRENCY,
        ge=1,
        description="Maximum concurrent publish operations",
    )


class PublishConfig(BaseSettings):
    """Root configuration model for pkgpublish.yml.

    Supports environment variable overrides with PKGPUBLISH_ prefix.
    Example: PKGPUBLISH_PUBLISH__TAG=next
    """

    packages: list[str] = Field(
        default_factory=list,
        description="Package directories to publish; empty means workspace discovery",
    )
    publish: PublishOptionsConfig = Field(default_factory=PublishOptionsConfig)
    concurrency: ConcurrencyConfig = Field(default_factory=ConcurrencyConfig)

    model_config = SettingsConfigDict(
        env_prefix="PKGPUBLISH_",
        env_nested_delimiter="__",
        extra="ignore",
    )
