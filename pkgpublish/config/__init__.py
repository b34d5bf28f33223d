"""Configuration management for the publish tool."""

from pkgpublish.config.loader import load_config
from pkgpublish.config.models import (
    ConcurrencyConfig,
    Environment,
    PublishConfig,
    PublishOptionsConfig,
)

__all__ = [
    "load_config",
    "Environment",
    "PublishConfig",
    "PublishOptionsConfig",
    "ConcurrencyConfig",
]
