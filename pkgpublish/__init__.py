"""Publish npm packages through npm, pnpm or yarn with 2FA handling."""

__version__ = "0.1.0"

from pkgpublish.exceptions import (
    ConfigurationError,
    PkgPublishError,
    PublishError,
    RegistryError,
    ToolOutputError,
)

__all__ = [
    "__version__",
    "PkgPublishError",
    "ConfigurationError",
    "ToolOutputError",
    "PublishError",
    "RegistryError",
]
