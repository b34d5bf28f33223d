"""Default configuration values and generation.

Provides the built-in limits and a function to write a commented
starter configuration file.
"""

from pathlib import Path

import yaml

DEFAULT_TAG = "latest"

# Registry queries, publishes included
DEFAULT_INFO_CONCURRENCY = 40
DEFAULT_PUBLISH_CONCURRENCY = 10
# One OTP prompt at a time, process-wide
OTP_PROMPT_CONCURRENCY = 1

CONFIG_SEARCH_PATHS = [
    "pkgpublish.yml",
    "pkgpublish.yaml",
    "config/pkgpublish.yml",
    "pkgpublish.toml",
]


def generate_default_config() -> dict[str, object]:
    """Build the default configuration as plain data.

    Returns:
        Configuration dictionary matching PublishConfig
    """
    return {
        "packages": [],
        "publish": {
            "tag": DEFAULT_TAG,
            "access": None,
        },
        "concurrency": {
            "info": DEFAULT_INFO_CONCURRENCY,
            "publish": DEFAULT_PUBLISH_CONCURRENCY,
        },
    }


CONFIG_HEADER = """# ============================================================================
# Publish Configuration - pkgpublish.yml
# ============================================================================
# packages: package directories to publish (empty = workspace packages)
# Environment overrides use the PKGPUBLISH_ prefix, e.g. PKGPUBLISH_PUBLISH__TAG=next
# ============================================================================

"""


def write_default_config(output_path: Path) -> None:
    """Generate and write the default configuration file.

    Args:
        output_path: Path to write configuration

    Raises:
        ConfigurationError: If file cannot be written
    """
    from pkgpublish.exceptions import ConfigurationError

    config = generate_default_config()

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            f.write(CONFIG_HEADER)
            yaml.safe_dump(
                config,
                f,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
            )

    except PermissionError:
        raise ConfigurationError(
            f"Permission denied writing config to {output_path}",
            fix_hint="Check file permissions or use a different location",
        ) from None
    except OSError as e:
        raise ConfigurationError(
            f"Failed to write config to {output_path}",
            details=str(e),
            fix_hint="Check disk space and path validity",
        ) from e
