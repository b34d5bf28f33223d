"""Effective registry URL resolution."""

from typing import Any

NPM_REGISTRY_URL = "https://registry.npmjs.org"

# Mirror of the npm registry; always resolved to NPM_REGISTRY_URL.
YARN_REGISTRY_URL = "https://registry.yarnpkg.com"


def get_package_registry(package_json: dict[str, Any] | None) -> str | None:
    """Return ``publishConfig.registry`` from a parsed package.json, if any."""
    if not package_json:
        return None
    publish_config = package_json.get("publishConfig")
    if not isinstance(publish_config, dict):
        return None
    registry = publish_config.get("registry")
    return registry if isinstance(registry, str) and registry else None


def get_correct_registry(
    package_json: dict[str, Any] | None = None,
    env_registry: str | None = None,
) -> str:
    """Compute the registry a package is published to and queried from.

    The package's own ``publishConfig.registry`` wins over the
    ``npm_config_registry`` environment override. Nothing set, or the
    yarn mirror, resolves to the npm registry.

    Args:
        package_json: Parsed package.json of the package, if any
        env_registry: Registry override from the environment, if any

    Returns:
        Registry URL
    """
    registry = get_package_registry(package_json) or env_registry
    if not registry or registry == YARN_REGISTRY_URL:
        return NPM_REGISTRY_URL
    return registry
