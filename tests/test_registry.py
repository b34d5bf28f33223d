"""Unit tests for registry resolution.

Tests cover:
- Package publishConfig.registry precedence
- npm_config_registry environment override
- Fallback to the npm registry, including for the yarn mirror
"""

from pkgpublish.registry import (
    NPM_REGISTRY_URL,
    YARN_REGISTRY_URL,
    get_correct_registry,
    get_package_registry,
)

PRIVATE_REGISTRY = "https://npm.example.com/"


class TestGetCorrectRegistry:
    """Tests for get_correct_registry()."""

    def test_defaults_to_npm_registry(self) -> None:
        """Nothing configured resolves to the npm registry."""
        assert get_correct_registry() == NPM_REGISTRY_URL

    def test_environment_override_used(self) -> None:
        """The environment override applies when the package sets nothing."""
        assert get_correct_registry(env_registry=PRIVATE_REGISTRY) == PRIVATE_REGISTRY

    def test_package_override_beats_environment(self) -> None:
        """publishConfig.registry wins over npm_config_registry."""
        package_json = {
            "name": "pkg",
            "publishConfig": {"registry": "https://npm.pkg.github.com"},
        }
        result = get_correct_registry(package_json, env_registry=PRIVATE_REGISTRY)
        assert result == "https://npm.pkg.github.com"

    def test_yarn_mirror_from_environment_replaced(self) -> None:
        """The yarn mirror resolves to the npm registry."""
        assert get_correct_registry(env_registry=YARN_REGISTRY_URL) == NPM_REGISTRY_URL

    def test_yarn_mirror_from_package_replaced(self) -> None:
        """The yarn mirror is replaced even when the package asks for it."""
        package_json = {"name": "pkg", "publishConfig": {"registry": YARN_REGISTRY_URL}}
        assert get_correct_registry(package_json, PRIVATE_REGISTRY) == NPM_REGISTRY_URL

    def test_empty_environment_override_ignored(self) -> None:
        """An empty npm_config_registry counts as unset."""
        assert get_correct_registry(env_registry="") == NPM_REGISTRY_URL


class TestGetPackageRegistry:
    """Tests for get_package_registry()."""

    def test_missing_publish_config(self) -> None:
        assert get_package_registry({"name": "pkg"}) is None

    def test_malformed_publish_config(self) -> None:
        """A non-object publishConfig is ignored."""
        assert get_package_registry({"name": "pkg", "publishConfig": "nope"}) is None

    def test_none_package_json(self) -> None:
        assert get_package_registry(None) is None
