"""Multi-package publish run.

Coordinates a release of several packages:
1. Skip private packages
2. Query the registry for every package (404 means "not published yet")
3. Skip packages whose current version is already on the registry
4. Publish the rest concurrently, sharing one TwoFactorState
"""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path

from pkgpublish.concurrency import Gates, default_gates
from pkgpublish.config.defaults import DEFAULT_TAG
from pkgpublish.config.models import Environment
from pkgpublish.logger import Logger
from pkgpublish.logger import logger as default_logger
from pkgpublish.npm import PublishOptions, info_allow_404, publish
from pkgpublish.otp import AskQuestion, TwoFactorState
from pkgpublish.project import NodePackage


@dataclass(frozen=True)
class PublishedPackage:
    """Result for one package the run attempted to publish."""

    name: str
    version: str
    published: bool


def is_version_published(pkg_info: dict[str, object], version: str) -> bool:
    """Check whether a version appears in ``npm info`` output."""
    versions = pkg_info.get("versions")
    if isinstance(versions, list):
        return version in versions
    if isinstance(versions, str):
        return versions == version
    return pkg_info.get("version") == version


@dataclass
class PublishRun:
    """Publishes a set of packages under shared gates and 2FA state."""

    packages: list[NodePackage]
    two_factor_state: TwoFactorState
    tag: str = DEFAULT_TAG
    access: str | None = None
    environment: Environment = field(default_factory=Environment)
    gates: Gates = field(default_factory=lambda: default_gates)
    logger: Logger = field(default_factory=lambda: default_logger)
    ask: AskQuestion | None = None

    async def publish_package(self, package: NodePackage) -> PublishedPackage | None:
        """Publish one package unless its version is already on the registry.

        Returns:
            PublishedPackage, or None if the package was skipped

        Raises:
            RegistryError: If the registry query fails with anything but a 404
        """
        info = await info_allow_404(
            package.package_json,
            environment=self.environment,
            gates=self.gates,
            logger=self.logger,
        )
        if info.published and is_version_published(info.pkg_info, package.version):
            self.logger.info(
                f"{package.name} is not being published because version "
                f"{package.version} is already published on npm"
            )
            return None

        self.logger.info(f"Publishing {package.name} at {package.version}")
        outcome = await publish(
            package.name,
            PublishOptions(
                cwd=package.directory,
                tag=self.tag,
                access=self.access or package.access,
            ),
            self.two_factor_state,
            environment=self.environment,
            gates=self.gates,
            logger=self.logger,
            ask=self.ask,
        )
        return PublishedPackage(
            name=package.name,
            version=package.version,
            published=outcome.published,
        )

    async def run(self) -> list[PublishedPackage]:
        """Publish every non-private package concurrently.

        A RegistryError from any package propagates and ends the run.

        Returns:
            Results in package order, skipped packages omitted
        """
        candidates = []
        for package in self.packages:
            if package.private:
                self.logger.info(f"{package.name} is private, skipping")
                continue
            candidates.append(package)

        results = await asyncio.gather(*(self.publish_package(p) for p in candidates))
        return [r for r in results if r is not None]


def load_packages(directories: list[Path]) -> list[NodePackage]:
    """Load package.json for every directory, in order.

    Raises:
        PublishError: If a directory has no usable package.json
    """
    return [NodePackage(directory) for directory in directories]


async def publish_packages(
    packages: list[NodePackage],
    two_factor_state: TwoFactorState,
    tag: str = DEFAULT_TAG,
    access: str | None = None,
    environment: Environment | None = None,
    gates: Gates | None = None,
    logger: Logger | None = None,
    ask: AskQuestion | None = None,
) -> list[PublishedPackage]:
    """Publish every unpublished, non-private package; see PublishRun."""
    run = PublishRun(
        packages=packages,
        two_factor_state=two_factor_state,
        tag=tag,
        access=access,
        environment=environment or Environment(),
        gates=gates or default_gates,
        logger=logger or default_logger,
        ask=ask,
    )
    return await run.run()
