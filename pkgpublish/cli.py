"""Command-line interface for the publish tool.

Provides commands for:
- publish: Publish packages that are not on the registry yet
- info: Show which package versions are already published
- init-config: Generate configuration
"""

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from pkgpublish import __version__
from pkgpublish.concurrency import Gates
from pkgpublish.config.defaults import DEFAULT_TAG, write_default_config
from pkgpublish.config.loader import load_config
from pkgpublish.config.models import Environment, PublishConfig
from pkgpublish.exceptions import PkgPublishError, PublishError
from pkgpublish.npm import info_allow_404, new_two_factor_state
from pkgpublish.project import NodePackage, get_workspace_packages
from pkgpublish.utils.shell import ShellError
from pkgpublish.workflow import (
    PublishedPackage,
    is_version_published,
    load_packages,
    publish_packages,
)

# Create Typer app
app = typer.Typer(
    name="pkgpublish",
    help="Publish npm packages with pnpm/yarn/npm, handling 2FA one-time passwords",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for formatted output
console = Console()


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"pkgpublish version {__version__}")
        raise typer.Exit()


def resolve_package_dirs(
    arguments: list[Path] | None,
    cfg: PublishConfig,
    project_root: Path,
) -> list[Path]:
    """Decide which package directories a command operates on.

    Priority: command-line arguments, configured packages, workspace
    packages, then the project root itself.

    Raises:
        PublishError: If nothing to publish is found
    """
    if arguments:
        return [Path(p) for p in arguments]
    if cfg.packages:
        return [project_root / p for p in cfg.packages]

    workspace_packages = get_workspace_packages(project_root)
    if workspace_packages:
        return workspace_packages
    if (project_root / "package.json").exists():
        return [project_root]

    raise PublishError(
        f"No packages found in {project_root}",
        fix_hint="Pass package directories or list them under 'packages' in pkgpublish.yml",
    )


def display_publish_results(results: list[PublishedPackage]) -> bool:
    """Display publish results in a formatted table.

    Returns:
        True if every attempted package was published
    """
    if not results:
        console.print("[yellow]No unpublished packages to publish[/yellow]")
        return True

    table = Table(title="Publish Results")
    table.add_column("Status", style="bold", width=8)
    table.add_column("Package", style="cyan")
    table.add_column("Version")

    for result in results:
        status = "[green]OK[/green]" if result.published else "[red]FAIL[/red]"
        table.add_row(status, result.name, result.version)

    console.print(table)
    return all(r.published for r in results)


async def run_publish(
    packages: list[NodePackage],
    cfg: PublishConfig,
    otp: str | None,
) -> list[PublishedPackage]:
    environment = Environment()
    two_factor_state = new_two_factor_state(environment)
    if otp:
        two_factor_state.token = otp

    return await publish_packages(
        packages,
        two_factor_state,
        tag=cfg.publish.tag,
        access=cfg.publish.access,
        environment=environment,
        gates=Gates.with_limits(cfg.concurrency.info, cfg.concurrency.publish),
    )


@app.callback()
def main(
    version: bool = typer.Option(  # noqa: B008
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Publish npm packages through the package manager the project uses."""
    pass


@app.command()
def publish(
    packages: list[Path] | None = typer.Argument(  # noqa: B008
        None,
        help="Package directories (default: configured or workspace packages)",
    ),
    tag: str | None = typer.Option(  # noqa: B008
        None,
        "--tag",
        "-t",
        help=f"Distribution tag (default: {DEFAULT_TAG})",
    ),
    access: str | None = typer.Option(  # noqa: B008
        None,
        "--access",
        help="Access level: public or restricted",
    ),
    otp: str | None = typer.Option(  # noqa: B008
        None,
        "--otp",
        help="One-time password to try before prompting",
    ),
    config: Path | None = typer.Option(  # noqa: B008
        None,
        "--config",
        "-c",
        help="Path to configuration file",
    ),
) -> None:
    """Publish every package whose current version is not on the registry.

    Examples:
        pkgpublish publish
        pkgpublish publish packages/core --tag next
        pkgpublish publish --otp 123456
    """
    try:
        cfg = load_config(config)
        overrides: dict[str, str] = {}
        if tag:
            overrides["tag"] = tag
        if access:
            overrides["access"] = access
        if overrides:
            cfg = PublishConfig(
                packages=cfg.packages,
                publish={**cfg.publish.model_dump(), **overrides},
                concurrency=cfg.concurrency,
            )

        directories = resolve_package_dirs(packages, cfg, Path.cwd())
        results = asyncio.run(run_publish(load_packages(directories), cfg, otp))

    except PkgPublishError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=e.exit_code) from None
    except ShellError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from None
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=2) from None

    if not display_publish_results(results):
        console.print("\n[red]Some packages failed to publish.[/red]")
        raise typer.Exit(code=1)


@app.command()
def info(
    packages: list[Path] | None = typer.Argument(  # noqa: B008
        None,
        help="Package directories (default: configured or workspace packages)",
    ),
    config: Path | None = typer.Option(  # noqa: B008
        None,
        "--config",
        "-c",
        help="Path to configuration file",
    ),
) -> None:
    """Show whether each package's current version is on the registry."""
    try:
        cfg = load_config(config)
        directories = resolve_package_dirs(packages, cfg, Path.cwd())
        loaded = load_packages(directories)

        async def query_all() -> list[bool]:
            environment = Environment()
            gates = Gates.with_limits(cfg.concurrency.info, cfg.concurrency.publish)
            infos = await asyncio.gather(
                *(
                    info_allow_404(p.package_json, environment=environment, gates=gates)
                    for p in loaded
                )
            )
            return [
                i.published and is_version_published(i.pkg_info, p.version)
                for i, p in zip(infos, loaded, strict=True)
            ]

        published = asyncio.run(query_all())

    except PkgPublishError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=e.exit_code) from None
    except ShellError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from None

    table = Table(title="Registry Status")
    table.add_column("Package", style="cyan")
    table.add_column("Version")
    table.add_column("Published")
    for package, is_published in zip(loaded, published, strict=True):
        table.add_row(
            package.name,
            package.version,
            "[green]yes[/green]" if is_published else "[yellow]no[/yellow]",
        )
    console.print(table)


@app.command(name="init-config")
def init_config(
    output: Path = typer.Option(  # noqa: B008
        Path("pkgpublish.yml"),
        "--output",
        "-o",
        help="Output path for configuration file",
    ),
    force: bool = typer.Option(  # noqa: B008
        False,
        "--force",
        "-f",
        help="Overwrite existing configuration",
    ),
) -> None:
    """Generate a publish configuration file.

    Examples:
        pkgpublish init-config
        pkgpublish init-config -o config/pkgpublish.yml
    """
    if output.exists() and not force:
        console.print(f"[red]Configuration already exists:[/red] {output}")
        console.print("Use --force to overwrite")
        raise typer.Exit(code=1)

    try:
        write_default_config(output)
        console.print(f"[green]Configuration written to:[/green] {output}")

    except PkgPublishError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=e.exit_code) from None


if __name__ == "__main__":
    app()
