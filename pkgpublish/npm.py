"""Registry queries and the publish orchestrator.

All registry traffic goes through the package manager executables, which
are asked for ``--json`` output. Only the parsed ``error`` field decides
success; exit codes are not trusted.

Publish flow for one package:
1. Detect the publish tool for the package directory
2. Build arguments, prompting for an OTP when 2FA is known to be required
3. Spawn the tool with ``npm_config_registry`` forced for the child
4. Parse the JSON that follows any lifecycle-script noise
5. On a missing or rejected OTP (outside CI), drop the token, mark 2FA
   as required and try again; any other error is final
"""

import asyncio
import json
from collections.abc import Awaitable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pkgpublish.concurrency import Gates, default_gates
from pkgpublish.config.defaults import DEFAULT_TAG
from pkgpublish.config.models import Environment
from pkgpublish.exceptions import RegistryError, ToolOutputError
from pkgpublish.logger import Logger
from pkgpublish.logger import logger as default_logger
from pkgpublish.otp import AskQuestion, TwoFactorState, get_otp_code
from pkgpublish.registry import get_correct_registry
from pkgpublish.tools import build_publish_args, get_publish_tool
from pkgpublish.utils.shell import spawn

# Text npm puts in the E401 detail when the OTP was wrong or expired
OTP_FLAG_HINT = "--otp=<code>"


@dataclass(frozen=True)
class PublishOptions:
    """How to publish one package directory."""

    cwd: Path
    tag: str = DEFAULT_TAG
    access: str | None = None


@dataclass(frozen=True)
class PublishOutcome:
    """Terminal result of one publish call."""

    published: bool


@dataclass
class PackageInfo:
    """Registry view of a package, as returned by info_allow_404()."""

    published: bool
    pkg_info: dict[str, Any] = field(default_factory=dict)


def json_parse(text: str, logger: Logger | None = None) -> Any:
    """Parse JSON printed by a package manager.

    Raises:
        ToolOutputError: If text is not valid JSON (the text is logged first)
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        (logger or default_logger).error("error parsing json:", text)
        raise ToolOutputError(
            "Package manager printed invalid JSON",
            output=text,
            details=str(e),
        ) from e


def parse_tool_output(stdout: str, logger: Logger | None = None) -> dict[str, Any]:
    """Parse ``--json`` output that may be preceded by lifecycle script output.

    Everything before the first ``{`` is discarded. Lifecycle scripts
    (prepublish, postpublish) print before the JSON payload.

    Raises:
        ToolOutputError: If no JSON object follows the noise
    """
    start = stdout.find("{")
    payload = stdout[start:] if start >= 0 else ""
    data = json_parse(payload, logger=logger)
    if not isinstance(data, dict):
        raise ToolOutputError(
            "Package manager output is not a JSON object",
            output=stdout,
        )
    return data


def registry_env(environment: Environment) -> dict[str, str]:
    """Environment override forcing the resolved registry onto a child process."""
    return {"npm_config_registry": get_correct_registry(env_registry=environment.npm_config_registry)}


async def get_token_is_required(
    environment: Environment | None = None,
    logger: Logger | None = None,
) -> bool:
    """Ask npm whether the logged-in account requires 2FA for writes.

    Returns:
        True only for the "auth-and-writes" 2FA mode
    """
    environment = environment or Environment()
    result = await spawn(
        ["npm", "profile", "get", "--json"],
        env=registry_env(environment),
    )
    profile = json_parse(result.stdout, logger=logger)
    if not isinstance(profile, dict) or profile.get("error"):
        return False
    tfa = profile.get("tfa")
    if not isinstance(tfa, dict) or not tfa.get("mode"):
        return False
    return bool(tfa["mode"] == "auth-and-writes")


def new_two_factor_state(environment: Environment | None = None) -> TwoFactorState:
    """Create session state whose is_required is a profile lookup started now.

    Must be called with a running event loop. In CI no prompt is possible,
    so the lookup is skipped.
    """
    environment = environment or Environment()
    is_required: bool | Awaitable[bool] = False
    if not environment.is_ci:
        is_required = asyncio.ensure_future(get_token_is_required(environment))
    return TwoFactorState(token=None, is_required=is_required)


async def get_package_info(
    package_json: dict[str, Any],
    environment: Environment | None = None,
    gates: Gates | None = None,
    logger: Logger | None = None,
) -> dict[str, Any]:
    """Run ``npm info`` for a package against its resolved registry.

    Some registries answer a missing package with an empty body rather
    than an E404; blank output is reported as E404.

    Returns:
        Parsed info object, or ``{"error": {...}}``
    """
    environment = environment or Environment()
    gates = gates or default_gates
    log = logger or default_logger
    name = package_json["name"]

    async def query() -> dict[str, Any]:
        log.info(f"npm info {name}")
        registry = get_correct_registry(package_json, environment.npm_config_registry)
        result = await spawn(["npm", "info", name, "--registry", registry, "--json"])
        if not result.stdout.strip():
            return {"error": {"code": "E404"}}
        info = json_parse(result.stdout, logger=log)
        if not isinstance(info, dict):
            raise ToolOutputError("npm info output is not a JSON object", output=result.stdout)
        return info

    return await gates.request.run(query)


async def info_allow_404(
    package_json: dict[str, Any],
    environment: Environment | None = None,
    gates: Gates | None = None,
    logger: Logger | None = None,
) -> PackageInfo:
    """Query a package, treating "not found" as "not published yet".

    Raises:
        RegistryError: For any error code other than E404; this is meant
            to stop the whole run
    """
    log = logger or default_logger
    name = package_json["name"]
    pkg_info = await get_package_info(
        package_json, environment=environment, gates=gates, logger=log
    )

    error = pkg_info.get("error")
    if error:
        code = error.get("code") if isinstance(error, dict) else None
        if code == "E404":
            log.warn(f'Received 404 for npm info "{name}"')
            return PackageInfo(published=False, pkg_info={})

        summary = error.get("summary") if isinstance(error, dict) else str(error)
        detail = error.get("detail") if isinstance(error, dict) else None
        log.error(f'Received an unknown error code: {code} for npm info "{name}"')
        log.error(summary)
        if detail:
            log.error(detail)
        raise RegistryError(
            f"npm info {name} failed with {code}",
            code=code,
            details=detail or summary,
        )

    return PackageInfo(published=True, pkg_info=pkg_info)


def _is_otp_error(error: dict[str, Any]) -> bool:
    code = error.get("code")
    if code == "EOTP":
        return True
    detail = error.get("detail")
    return code == "E401" and isinstance(detail, str) and OTP_FLAG_HINT in detail


async def _internal_publish(
    pkg_name: str,
    opts: PublishOptions,
    two_factor_state: TwoFactorState,
    environment: Environment,
    gates: Gates,
    logger: Logger,
    ask: AskQuestion | None,
) -> PublishOutcome:
    # Retries stay inside the slot publish() was admitted to; they never re-queue
    while True:
        publish_tool = await get_publish_tool(opts.cwd)

        otp_code: str | None = None
        if await two_factor_state.required() and not environment.is_ci:
            otp_code = await get_otp_code(two_factor_state, gates=gates, logger=logger, ask=ask)

        publish_args = build_publish_args(
            publish_tool, opts.cwd, opts.tag, access=opts.access, otp=otp_code
        )
        result = await spawn(
            [publish_tool.name, *publish_args],
            cwd=opts.cwd,
            env=registry_env(environment),
        )
        output = parse_tool_output(result.stdout, logger=logger)

        error = output.get("error")
        if not error:
            return PublishOutcome(published=True)
        if not isinstance(error, dict):
            error = {"summary": str(error)}

        # Missing OTP, or an OTP that was wrong or expired
        if _is_otp_error(error) and not environment.is_ci:
            if two_factor_state.token is not None:
                two_factor_state.invalidate_token()
            two_factor_state.mark_required()
            continue

        detail = error.get("detail")
        logger.error(
            f"an error occurred while publishing {pkg_name}: {error.get('code')}",
            error.get("summary"),
            f"\n{detail}" if detail else "",
        )
        return PublishOutcome(published=False)


async def publish(
    pkg_name: str,
    opts: PublishOptions,
    two_factor_state: TwoFactorState,
    environment: Environment | None = None,
    gates: Gates | None = None,
    logger: Logger | None = None,
    ask: AskQuestion | None = None,
) -> PublishOutcome:
    """Publish one package directory.

    Admitted by the request gate, then the publish gate, so a burst of
    publishes also counts against the registry query limit.

    Args:
        pkg_name: Package name, for reporting
        opts: Directory, tag and access level
        two_factor_state: Session OTP state, shared across packages
        environment: Ambient environment (read from the process if None)
        gates: Admission gates (process-wide defaults if None)
        logger: Log sink (console if None)
        ask: OTP prompt (terminal prompt if None)

    Returns:
        PublishOutcome; published=False for any non-OTP registry error

    Raises:
        ToolOutputError: If the tool's output contains no JSON object
        ShellError: If the tool cannot be started
    """
    environment = environment or Environment()
    gates = gates or default_gates
    log = logger or default_logger

    async def admitted() -> PublishOutcome:
        return await gates.publish.run(
            lambda: _internal_publish(
                pkg_name, opts, two_factor_state, environment, gates, log, ask
            )
        )

    return await gates.request.run(admitted)
