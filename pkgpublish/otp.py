"""One-time password state and acquisition.

A TwoFactorState lives for one publish session and is handed by
reference to every retry of every package in it. Prompts go through the
single-slot OTP gate, so concurrent publishes that all lack a token wait
on one prompt and share the answer.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from rich.prompt import Prompt

from pkgpublish.concurrency import Gates, default_gates
from pkgpublish.logger import Logger
from pkgpublish.logger import logger as default_logger

AskQuestion = Callable[[str], Awaitable[str]]


@dataclass
class TwoFactorState:
    """Shared 2FA state for one publish session.

    Attributes:
        token: Current one-time password, None when one must be prompted for
        is_required: Whether publishing needs an OTP; may be an awaitable
            (e.g. a pending profile lookup) that is resolved on first use
    """

    token: str | None = None
    is_required: bool | Awaitable[bool] = False

    async def required(self) -> bool:
        """Resolve is_required, awaiting it once if it is still pending."""
        if isinstance(self.is_required, bool):
            return self.is_required

        pending = asyncio.ensure_future(self.is_required)
        self.is_required = pending
        value = bool(await pending)
        if self.is_required is pending:
            self.is_required = value
        # mark_required() may have run while waiting; true never reverts
        return self.is_required is True or value

    def mark_required(self) -> None:
        self.is_required = True

    def invalidate_token(self) -> None:
        self.token = None


async def ask_question(message: str) -> str:
    """Read one line from the operator without blocking other tasks."""
    answer = await asyncio.to_thread(Prompt.ask, message)
    return answer.strip()


async def ask_for_otp_code(
    state: TwoFactorState,
    gates: Gates | None = None,
    logger: Logger | None = None,
    ask: AskQuestion | None = None,
) -> str:
    """Prompt for an OTP under the OTP gate and store it in state."""
    gates = gates or default_gates
    log = logger or default_logger
    ask = ask or ask_question

    async def prompt() -> str:
        # Another task may have prompted while this one waited for the gate
        if state.token is not None:
            return state.token
        log.info("This operation requires a one-time password from your authenticator.")
        value = await ask("Enter one-time password:")
        state.token = value
        return value

    return await gates.otp.run(prompt)


async def get_otp_code(
    state: TwoFactorState,
    gates: Gates | None = None,
    logger: Logger | None = None,
    ask: AskQuestion | None = None,
) -> str:
    """Return the known OTP, prompting for one if there is none."""
    if state.token is not None:
        return state.token
    return await ask_for_otp_code(state, gates=gates, logger=logger, ask=ask)
