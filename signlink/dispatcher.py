"""
Dispatcher — command to signer, outcome to encoder.

One call to ``dispatch()`` does:
    1. No signer attached → not accepted, nothing launched.
    2. InvalidRequest → invalidRequest failure launched (if there is a
       callback) before returning; accepted.
    3. Command → exactly one signer coroutine scheduled as a task on the
       event loop; accepted without waiting.
    4. When the task finishes, its SigningOutcome goes to the encoder if
       the command had a callback, otherwise it is dropped.

"Accepted" means this protocol claims the URL, not that signing will
succeed. Each task captures its own command and callback; nothing is
shared between in-flight commands.

No retries. No timeouts. No cancellation API.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from dataclasses import dataclass
from typing import Any

from signlink.commands import (
    Command,
    InvalidRequest,
    SignMessage,
    SignPersonalMessage,
    SignTransaction,
)
from signlink.encoder import ResultEncoder
from signlink.errors import ErrorKind, classify_signer_exception
from signlink.signer import Signer, SigningOutcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchResult:
    """Result of dispatching one parsed request.

    Attributes:
        accepted: True if this protocol claimed the request.
        error: INVALID_REQUEST when the request was claimed but rejected,
            NONE otherwise.
    """

    accepted: bool
    error: ErrorKind = ErrorKind.NONE


class Dispatcher:
    """Routes parsed requests to an optional signer.

    Args:
        encoder: Encodes and launches callback URLs.
        signer: Signing provider. May be attached later; None means
            every request is ignored.
        loop: Event loop for signer tasks. Defaults to the running loop
            at dispatch time.
    """

    def __init__(
        self,
        encoder: ResultEncoder,
        signer: Signer | None = None,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._encoder = encoder
        self._signer = signer
        self._loop = loop
        self._pending: set[asyncio.Task[SigningOutcome | None]] = set()

    @property
    def signer(self) -> Signer | None:
        return self._signer

    @property
    def encoder(self) -> ResultEncoder:
        return self._encoder

    @property
    def pending(self) -> int:
        """Number of signer tasks still in flight."""
        return len(self._pending)

    def attach(self, signer: Signer) -> None:
        self._signer = signer

    def detach(self) -> None:
        """Drop the signer. In-flight tasks still complete."""
        self._signer = None

    def dispatch(self, request: Command | InvalidRequest) -> DispatchResult:
        """Dispatch one parsed request.

        Raises:
            RuntimeError: If a command must be scheduled and there is no
                running event loop and none was injected.
        """
        signer = self._signer
        if signer is None:
            logger.debug("ignoring %s: no signer attached", request.kind)
            return DispatchResult(accepted=False)

        if isinstance(request, InvalidRequest):
            logger.info(
                "rejecting %s: invalid %s", request.kind, ", ".join(request.problems)
            )
            if request.callback is not None:
                self._encoder.encode_failure(request.callback, ErrorKind.INVALID_REQUEST)
            return DispatchResult(accepted=True, error=ErrorKind.INVALID_REQUEST)

        loop = self._loop or asyncio.get_running_loop()
        task = loop.create_task(self._complete(signer, request))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return DispatchResult(accepted=True)

    async def drain(self) -> None:
        """Wait until every in-flight signer task has finished."""
        while self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    @staticmethod
    def _invoke(
        signer: Signer, command: Command
    ) -> Coroutine[Any, Any, SigningOutcome]:
        if isinstance(command, SignMessage):
            return signer.sign_message(command.message, command.address)
        if isinstance(command, SignPersonalMessage):
            return signer.sign_personal_message(command.message, command.address)
        if isinstance(command, SignTransaction):
            return signer.sign_transaction(command.transaction)
        raise TypeError(f"not a command: {command!r}")

    async def _complete(
        self, signer: Signer, command: Command
    ) -> SigningOutcome | None:
        try:
            outcome = await self._invoke(signer, command)
        except asyncio.CancelledError:
            logger.info("%s cancelled; no callback", command.kind)
            raise
        except Exception as exc:
            logger.warning("signer raised during %s", command.kind, exc_info=True)
            outcome = SigningOutcome.failure(classify_signer_exception(exc))

        if not isinstance(outcome, SigningOutcome):
            logger.warning(
                "signer returned %s for %s", type(outcome).__name__, command.kind
            )
            outcome = SigningOutcome.failure(ErrorKind.UNKNOWN)

        if command.callback is None:
            logger.debug("dropping %s result: no callback", command.kind)
            return outcome

        self._encoder.deliver(command.callback, outcome)
        return outcome
