"""
Signing engine — the ``handle(url)`` entry point.

Composes parser, dispatcher and encoder. Holds no per-command state; the
only long-lived binding is the optional signer.

    engine = SigningEngine(signer=wallet, launcher=StdoutLauncher())
    if not engine.handle(url):
        ...  # not ours: let the host try another handler
"""

from __future__ import annotations

import asyncio
from collections.abc import Collection

from signlink.commands import Command, InvalidRequest
from signlink.config import EngineConfig
from signlink.dispatcher import Dispatcher, DispatchResult
from signlink.encoder import ResultEncoder
from signlink.errors import ErrorFormat
from signlink.launcher import URLLauncher
from signlink.parser import parse
from signlink.signer import Signer


class SigningEngine:
    """URL command protocol engine.

    Args:
        signer: Signing provider, or None until one is attached.
        launcher: Delivers callback URLs.
        schemes: Optional allow-list of inbound URL schemes.
        error_format: Symbolic (default) or numeric error identifiers.
        loop: Event loop for signer tasks (default: running loop).
    """

    def __init__(
        self,
        signer: Signer | None,
        launcher: URLLauncher,
        *,
        schemes: Collection[str] | None = None,
        error_format: ErrorFormat = ErrorFormat.SYMBOLIC,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._schemes = frozenset(s.lower() for s in schemes) if schemes else None
        self._dispatcher = Dispatcher(
            ResultEncoder(launcher, error_format=error_format),
            signer,
            loop=loop,
        )

    @classmethod
    def from_config(
        cls,
        config: EngineConfig,
        signer: Signer | None = None,
        *,
        launcher: URLLauncher | None = None,
    ) -> SigningEngine:
        return cls(
            signer,
            launcher if launcher is not None else config.build_launcher(),
            schemes=config.schemes,
            error_format=config.error_format,
        )

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    @property
    def signer(self) -> Signer | None:
        return self._dispatcher.signer

    def attach(self, signer: Signer) -> None:
        self._dispatcher.attach(signer)

    def detach(self) -> None:
        self._dispatcher.detach()

    def parse(self, url: str) -> Command | InvalidRequest | None:
        return parse(url, schemes=self._schemes)

    def dispatch(self, url: str) -> DispatchResult:
        """Parse and dispatch, returning the full result.

        Unlike ``handle()``, this exposes whether a claimed request was
        rejected as invalid.
        """
        request = self.parse(url)
        if request is None:
            return DispatchResult(accepted=False)
        return self._dispatcher.dispatch(request)

    def handle(self, url: str) -> bool:
        """Handle a command URL.

        Returns:
            True if the URL was claimed by this protocol (even if the
            request was invalid); False if it is not a command URL or no
            signer is attached.
        """
        return self.dispatch(url).accepted

    async def drain(self) -> None:
        """Wait for all in-flight signing requests to complete."""
        await self._dispatcher.drain()
