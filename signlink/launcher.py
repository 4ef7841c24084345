"""
URL launcher protocol — the delivery boundary.

The encoder depends on this protocol, not on any host mechanism, so the
engine can run without an application host. ``launch()`` is
fire-and-forget: no return value, no delivery confirmation, and it must
not raise for delivery failures.

Concrete implementations:
    - RecordingLauncher (tests, embedding: keeps URLs in memory)
    - StdoutLauncher (debugging: prints URLs)
    - HttpxLauncher (http/https callbacks, delivered with an httpx GET)
    - BrowserLauncher (hands the URL to the OS handler via webbrowser)
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
import webbrowser
from datetime import datetime, timezone
from typing import Any, Callable, Protocol, TextIO, runtime_checkable

import httpx

from signlink.errors import SignlinkOperationalError

logger = logging.getLogger(__name__)

LAUNCHER_KINDS = ("stdout", "http", "browser", "recording")


@runtime_checkable
class URLLauncher(Protocol):
    """Delivers a URL to its destination process."""

    def launch(self, url: str) -> None:
        """Send the URL on its way. Never reports delivery."""
        ...


class RecordingLauncher:
    """Keeps every launched URL, in launch order."""

    def __init__(self) -> None:
        self.launched: list[str] = []

    def launch(self, url: str) -> None:
        self.launched.append(url)


class StdoutLauncher:
    """
    Debug launcher that prints callback URLs instead of opening them.

    Args:
        prefix: Prefix for output lines. Default "[signlink]".
        include_timestamp: Include ISO timestamp. Default False.
        json_output: Print one JSON object per line. Default False.
        output: Output stream. Defaults to sys.stdout.
    """

    def __init__(
        self,
        *,
        prefix: str = "[signlink]",
        include_timestamp: bool = False,
        json_output: bool = False,
        output: TextIO | None = None,
    ) -> None:
        self._prefix = prefix
        self._include_timestamp = include_timestamp
        self._json_output = json_output
        self._output = output or sys.stdout

    def launch(self, url: str) -> None:
        timestamp = (
            datetime.now(timezone.utc).isoformat() if self._include_timestamp else None
        )

        if self._json_output:
            data: dict[str, str] = {"launch": url}
            if timestamp:
                data["timestamp"] = timestamp
            line = json.dumps(data)
        else:
            parts = [self._prefix]
            if timestamp:
                parts.append(timestamp)
            parts.append(url)
            line = " ".join(parts)

        print(line, file=self._output)


class HttpxLauncher:
    """Delivers http/https callback URLs with a GET request.

    ``launch()`` schedules delivery on the running event loop and returns
    at once; failures are logged. ``deliver()`` is the awaitable form and
    raises SignlinkOperationalError.

    Args:
        timeout_s: Request timeout in seconds.
        headers: Additional headers to send.
    """

    def __init__(
        self,
        *,
        timeout_s: float = 30.0,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._timeout_s = timeout_s
        self._headers = headers or {}
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def launch(self, url: str) -> None:
        """Schedule delivery. Must be called with a running event loop."""
        task = asyncio.get_running_loop().create_task(self._deliver_logged(url))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for every scheduled delivery to finish."""
        while self._pending:
            await asyncio.gather(*self._pending)

    async def deliver(self, url: str) -> None:
        """GET the callback URL.

        Raises:
            SignlinkOperationalError: On unsupported scheme, timeout,
                connection failure, or HTTP status >= 400.
        """
        target = httpx.URL(url)
        if target.scheme not in ("http", "https"):
            raise SignlinkOperationalError(
                f"cannot deliver {target.scheme!r} urls over http",
                error_code="UNSUPPORTED_SCHEME",
                details={"scheme": target.scheme},
            )

        try:
            async with httpx.AsyncClient(timeout=self._timeout_s) as client:
                response = await client.get(target, headers=self._headers)
        except httpx.TimeoutException as e:
            raise SignlinkOperationalError(
                f"callback delivery timed out after {self._timeout_s}s",
                error_code="TIMEOUT",
                details={"host": target.host, "timeout_s": self._timeout_s},
            ) from e
        except httpx.ConnectError as e:
            raise SignlinkOperationalError(
                f"failed to connect to {target.host}",
                error_code="CONNECTION_FAILED",
                details={"host": target.host},
            ) from e
        except httpx.HTTPError as e:
            raise SignlinkOperationalError(
                f"HTTP error: {e}",
                error_code="HTTP_ERROR",
                details={"host": target.host, "error": str(e)},
            ) from e

        if response.status_code >= 400:
            raise SignlinkOperationalError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                error_code="HTTP_ERROR",
                details={"host": target.host, "status_code": response.status_code},
            )

    async def _deliver_logged(self, url: str) -> None:
        try:
            await self.deliver(url)
        except SignlinkOperationalError as e:
            # Query strings carry signed payloads; log the host only.
            logger.warning(
                "callback delivery failed (%s): %s", e.error_code, e.details.get("host")
            )


class BrowserLauncher:
    """Opens the URL with the host's registered handler.

    Args:
        opener: Callable with the ``webbrowser.open`` signature. Inject for
            tests.
    """

    def __init__(self, opener: Callable[[str], bool] | None = None) -> None:
        self._opener = opener or webbrowser.open

    def launch(self, url: str) -> None:
        if not self._opener(url):
            logger.warning("no handler accepted callback url")


def create_launcher(kind: str = "stdout", **options: Any) -> URLLauncher:
    """
    Create a launcher by kind.

    Args:
        kind: One of "stdout", "http", "browser", "recording".
        **options: Keyword arguments for the launcher constructor.

    Returns:
        A URLLauncher instance.

    Raises:
        ValueError: If kind is unknown.
    """
    if kind == "stdout":
        return StdoutLauncher(**options)
    if kind == "http":
        return HttpxLauncher(**options)
    if kind == "browser":
        return BrowserLauncher(**options)
    if kind == "recording":
        return RecordingLauncher(**options)
    raise ValueError(f"unknown launcher kind {kind!r}; expected one of {LAUNCHER_KINDS}")
