"""
Result encoder — signing outcome to callback URL.

Appends exactly one query item to the caller's callback URL and hands the
result to the URL launcher:

    success:  <callback>?result=<base64 signed payload>
    failure:  <callback>?error=<error identifier>

The callback is otherwise left untouched: existing query items keep their
original encoding and order, and the new item goes before any fragment.

A callback that does not parse is dropped silently (logged). There is
nobody left to report to. No scheme or origin checks are made; whatever
the launcher can open is accepted.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from signlink.errors import ErrorFormat, ErrorKind, error_identifier
from signlink.launcher import URLLauncher
from signlink.signer import SigningOutcome

logger = logging.getLogger(__name__)

# Characters left literal in appended values. Everything else (including
# "+", which form decoders read as a space) is percent-encoded.
_VALUE_SAFE = "/="


def append_query_item(callback: str, name: str, value: str) -> str | None:
    """Append ``name=value`` to a callback URL.

    Args:
        callback: Caller-supplied callback URL.
        name: Query item name.
        value: Unencoded query item value.

    Returns:
        The new URL, or None if the callback cannot be decomposed.
    """
    try:
        httpx.URL(callback)
    except httpx.InvalidURL:
        return None

    base, hash_sign, fragment = callback.partition("#")
    item = f"{quote(name, safe='')}={quote(value, safe=_VALUE_SAFE)}"
    if "?" not in base:
        base = f"{base}?{item}"
    elif base.endswith(("?", "&")):
        base = f"{base}{item}"
    else:
        base = f"{base}&{item}"
    return f"{base}{hash_sign}{fragment}"


class ResultEncoder:
    """Builds callback URLs and launches them.

    Args:
        launcher: Where finished callback URLs are sent.
        error_format: Symbolic (default) or numeric error identifiers.
    """

    def __init__(
        self,
        launcher: URLLauncher,
        *,
        error_format: ErrorFormat = ErrorFormat.SYMBOLIC,
    ) -> None:
        self._launcher = launcher
        self._error_format = error_format

    @property
    def launcher(self) -> URLLauncher:
        return self._launcher

    @property
    def error_format(self) -> ErrorFormat:
        return self._error_format

    def success_url(self, callback: str, signed_payload: bytes) -> str | None:
        return append_query_item(
            callback, "result", SigningOutcome.success(signed_payload).result_b64()
        )

    def failure_url(self, callback: str, error: ErrorKind) -> str | None:
        """Build the failure URL.

        Raises:
            ValueError: If error is ErrorKind.NONE.
        """
        return append_query_item(
            callback, "error", error_identifier(error, self._error_format)
        )

    def encode_success(self, callback: str, signed_payload: bytes) -> bool:
        """Launch the success callback. Returns False if nothing was launched."""
        return self._launch(self.success_url(callback, signed_payload))

    def encode_failure(self, callback: str, error: ErrorKind) -> bool:
        """Launch the failure callback. Returns False if nothing was launched."""
        return self._launch(self.failure_url(callback, error))

    def deliver(self, callback: str, outcome: SigningOutcome) -> bool:
        """Launch the callback matching a signing outcome."""
        if outcome.error is not None:
            return self.encode_failure(callback, outcome.error)
        return self.encode_success(callback, outcome.signed_payload or b"")

    def _launch(self, url: str | None) -> bool:
        if url is None:
            logger.warning("dropping result: callback url cannot be decomposed")
            return False
        logger.info("launching callback for scheme %r", httpx.URL(url).scheme)
        self._launcher.launch(url)
        return True
