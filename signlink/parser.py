"""
Command parser — inbound URL to typed command.

Pure, synchronous, total: ``parse()`` never raises and performs no I/O.

Outcomes:
    - ``Command`` — recognised host, mandatory fields decoded.
    - ``InvalidRequest`` — recognised host, a mandatory field missing or
      malformed. The dispatcher turns this into an invalidRequest callback.
    - ``None`` — not ours: unknown host, undecomposable URL, or a scheme
      outside the configured allow-list.

Query rules:
    - Items split on ``&``, name/value split on the first ``=``.
    - Percent-decoding only; ``+`` is NOT a space (base64 uses it).
    - First occurrence of a name wins.
    - An item without ``=`` has no value.

Field decoding:
    message     strict base64 (padding required)
    address/to  chain address (see signlink.address)
    gasPrice    signed decimal integer
    amount      signed decimal integer
    gasLimit    unsigned 64-bit decimal integer
    nonce       unsigned decimal integer, default 0
    data        hex bytes, optional 0x prefix; malformed is ignored
    callback    absolute URL; malformed is ignored
"""

from __future__ import annotations

import base64
import logging
import re
from collections.abc import Collection
from dataclasses import replace
from urllib.parse import unquote

import httpx

from signlink.address import parse_address
from signlink.commands import (
    Command,
    CommandKind,
    InvalidRequest,
    SignMessage,
    SignPersonalMessage,
    SignTransaction,
)

logger = logging.getLogger(__name__)

_SIGNED_INT_RE = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_INT_RE = re.compile(r"\+?[0-9]+")
_HEX_RE = re.compile(r"(?:0[xX])?((?:[0-9a-fA-F]{2})*)")

UINT64_MAX = 2**64 - 1


# =========================================================================
# Query handling
# =========================================================================


def query_params(query: str) -> dict[str, str | None]:
    """Split a raw query string into a first-match-wins name → value map.

    Args:
        query: Raw (still percent-encoded) query, without the leading ``?``.

    Returns:
        Dict of decoded names to decoded values (None for bare names).
    """
    params: dict[str, str | None] = {}
    for item in query.split("&"):
        if not item:
            continue
        name, sep, value = item.partition("=")
        params.setdefault(unquote(name), unquote(value) if sep else None)
    return params


# =========================================================================
# Field decoders (None means "absent or malformed")
# =========================================================================


def decode_base64(value: str | None) -> bytes | None:
    if value is None:
        return None
    try:
        return base64.b64decode(value, validate=True)
    except ValueError:
        return None


def decode_hex(value: str | None) -> bytes | None:
    if value is None:
        return None
    match = _HEX_RE.fullmatch(value)
    if match is None:
        return None
    return bytes.fromhex(match.group(1))


def _to_int(value: str) -> int | None:
    try:
        return int(value)
    except ValueError:
        # Digit strings beyond sys.get_int_max_str_digits().
        return None


def decode_int(value: str | None) -> int | None:
    if value is None or not _SIGNED_INT_RE.fullmatch(value):
        return None
    return _to_int(value)


def decode_uint(value: str | None) -> int | None:
    if value is None or not _UNSIGNED_INT_RE.fullmatch(value):
        return None
    return _to_int(value)


def decode_uint64(value: str | None) -> int | None:
    number = decode_uint(value)
    if number is None or number > UINT64_MAX:
        return None
    return number


def parse_callback(value: str | None) -> str | None:
    """Accept a callback only if it is an absolute URL.

    The original string is kept verbatim; no normalisation.
    """
    if not value:
        return None
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL:
        logger.info("ignoring malformed callback url")
        return None
    if not url.scheme:
        logger.info("ignoring relative callback url")
        return None
    return value


# =========================================================================
# parse()
# =========================================================================


def parse(
    url: str, *, schemes: Collection[str] | None = None
) -> Command | InvalidRequest | None:
    """Parse an inbound command URL.

    Args:
        url: The URL the host application was asked to open.
        schemes: Optional allow-list of (lowercase) URL schemes. None
            accepts any scheme.

    Returns:
        A Command, an InvalidRequest, or None if the URL is not a command.
    """
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL:
        logger.debug("unhandled url: cannot be decomposed")
        return None

    if schemes is not None and parsed.scheme not in schemes:
        logger.debug("unhandled url: scheme %r not allowed", parsed.scheme)
        return None

    # httpx lowercases the host; operation names match case-sensitively.
    host = _raw_host(url)
    try:
        kind = CommandKind(host)
    except ValueError:
        logger.debug("unhandled url: unknown host %r", host)
        return None

    params = query_params(parsed.query.decode("ascii"))
    callback = parse_callback(params.get("callback"))

    if kind == CommandKind.SIGN_TRANSACTION:
        return _parse_sign_transaction(params, callback)
    return _parse_message_command(kind, params, callback)


def _raw_host(url: str) -> str:
    authority = url.partition("://")[2]
    for stop in "/?#":
        authority = authority.partition(stop)[0]
    return authority.rpartition("@")[2].partition(":")[0]


def _parse_message_command(
    kind: CommandKind,
    params: dict[str, str | None],
    callback: str | None,
) -> Command | InvalidRequest:
    message = decode_base64(params.get("message"))
    if message is None:
        return InvalidRequest(kind=kind, callback=callback, problems=("message",))

    address = parse_address(params.get("address"))
    if kind == CommandKind.SIGN_MESSAGE:
        return SignMessage(message=message, address=address, callback=callback)
    return SignPersonalMessage(message=message, address=address, callback=callback)


def _parse_sign_transaction(
    params: dict[str, str | None],
    callback: str | None,
) -> Command | InvalidRequest:
    gas_price = decode_int(params.get("gasPrice"))
    gas_limit = decode_uint64(params.get("gasLimit"))
    to = parse_address(params.get("to"))
    amount = decode_int(params.get("amount"))

    if gas_price is None or gas_limit is None or to is None or amount is None:
        problems = tuple(
            name
            for name, value in (
                ("gasPrice", gas_price),
                ("gasLimit", gas_limit),
                ("to", to),
                ("amount", amount),
            )
            if value is None
        )
        return InvalidRequest(
            kind=CommandKind.SIGN_TRANSACTION,
            callback=callback,
            problems=problems,
        )

    nonce = decode_uint(params.get("nonce"))
    command = SignTransaction(
        gas_price=gas_price,
        gas_limit=gas_limit,
        to=to,
        amount=amount,
        nonce=nonce if nonce is not None else 0,
        callback=callback,
    )

    data = params.get("data")
    if data is not None:
        payload = decode_hex(data)
        if payload is None:
            logger.warning("ignoring malformed data parameter on sign-transaction")
        else:
            command = replace(command, payload=payload)
    return command
