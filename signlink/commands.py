"""
Typed signing commands decoded from inbound URLs.

A command is one of three frozen dataclasses, selected by the URL host:

    sign-message           -> SignMessage
    sign-personal-message  -> SignPersonalMessage
    sign-transaction       -> SignTransaction

A URL with a recognised host whose mandatory fields fail to decode becomes
an ``InvalidRequest`` instead. It still carries the callback so the
dispatcher can report ``invalidRequest`` back to the caller.

Commands are pure values: no I/O, no secrets. ``to_dict()`` renders them
for diagnostics (bytes as hex, integers as decimal strings) and is never
used on the wire.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Union


class CommandKind(StrEnum):
    """Operation selected by the URL host."""

    SIGN_MESSAGE = "sign-message"
    SIGN_PERSONAL_MESSAGE = "sign-personal-message"
    SIGN_TRANSACTION = "sign-transaction"


def _hex(data: bytes) -> str:
    return "0x" + data.hex()


# =========================================================================
# Message commands
# =========================================================================


@dataclass(frozen=True)
class SignMessage:
    """Sign raw message bytes.

    Attributes:
        message: Base64-decoded message bytes.
        address: Checksummed address to sign with, or None to let the
            signer choose.
        callback: URL that receives the result, or None (fire-and-forget).
    """

    message: bytes
    address: str | None = None
    callback: str | None = None

    @property
    def kind(self) -> CommandKind:
        return CommandKind.SIGN_MESSAGE

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": str(self.kind),
            "message": _hex(self.message),
            "address": self.address,
            "callback": self.callback,
        }


@dataclass(frozen=True)
class SignPersonalMessage:
    """Sign a personal message (prefixed by the signer per its chain rules).

    Same fields as SignMessage.
    """

    message: bytes
    address: str | None = None
    callback: str | None = None

    @property
    def kind(self) -> CommandKind:
        return CommandKind.SIGN_PERSONAL_MESSAGE

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": str(self.kind),
            "message": _hex(self.message),
            "address": self.address,
            "callback": self.callback,
        }


# =========================================================================
# Transaction command
# =========================================================================


@dataclass(frozen=True)
class Transaction:
    """Unsigned transaction handed to the signer.

    Attributes:
        nonce: Account nonce. 0 when the caller did not supply one.
        gas_price: Gas price in wei.
        gas_limit: Gas limit (an unsigned 64-bit quantity, widened).
        to: Checksummed destination address.
        amount: Value in wei.
        payload: Call data, or None.
    """

    nonce: int
    gas_price: int
    gas_limit: int
    to: str
    amount: int
    payload: bytes | None = None

    def to_dict(self) -> dict[str, object]:
        """Render in the JSON transaction shape used by Ethereum tooling.

        Sequence-like network state (chain id, fee market fields) is a
        signer concern and is not included.
        """
        tx: dict[str, object] = {
            "nonce": self.nonce,
            "gasPrice": self.gas_price,
            "gas": self.gas_limit,
            "to": self.to,
            "value": self.amount,
        }
        if self.payload is not None:
            tx["data"] = _hex(self.payload)
        return tx


@dataclass(frozen=True)
class SignTransaction:
    """Sign a transaction.

    Field order follows the transaction; ``payload`` is set after the
    mandatory fields decode (via dataclasses.replace).
    """

    gas_price: int
    gas_limit: int
    to: str
    amount: int
    nonce: int = 0
    payload: bytes | None = None
    callback: str | None = None

    @property
    def kind(self) -> CommandKind:
        return CommandKind.SIGN_TRANSACTION

    @property
    def transaction(self) -> Transaction:
        return Transaction(
            nonce=self.nonce,
            gas_price=self.gas_price,
            gas_limit=self.gas_limit,
            to=self.to,
            amount=self.amount,
            payload=self.payload,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": str(self.kind),
            "nonce": str(self.nonce),
            "gas_price": str(self.gas_price),
            "gas_limit": str(self.gas_limit),
            "to": self.to,
            "amount": str(self.amount),
            "payload": _hex(self.payload) if self.payload is not None else None,
            "callback": self.callback,
        }


Command = Union[SignMessage, SignPersonalMessage, SignTransaction]


# =========================================================================
# Parse failure
# =========================================================================


@dataclass(frozen=True)
class InvalidRequest:
    """A recognised command whose mandatory fields did not decode.

    Attributes:
        kind: The command the URL asked for.
        callback: Callback URL, if one decoded. Receives invalidRequest.
        problems: Names of the query parameters that were missing or
            malformed, in parameter order.
    """

    kind: CommandKind
    callback: str | None = None
    problems: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": str(self.kind),
            "invalid": True,
            "problems": list(self.problems),
            "callback": self.callback,
        }
