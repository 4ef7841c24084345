"""
Signer protocol — the secrets boundary.

Defines the interface the dispatcher uses to request signatures. The
engine never sees key material: it passes decoded message bytes or an
unsigned Transaction, and the signer eventually returns a SigningOutcome.

Each method is a coroutine. The dispatcher schedules it as a task and
returns immediately; the awaited result is the one-shot completion for
that command. Implementations may suspend for as long as they like (user
confirmation, hardware wallet round-trip). There is no timeout.

Failures are reported as ``SigningOutcome.failure(kind)``, not raised.
An exception escaping a signer is treated as ErrorKind.UNKNOWN.

Concrete implementations live in the host application (wallet UI,
hardware bridge). Tests use fakes.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from signlink.commands import Transaction
from signlink.errors import ErrorKind


@dataclass(frozen=True)
class SigningOutcome:
    """Result of one signing request: a signed payload or an error kind.

    Exactly one of the two attributes is set.

    Attributes:
        signed_payload: Signature or signed transaction bytes on success.
        error: Error kind on failure. Never ErrorKind.NONE.
    """

    signed_payload: bytes | None = None
    error: ErrorKind | None = None

    def __post_init__(self) -> None:
        if (self.signed_payload is None) == (self.error is None):
            raise ValueError("exactly one of signed_payload or error must be set")
        if self.error == ErrorKind.NONE:
            raise ValueError("ErrorKind.NONE is not a failure")

    @classmethod
    def success(cls, signed_payload: bytes) -> SigningOutcome:
        return cls(signed_payload=signed_payload)

    @classmethod
    def failure(cls, error: ErrorKind) -> SigningOutcome:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.signed_payload is not None

    def result_b64(self) -> str:
        """Base64 form of the signed payload, as sent in ``result=``.

        Raises:
            ValueError: If this is a failure outcome.
        """
        if self.signed_payload is None:
            raise ValueError("failure outcome has no payload")
        return base64.b64encode(self.signed_payload).decode("ascii")


@runtime_checkable
class Signer(Protocol):
    """Interface for the external signing provider.

    ``address`` arguments are EIP-55 checksummed, or None when the caller
    left the choice of account to the signer.
    """

    async def sign_message(
        self, message: bytes, address: str | None
    ) -> SigningOutcome:
        """Sign raw message bytes."""
        ...

    async def sign_personal_message(
        self, message: bytes, address: str | None
    ) -> SigningOutcome:
        """Sign a personal message."""
        ...

    async def sign_transaction(self, transaction: Transaction) -> SigningOutcome:
        """Sign an unsigned transaction.

        Args:
            transaction: Fully populated transaction (nonce defaulted).

        Returns:
            SigningOutcome with the signed transaction bytes, or an error.
        """
        ...
