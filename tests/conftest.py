"""Shared fakes for signlink tests. No network, no keys."""

from __future__ import annotations

import asyncio

import pytest

from signlink.commands import Transaction
from signlink.engine import SigningEngine
from signlink.launcher import RecordingLauncher
from signlink.signer import SigningOutcome

# EIP-55 test vector.
SAMPLE_ADDRESS = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
SAMPLE_ADDRESS_LOWER = SAMPLE_ADDRESS.lower()
SAMPLE_SIGNED = b"\x01\x02"


class FakeSigner:
    """Minimal Signer implementation for testing.

    Records every call. Returns ``outcome`` (default: success with
    SAMPLE_SIGNED), raises ``should_raise``, or waits on ``gate`` first.
    """

    def __init__(
        self,
        *,
        outcome: object | None = None,
        should_raise: Exception | None = None,
        gate: asyncio.Event | None = None,
    ) -> None:
        self.calls: list[tuple[object, ...]] = []
        self._outcome = outcome if outcome is not None else SigningOutcome.success(SAMPLE_SIGNED)
        self._should_raise = should_raise
        self._gate = gate

    async def _finish(self) -> SigningOutcome:
        if self._gate is not None:
            await self._gate.wait()
        if self._should_raise is not None:
            raise self._should_raise
        return self._outcome  # type: ignore[return-value]

    async def sign_message(self, message: bytes, address: str | None) -> SigningOutcome:
        self.calls.append(("sign_message", message, address))
        return await self._finish()

    async def sign_personal_message(
        self, message: bytes, address: str | None
    ) -> SigningOutcome:
        self.calls.append(("sign_personal_message", message, address))
        return await self._finish()

    async def sign_transaction(self, transaction: Transaction) -> SigningOutcome:
        self.calls.append(("sign_transaction", transaction))
        return await self._finish()


@pytest.fixture
def launcher() -> RecordingLauncher:
    return RecordingLauncher()


@pytest.fixture
def signer() -> FakeSigner:
    return FakeSigner()


@pytest.fixture
def engine(signer: FakeSigner, launcher: RecordingLauncher) -> SigningEngine:
    return SigningEngine(signer, launcher)
