"""
Chain address parsing.

Addresses are Ethereum-style: 20 bytes, hex-encoded, optional ``0x``
prefix. All-lowercase and all-uppercase forms are accepted as-is;
mixed-case input must carry a valid EIP-55 checksum.

Parsed addresses are normalised to their checksummed ``0x`` form so that
equal addresses compare equal regardless of the caller's casing.
"""

from __future__ import annotations

from eth_utils import (
    is_checksum_address,
    is_checksum_formatted_address,
    is_hex_address,
    to_checksum_address,
)


def parse_address(value: str | None) -> str | None:
    """Parse a chain address, returning None when it is absent or malformed.

    Args:
        value: Raw query parameter value.

    Returns:
        EIP-55 checksummed address, or None.
    """
    if not value or not is_hex_address(value):
        return None
    # Mixed case means the caller claims a checksum; it has to verify.
    if is_checksum_formatted_address(value) and not is_checksum_address(value):
        return None
    return to_checksum_address(value)


def is_address(value: str | None) -> bool:
    """True if value parses as a chain address."""
    return parse_address(value) is not None
