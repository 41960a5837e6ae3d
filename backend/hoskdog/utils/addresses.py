"""Helpers for validating and converting Cardano addresses."""

from __future__ import annotations

from pycardano import Address
from pycardano.exception import PyCardanoException

SUPPORTED_PREFIXES = ("addr1", "stake1")
TESTNET_PREFIXES = ("addr_test", "stake_test")


def is_supported_prefix(value: str) -> bool:
    """Return True when the address uses a mainnet payment or stake prefix."""
    return isinstance(value, str) and value.startswith(SUPPORTED_PREFIXES)


def normalize_cardano_address(value: str) -> str:
    """Strip and prefix-check a bech32 address supplied by a client."""
    if value is None:
        raise ValueError("Address cannot be null")
    address = value.strip()
    if not address:
        raise ValueError("Wallet address is required")
    if not is_supported_prefix(address):
        raise ValueError("Address must start with addr1 or stake1")
    return address


def address_network_id(value: str) -> int:
    """Network id implied by the bech32 prefix (0 testnet, 1 mainnet)."""
    return 0 if value.startswith(TESTNET_PREFIXES) else 1


def parse_address(value: str) -> Address:
    """Decode a bech32 address with the SDK, raising ValueError when malformed."""
    try:
        return Address.from_primitive(value)
    except (PyCardanoException, ValueError, TypeError) as exc:
        raise ValueError(f"Invalid Cardano address: {value}") from exc


def hex_to_bech32_address(hex_address: str) -> str:
    """Convert a raw CIP-30 hex address into its bech32 form.

    The low nibble of the header byte carries the network tag, so testnet
    addresses come back with the ``addr_test`` prefix.
    """
    try:
        raw = bytes.fromhex(hex_address.strip())
    except (AttributeError, ValueError) as exc:
        raise ValueError("Address must be a hex string") from exc
    if not raw:
        raise ValueError("Address cannot be empty")

    try:
        return str(Address.from_primitive(raw))
    except (PyCardanoException, ValueError, TypeError) as exc:
        raise ValueError("Unrecognised Cardano address bytes") from exc


__all__ = [
    "address_network_id",
    "hex_to_bech32_address",
    "is_supported_prefix",
    "normalize_cardano_address",
    "parse_address",
]
