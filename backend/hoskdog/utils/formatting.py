"""Display helpers for token amounts, fees and explorer links."""

from __future__ import annotations

from decimal import Decimal

from hoskdog.config import is_mainnet

LOVELACE_PER_ADA = 1_000_000

# Cardano linear fee: a + b * size, plus headroom for witnesses.
FEE_CONSTANT_LOVELACE = 155_381
FEE_PER_BYTE_LOVELACE = 44
FEE_SAFETY_BUFFER_LOVELACE = 30_000
ESTIMATED_TX_SIZE_BYTES = 350


def lovelace_to_ada(lovelace: int) -> float:
    return float(Decimal(int(lovelace)) / Decimal(LOVELACE_PER_ADA))


def format_token_amount(amount: int, decimals: int) -> str:
    """Render a raw token amount with thousands grouping and up to 3 decimals."""
    value = Decimal(int(amount)) / (Decimal(10) ** decimals)
    text = f"{value:,.3f}"
    return text.rstrip("0").rstrip(".")


def estimate_fallback_fee(tx_size_bytes: int = ESTIMATED_TX_SIZE_BYTES) -> int:
    """Conservative fee estimate in lovelace for when no transaction is built."""
    return FEE_CONSTANT_LOVELACE + FEE_PER_BYTE_LOVELACE * tx_size_bytes + FEE_SAFETY_BUFFER_LOVELACE


def explorer_url(tx_hash: str) -> str:
    host = "cardanoscan.io" if is_mainnet() else "preprod.cardanoscan.io"
    return f"https://{host}/transaction/{tx_hash}"


__all__ = [
    "LOVELACE_PER_ADA",
    "estimate_fallback_fee",
    "explorer_url",
    "format_token_amount",
    "lovelace_to_ada",
]
