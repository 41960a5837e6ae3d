"""Schemas for the deposit proxy endpoints."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import Field

from .base import CamelModel


class BuildTxRequest(CamelModel):
    """Unsigned deposit request; ``lovelace`` is a string to avoid float rounding."""

    sender_address: Optional[str] = None
    lovelace: Any = None


class BuildTxResponse(CamelModel):
    unsigned_tx_cbor_hex: str
    estimated_fee: str
    recipient: str
    network: str


class SubmitTxRequest(CamelModel):
    signed_tx_cbor_hex: Optional[str] = None
    sender_address: Optional[str] = None
    amount: Optional[str] = None


class SubmitTxResponse(CamelModel):
    tx_hash: str
    explorer_url: str
    network: str


class DepositPreviewRequest(CamelModel):
    ada: float = Field(..., ge=1, le=1_000_000, description="Deposit amount in ADA")
    tx_size_bytes: int = Field(350, ge=100, le=16384)


class DepositPreviewResponse(CamelModel):
    lovelace: str
    ada: float
    estimated_fee_lovelace: int
    estimated_fee_ada: float
    total_ada: float
    fee_source: str = "fallback"
    recipient: str


class HealthResponse(CamelModel):
    status: str
    service: str
    network: str
    timestamp: str
    configured: bool


__all__ = [
    "BuildTxRequest",
    "BuildTxResponse",
    "DepositPreviewRequest",
    "DepositPreviewResponse",
    "HealthResponse",
    "SubmitTxRequest",
    "SubmitTxResponse",
]
