"""Schemas for the faucet (slurp) and eligibility endpoints."""

from __future__ import annotations

from typing import Dict, Optional

from .base import CamelModel


class EligibilityRequest(CamelModel):
    address: Optional[str] = None


class EligibilityResponse(CamelModel):
    eligible: bool
    tier: Optional[str] = None
    reward: Optional[int] = None
    deposit: Optional[int] = None
    reason: str


class SlurpRequest(CamelModel):
    address: Optional[str] = None
    tier: Optional[str] = None


class SlurpResponse(CamelModel):
    success: bool = True
    tx_hash: str
    explorer_url: str
    amount: str
    message: str
    note: str


class FaucetBalanceView(CamelModel):
    ada: float
    hkdg: str
    hkdg_raw: int
    utxos: int


class FaucetStatusResponse(CamelModel):
    status: str
    balance: FaucetBalanceView
    network: str
    can_operate: bool
    mode: str
    note: str


class StatsResponse(CamelModel):
    total_slurps: int
    unique_addresses: int
    total_distributed: str
    meme_holder_slurps: int
    ada_only_slurps: int
    mode_counts: Dict[str, int]
    last_slurp: Optional[str] = None
    mode: str


__all__ = [
    "EligibilityRequest",
    "EligibilityResponse",
    "FaucetBalanceView",
    "FaucetStatusResponse",
    "SlurpRequest",
    "SlurpResponse",
    "StatsResponse",
]
