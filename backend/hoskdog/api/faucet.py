"""Faucet endpoints: eligibility, token claims (slurps), status and statistics."""

from __future__ import annotations

import logging
import time

from blockfrost import ApiError
from fastapi import APIRouter, HTTPException
from pycardano.exception import PyCardanoException

from hoskdog.chain.faucet import FaucetError, format_hkdg, get_faucet_backend
from hoskdog.config import get_faucet_settings, network_name
from hoskdog.models import (
    EligibilityRequest,
    EligibilityResponse,
    FaucetStatusResponse,
    SlurpRequest,
    SlurpResponse,
    StatsResponse,
)
from hoskdog.utils.claims import address_lock, claim_statistics, has_recent_claim, record_claim
from hoskdog.utils.eligibility import check_eligibility
from hoskdog.utils.errors import failure

LOGGER = logging.getLogger(__name__)

TIERS = ("meme", "ada")

router = APIRouter(tags=["faucet"])

_NOTES = {
    "mock": "[MOCK MODE] This is a simulated transaction for testing purposes",
    "production": "Real Cardano transaction - tokens will appear in your wallet within 1-2 minutes",
}


@router.post("/check-eligibility", response_model=EligibilityResponse, response_model_exclude_none=True)
def eligibility(payload: EligibilityRequest) -> EligibilityResponse:
    """Report whether an address may claim, and at which tier."""
    address = (payload.address or "").strip()
    if not address:
        raise HTTPException(status_code=400, detail="Wallet address is required")

    LOGGER.info("Checking eligibility for address: %s", address)
    return EligibilityResponse(**check_eligibility(address))


@router.post("/slurp", response_model=SlurpResponse)
def slurp(payload: SlurpRequest) -> SlurpResponse:
    """Send the tier's HKDG reward to the requesting address."""
    address = (payload.address or "").strip()
    tier = payload.tier
    if not address or not tier:
        raise HTTPException(status_code=400, detail="Address and tier are required")
    if tier not in TIERS:
        raise HTTPException(status_code=400, detail="Invalid tier")

    backend = get_faucet_backend()
    faucet = get_faucet_settings()["faucet"]
    reward = faucet["rewards"]["memeHolders"] if tier == "meme" else faucet["rewards"]["adaOnly"]
    LOGGER.info("Processing %s slurp for %s, tier: %s", backend.mode, address, tier)

    # Cooldown check, transfer and record run under one per-address lock.
    with address_lock(address):
        if faucet["rateLimiting"]["enabled"] and has_recent_claim(address):
            raise HTTPException(status_code=429, detail="Already claimed today. Please wait 24 hours.")

        valid, reason = backend.validate_transfer(address, reward)
        if not valid:
            raise HTTPException(
                status_code=400,
                detail={"error": "Transaction validation failed", "details": reason},
            )

        try:
            result = backend.send_tokens(address, reward)
        except FaucetError as exc:
            LOGGER.error("Slurp failed for %s: %s", address, exc)
            raise failure(500, "Slurp failed", exc) from exc

        record_claim(
            {
                "address": address,
                "tier": tier,
                "amount": reward,
                "txHash": result["tx_hash"],
                "timestamp": int(time.time() * 1000),
            },
            mode=backend.mode,
        )

    amount = format_hkdg(reward)
    LOGGER.info("Slurp completed: %s HKDG -> %s (%s)", amount, address, result["tx_hash"])

    return SlurpResponse(
        tx_hash=result["tx_hash"],
        explorer_url=result["explorer_url"],
        amount=amount,
        message=f"Successfully sent {amount} HKDG to your wallet!",
        note=_NOTES.get(backend.mode, ""),
    )


@router.get("/faucet-status", response_model=FaucetStatusResponse)
def faucet_status() -> FaucetStatusResponse:
    """Report the faucet wallet balance and whether it can pay out."""
    backend = get_faucet_backend()
    try:
        balance = backend.balance()
    except (FaucetError, PyCardanoException, ApiError, RuntimeError) as exc:
        LOGGER.exception("Error getting faucet status: %s", exc)
        raise failure(500, "Failed to get faucet status", exc, status="error") from exc

    return FaucetStatusResponse(
        status=f"operational ({backend.mode} mode)",
        balance={
            "ada": balance.ada,
            "hkdg": format_hkdg(balance.hkdg),
            "hkdg_raw": balance.hkdg,
            "utxos": balance.utxo_count,
        },
        network=network_name(),
        can_operate=balance.can_operate,
        mode=backend.mode,
        note="Using simulated transactions for testing" if backend.mode == "mock" else "Using real Cardano transactions",
    )


@router.get("/stats", response_model=StatsResponse)
def stats() -> StatsResponse:
    """Aggregate claim statistics from the slurp history."""
    try:
        summary = claim_statistics()
    except (OSError, ValueError) as exc:
        LOGGER.exception("Error getting stats: %s", exc)
        raise failure(500, "Failed to get statistics", exc) from exc

    return StatsResponse(
        **{**summary, "total_distributed": format_hkdg(summary["total_distributed"])},
        mode=get_faucet_backend().mode,
    )


__all__ = ["router"]
