"""Deposit proxy endpoints: build unsigned transactions and relay signed ones.

The Blockfrost key stays on the server; browser wallets only ever see CBOR.
"""

from __future__ import annotations

import logging

from blockfrost import ApiError
from fastapi import APIRouter, HTTPException
from pycardano.exception import PyCardanoException

from hoskdog.chain.deposit import (
    DepositError,
    build_deposit_transaction,
    parse_lovelace,
    resolve_sender,
    submit_signed_transaction,
)
from hoskdog.config import blockfrost_key, receiving_address
from hoskdog.models import (
    BuildTxRequest,
    BuildTxResponse,
    DepositPreviewRequest,
    DepositPreviewResponse,
    SubmitTxRequest,
    SubmitTxResponse,
)
from hoskdog.utils.errors import failure
from hoskdog.utils.formatting import LOVELACE_PER_ADA, estimate_fallback_fee, lovelace_to_ada

LOGGER = logging.getLogger(__name__)

router = APIRouter(tags=["deposit"])


def _require_blockfrost() -> None:
    if not blockfrost_key():
        raise HTTPException(
            status_code=503,
            detail={
                "error": "Server not configured",
                "details": "Blockfrost API key not set. See .env.example",
            },
        )


def _deposit_error(exc: DepositError) -> HTTPException:
    detail = {"error": str(exc)}
    if exc.details:
        detail["details"] = exc.details
    return HTTPException(status_code=400, detail=detail)


@router.post("/build-tx", response_model=BuildTxResponse)
def build_tx(payload: BuildTxRequest) -> BuildTxResponse:
    """Build an unsigned deposit to the receiving address for the wallet to sign."""
    sender = payload.sender_address
    if not sender or not isinstance(sender, str):
        raise HTTPException(status_code=400, detail="senderAddress is required")

    try:
        lovelace = parse_lovelace(payload.lovelace)
        sender = resolve_sender(sender)
    except DepositError as exc:
        raise _deposit_error(exc) from exc

    _require_blockfrost()

    try:
        result = build_deposit_transaction(sender, lovelace)
    except DepositError as exc:
        raise _deposit_error(exc) from exc
    except (PyCardanoException, ApiError, RuntimeError) as exc:
        LOGGER.error("[build-tx] Error: %s", exc)
        raise failure(500, "Failed to build transaction", exc) from exc

    return BuildTxResponse(**result)


@router.post("/submit", response_model=SubmitTxResponse)
def submit(payload: SubmitTxRequest) -> SubmitTxResponse:
    """Relay a wallet-signed transaction to the network."""
    if not payload.signed_tx_cbor_hex or not isinstance(payload.signed_tx_cbor_hex, str):
        raise HTTPException(status_code=400, detail="signedTxCborHex is required")

    _require_blockfrost()

    try:
        result = submit_signed_transaction(payload.signed_tx_cbor_hex)
    except DepositError as exc:
        raise _deposit_error(exc) from exc
    except (PyCardanoException, ApiError, RuntimeError) as exc:
        LOGGER.error("[submit] Error: %s", exc)
        raise failure(500, "Failed to submit transaction", exc) from exc

    if payload.sender_address and payload.amount:
        LOGGER.info(
            "[submit] Deposit from %s: %s lovelace, fee %s, tx %s",
            payload.sender_address,
            payload.amount,
            result["fee"],
            result["tx_hash"],
        )

    return SubmitTxResponse(**result)


@router.post("/deposit/preview", response_model=DepositPreviewResponse)
def deposit_preview(payload: DepositPreviewRequest) -> DepositPreviewResponse:
    """Estimate fee and total for a deposit without touching the chain."""
    lovelace = int(payload.ada * LOVELACE_PER_ADA)
    fee = estimate_fallback_fee(payload.tx_size_bytes)
    fee_ada = lovelace_to_ada(fee)

    return DepositPreviewResponse(
        lovelace=str(lovelace),
        ada=lovelace_to_ada(lovelace),
        estimated_fee_lovelace=fee,
        estimated_fee_ada=fee_ada,
        total_ada=lovelace_to_ada(lovelace + fee),
        fee_source="fallback",
        recipient=receiving_address(),
    )


__all__ = ["router"]
