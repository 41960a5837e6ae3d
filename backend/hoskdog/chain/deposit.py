"""Build and submit ADA deposit transactions on behalf of browser wallets."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from blockfrost import ApiError
from pycardano import (
    ChainContext,
    Transaction,
    TransactionBuilder,
    TransactionOutput,
    TransactionWitnessSet,
    Value,
)
from pycardano.exception import (
    InsufficientUTxOBalanceException,
    PyCardanoException,
    UTxOSelectionException,
)

from hoskdog.chain.context import get_context
from hoskdog.config import blockfrost_key, is_mainnet, network_name, receiving_address
from hoskdog.utils.addresses import address_network_id, hex_to_bech32_address, parse_address
from hoskdog.utils.formatting import explorer_url

LOGGER = logging.getLogger(__name__)

MIN_DEPOSIT_LOVELACE = 1_000_000


class DepositError(ValueError):
    """A deposit request that cannot be served as submitted."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.details = details


def parse_lovelace(value: Any) -> int:
    """Parse the client's lovelace string and enforce the deposit minimum."""
    if not value or not isinstance(value, str):
        raise DepositError("lovelace amount is required as string")
    try:
        lovelace = int(value)
    except ValueError as exc:
        raise DepositError("lovelace must be an integer string") from exc
    if lovelace <= 0:
        raise DepositError("lovelace must be positive")
    if lovelace < MIN_DEPOSIT_LOVELACE:
        raise DepositError("Minimum deposit is 1 ADA (1000000 lovelace)")
    return lovelace


def resolve_sender(sender: str) -> str:
    """Accept a bech32 address or the raw hex bytes a CIP-30 wallet reports."""
    sender = sender.strip()
    if sender.startswith(("addr", "stake")):
        return sender
    try:
        return hex_to_bech32_address(sender)
    except ValueError as exc:
        raise DepositError("Invalid sender address format") from exc


def _check_network(sender: str) -> None:
    expected = 1 if is_mainnet() else 0
    actual = address_network_id(sender)
    if actual != expected:
        raise DepositError(
            "Network mismatch",
            details=f"Server is on {network_name()}, but sender address is for "
            f"{'Testnet' if actual == 0 else 'Mainnet'}",
        )


def build_deposit_transaction(
    sender: str,
    lovelace: int,
    context: Optional[ChainContext] = None,
) -> Dict[str, Any]:
    """Build an unsigned payment from ``sender`` to the receiving address."""
    try:
        sender_address = parse_address(sender)
    except ValueError as exc:
        raise DepositError("Invalid sender address format") from exc
    _check_network(sender)

    recipient = receiving_address()
    context = context or get_context(blockfrost_key())

    builder = TransactionBuilder(context)
    builder.add_input_address(sender_address)
    builder.add_output(TransactionOutput(parse_address(recipient), Value(lovelace)))

    try:
        body = builder.build(change_address=sender_address)
    except (InsufficientUTxOBalanceException, UTxOSelectionException) as exc:
        raise DepositError("Insufficient funds or no UTxOs available", details=str(exc)) from exc
    except (PyCardanoException, ApiError) as exc:
        if "utxo" in str(exc).lower():
            raise DepositError("Insufficient funds or no UTxOs available", details=str(exc)) from exc
        raise

    transaction = Transaction(body, TransactionWitnessSet())

    LOGGER.info("[build-tx] Sender: %s...", sender[:20])
    LOGGER.info("[build-tx] Amount: %d lovelace, Fee: %d", lovelace, body.fee)

    return {
        "unsigned_tx_cbor_hex": transaction.to_cbor_hex(),
        "estimated_fee": str(body.fee),
        "recipient": recipient,
        "network": network_name(),
    }


def submit_signed_transaction(
    signed_tx_cbor_hex: str,
    context: Optional[ChainContext] = None,
) -> Dict[str, Any]:
    """Submit a wallet-signed transaction and return its hash and explorer link."""
    try:
        transaction = Transaction.from_cbor(signed_tx_cbor_hex)
    except (PyCardanoException, ValueError, TypeError) as exc:
        raise DepositError("signedTxCborHex is not a valid transaction") from exc

    context = context or get_context(blockfrost_key())
    context.submit_tx(transaction)

    tx_hash = transaction.id.payload.hex()
    LOGGER.info("[submit] Transaction submitted: %s", tx_hash)

    return {
        "tx_hash": tx_hash,
        "explorer_url": explorer_url(tx_hash),
        "network": network_name(),
        "fee": int(transaction.transaction_body.fee),
    }


__all__ = [
    "DepositError",
    "MIN_DEPOSIT_LOVELACE",
    "build_deposit_transaction",
    "parse_lovelace",
    "resolve_sender",
    "submit_signed_transaction",
]
