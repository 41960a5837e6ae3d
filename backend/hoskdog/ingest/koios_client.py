"""Thin client for the Koios REST API used for balance, asset and history lookups."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import requests

from hoskdog.config import koios_url

LOGGER = logging.getLogger(__name__)

HISTORY_TIMEOUT = 15
LOOKUP_TIMEOUT = 10
DEFAULT_HISTORY_LIMIT = 50


class KoiosError(RuntimeError):
    """Raised when Koios cannot be reached or returns an unusable payload."""


@dataclass
class TransactionRecord:
    """A transaction touching an address, as listed by ``address_txs``."""

    tx_hash: str
    block_time: Optional[int] = None
    block_height: Optional[int] = None


@dataclass
class TransactionParties:
    """Addresses on either side of a transaction, from ``tx_utxos``."""

    tx_hash: str
    input_addresses: List[str] = field(default_factory=list)
    output_addresses: List[str] = field(default_factory=list)

    @property
    def addresses(self) -> List[str]:
        seen: List[str] = []
        for address in self.input_addresses + self.output_addresses:
            if address not in seen:
                seen.append(address)
        return seen


def _post(endpoint: str, body: Dict[str, Any], timeout: int) -> Any:
    url = f"{koios_url()}/{endpoint}"
    try:
        response = requests.post(
            url,
            json=body,
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )
    except requests.RequestException as exc:
        LOGGER.error("Network error calling Koios %s: %s", endpoint, exc)
        raise KoiosError(f"Failed to reach Koios ({endpoint})") from exc

    if response.status_code == 429:
        LOGGER.error("Koios rate limit reached on %s", endpoint)
        raise KoiosError("Koios API rate limit reached. Please retry later.")

    try:
        response.raise_for_status()
        payload = response.json()
    except (requests.RequestException, ValueError) as exc:
        LOGGER.error("Koios %s returned an error: %s", endpoint, exc)
        raise KoiosError(f"Koios request failed ({endpoint})") from exc

    if payload is None:
        return []
    if not isinstance(payload, list):
        LOGGER.error("Unexpected Koios response format for %s: %s", endpoint, payload)
        raise KoiosError("Unexpected Koios response format")
    return payload


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def _payment_address(entry: Dict[str, Any]) -> Optional[str]:
    payment = entry.get("payment_addr") or {}
    if isinstance(payment, dict):
        return payment.get("bech32")
    return None


def fetch_address_transactions(address: str, limit: int = DEFAULT_HISTORY_LIMIT) -> List[TransactionRecord]:
    """Return the most recent transactions touching ``address``."""
    payload = _post("address_txs", {"_addresses": [address]}, HISTORY_TIMEOUT)
    if not payload:
        return []

    # Older Koios releases wrapped the list per address.
    rows: Iterable[Dict[str, Any]]
    if isinstance(payload[0], dict) and "tx_list" in payload[0]:
        rows = payload[0].get("tx_list") or []
    else:
        rows = payload

    transactions: List[TransactionRecord] = []
    for item in rows:
        try:
            transactions.append(
                TransactionRecord(
                    tx_hash=str(item["tx_hash"]),
                    block_time=_optional_int(item.get("block_time")),
                    block_height=_optional_int(item.get("block_height")),
                )
            )
        except (KeyError, TypeError, ValueError) as exc:
            LOGGER.warning("Skipping malformed Koios transaction entry: %s", exc)
            continue

    LOGGER.info("Fetched %d transactions for %s from Koios", len(transactions), address)
    return transactions[:limit]


def fetch_transaction_parties(tx_hashes: List[str]) -> Dict[str, TransactionParties]:
    """Resolve input and output addresses for each transaction hash."""
    if not tx_hashes:
        return {}

    payload = _post("tx_utxos", {"_tx_hashes": list(tx_hashes)}, HISTORY_TIMEOUT)

    parties: Dict[str, TransactionParties] = {}
    for item in payload:
        tx_hash = item.get("tx_hash")
        if not tx_hash:
            continue
        parties[tx_hash] = TransactionParties(
            tx_hash=tx_hash,
            input_addresses=[a for a in map(_payment_address, item.get("inputs") or []) if a],
            output_addresses=[a for a in map(_payment_address, item.get("outputs") or []) if a],
        )
    return parties


def fetch_address_assets(address: str) -> List[Dict[str, Any]]:
    """Return native assets held at ``address`` as policy/name/quantity rows."""
    payload = _post("address_assets", {"_addresses": [address]}, LOOKUP_TIMEOUT)
    if not payload:
        return []

    if isinstance(payload[0], dict) and "asset_list" in payload[0]:
        return list(payload[0].get("asset_list") or [])
    return list(payload)


def fetch_address_balance(address: str) -> int:
    """Return the lovelace balance of ``address`` (0 when Koios knows nothing)."""
    payload = _post("address_info", {"_addresses": [address]}, LOOKUP_TIMEOUT)
    if not payload:
        return 0

    try:
        balance = int(payload[0].get("balance") or 0)
    except (TypeError, ValueError) as exc:
        raise KoiosError("Koios returned a malformed balance") from exc

    LOGGER.info("ADA balance for %s: %s lovelace", address, balance)
    return balance


__all__ = [
    "KoiosError",
    "TransactionParties",
    "TransactionRecord",
    "fetch_address_assets",
    "fetch_address_balance",
    "fetch_address_transactions",
    "fetch_transaction_parties",
]
