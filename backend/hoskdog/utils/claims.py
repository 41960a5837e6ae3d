"""Faucet claim history kept in a JSON file next to the service logs."""

from __future__ import annotations

import json
import logging
import threading
import time
import weakref
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from hoskdog.config import history_path

LOGGER = logging.getLogger(__name__)

CLAIM_COOLDOWN_MS = 24 * 60 * 60 * 1000

_LOCK = threading.Lock()

_ADDRESS_LOCKS: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
_ADDRESS_LOCKS_GUARD = threading.Lock()


def _read(path: Path) -> List[Dict[str, Any]]:
    if not path.exists():
        return []
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, list):
        raise ValueError(f"Claim history at {path} is not a list")
    return payload


def address_lock(address: str) -> threading.Lock:
    """Lock serialising the cooldown check, transfer and record for one address."""
    with _ADDRESS_LOCKS_GUARD:
        lock = _ADDRESS_LOCKS.get(address)
        if lock is None:
            lock = threading.Lock()
            _ADDRESS_LOCKS[address] = lock
        return lock


def load_history(path: Optional[Path] = None) -> List[Dict[str, Any]]:
    with _LOCK:
        return _read(path or history_path())


def has_recent_claim(address: str, now_ms: Optional[int] = None, path: Optional[Path] = None) -> bool:
    """Return True when ``address`` claimed within the last 24 hours.

    An unreadable history file allows the claim.
    """
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    cutoff = now_ms - CLAIM_COOLDOWN_MS
    try:
        history = load_history(path)
    except (OSError, ValueError) as exc:
        LOGGER.error("Error checking recent claims: %s", exc)
        return False

    return any(claim.get("address") == address and claim.get("timestamp", 0) > cutoff for claim in history)


def record_claim(claim: Dict[str, Any], mode: str, path: Optional[Path] = None) -> Optional[Dict[str, Any]]:
    """Append a claim to the history file; failures are logged, not raised."""
    target = path or history_path()
    try:
        with _LOCK:
            history = _read(target)
            entry = {
                **claim,
                "id": len(history) + 1,
                "date": datetime.now(timezone.utc).isoformat(),
                "mode": mode,
            }
            history.append(entry)
            target.parent.mkdir(parents=True, exist_ok=True)
            with target.open("w", encoding="utf-8") as handle:
                json.dump(history, handle, indent=2)
    except (OSError, ValueError) as exc:
        LOGGER.error("Error logging slurp for %s: %s", claim.get("address"), exc)
        return None

    LOGGER.info("Logged %s slurp for %s", mode, claim.get("address"))
    return entry


def claim_statistics(path: Optional[Path] = None) -> Dict[str, Any]:
    """Aggregate totals over the claim history."""
    history = load_history(path)
    stats: Dict[str, Any] = {
        "total_slurps": 0,
        "unique_addresses": 0,
        "total_distributed": 0,
        "meme_holder_slurps": 0,
        "ada_only_slurps": 0,
        "mode_counts": {},
        "last_slurp": None,
    }
    if not history:
        return stats

    df = pd.DataFrame(history)
    for column, default in (("address", ""), ("amount", 0), ("tier", ""), ("mode", "unknown"), ("date", None)):
        if column not in df:
            df[column] = default

    tiers = df["tier"].value_counts()
    stats.update(
        {
            "total_slurps": int(len(df)),
            "unique_addresses": int(df["address"].nunique()),
            "total_distributed": int(pd.to_numeric(df["amount"], errors="coerce").fillna(0).sum()),
            "meme_holder_slurps": int(tiers.get("meme", 0)),
            "ada_only_slurps": int(tiers.get("ada", 0)),
            "mode_counts": {str(k): int(v) for k, v in df["mode"].fillna("unknown").value_counts().items()},
            "last_slurp": history[-1].get("date"),
        }
    )
    return stats


__all__ = ["address_lock", "claim_statistics", "has_recent_claim", "load_history", "record_claim"]
