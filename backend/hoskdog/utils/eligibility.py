"""Faucet eligibility tiers derived from wallet holdings."""

from __future__ import annotations

import logging
from typing import Any, Dict

from hoskdog.config import get_faucet_settings
from hoskdog.ingest.koios_client import KoiosError, fetch_address_assets, fetch_address_balance
from hoskdog.utils.claims import has_recent_claim

LOGGER = logging.getLogger(__name__)


def holds_meme_tokens(address: str) -> bool:
    """True when the address holds any configured eligibility token."""
    try:
        assets = fetch_address_assets(address)
    except KoiosError as exc:
        LOGGER.error("Error checking meme tokens for %s: %s", address, exc)
        return False

    for token in get_faucet_settings()["faucet"]["eligibilityTokens"]:
        for asset in assets:
            if asset.get("policy_id") != token["policyId"]:
                continue
            try:
                quantity = int(asset.get("quantity") or 0)
            except (TypeError, ValueError):
                continue
            if quantity >= token["minAmount"]:
                LOGGER.info("Found %s token for address %s", token["name"], address)
                return True
    return False


def ada_balance(address: str) -> int:
    try:
        return fetch_address_balance(address)
    except KoiosError as exc:
        LOGGER.error("Error checking ADA balance for %s: %s", address, exc)
        return 0


def check_eligibility(address: str) -> Dict[str, Any]:
    """Decide the reward tier for ``address``: ``meme``, ``ada`` or none."""
    faucet = get_faucet_settings()["faucet"]

    if faucet["rateLimiting"]["enabled"] and has_recent_claim(address):
        return {
            "eligible": False,
            "tier": None,
            "reason": "Already claimed today. Please wait 24 hours.",
        }

    if holds_meme_tokens(address):
        return {
            "eligible": True,
            "tier": "meme",
            "reward": faucet["rewards"]["memeHolders"],
            "deposit": faucet["deposits"]["memeHolders"],
            "reason": "HOSKY or SNEK token detected",
        }

    if ada_balance(address) >= faucet["deposits"]["adaOnly"]:
        return {
            "eligible": True,
            "tier": "ada",
            "reward": faucet["rewards"]["adaOnly"],
            "deposit": faucet["deposits"]["adaOnly"],
            "reason": "Sufficient ADA balance",
        }

    return {
        "eligible": False,
        "tier": None,
        "reason": "Need HOSKY/SNEK tokens or 3+ ADA balance",
    }


__all__ = ["ada_balance", "check_eligibility", "holds_meme_tokens"]
