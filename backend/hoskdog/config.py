"""Environment and faucet settings shared by the HOSKDOG backend services."""

from __future__ import annotations

import copy
import json
import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

from dotenv import load_dotenv

load_dotenv()

LOGGER = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path(__file__).resolve().parents[1] / "data" / "faucet-settings.json"
DEFAULT_HISTORY_PATH = Path(__file__).resolve().parents[1] / "logs" / "slurp-history.json"

DEFAULT_RECEIVING_ADDRESS = (
    "addr1q9lgquer5840jyexr52zjlpvvv33d7qkg4k35ty9f85leftvz5gkpuwt36e4h6zle5trhx3xqus8q08ac60hxe8pc4mqhuyj7k"
)

POLICY_ID_PATTERN = re.compile(r"^[a-fA-F0-9]{56}$")

DEFAULT_FAUCET_SETTINGS: Dict[str, Any] = {
    "api": {"koiosUrl": "https://api.koios.rest/api/v1"},
    "faucet": {
        "token": {"policyId": "", "assetName": "HKDG", "decimals": 6},
        "rewards": {"memeHolders": 2_000_000_000, "adaOnly": 1_000_000_000},
        "deposits": {"memeHolders": 2_000_000, "adaOnly": 3_000_000},
        "eligibilityTokens": [
            {
                "name": "HOSKY",
                "policyId": "a0028f350aaabe0545fdcb56b039bfb08e4bb4d8c4d7c3c7d481c235",
                "minAmount": 1,
            },
            {
                "name": "SNEK",
                "policyId": "279c909f348e533da5808898f87f9a14bb2c3dfbbacccd631d927a3f",
                "minAmount": 1,
            },
        ],
        "rateLimiting": {"enabled": True},
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


@lru_cache(maxsize=1)
def get_faucet_settings() -> Dict[str, Any]:
    """Return faucet settings, merging the JSON settings file over the defaults."""
    path = Path(os.getenv("FAUCET_SETTINGS_PATH") or DEFAULT_SETTINGS_PATH)
    if not path.exists():
        LOGGER.info("No faucet settings file at %s, using defaults", path)
        return copy.deepcopy(DEFAULT_FAUCET_SETTINGS)

    with path.open("r", encoding="utf-8") as handle:
        overrides = json.load(handle)

    return _merge(DEFAULT_FAUCET_SETTINGS, overrides)


def network_name() -> str:
    """Return the configured network, normalised to ``Mainnet`` or ``Preprod``."""
    value = (os.getenv("NETWORK") or os.getenv("CARDANO_NETWORK") or "Mainnet").strip()
    return "Mainnet" if value.lower() == "mainnet" else "Preprod"


def is_mainnet() -> bool:
    return network_name() == "Mainnet"


def _usable_key(value: str | None) -> str | None:
    if not value or "YOUR_BLOCKFROST" in value:
        return None
    return value


def blockfrost_key() -> str | None:
    """Blockfrost project id for the deposit proxy, ``None`` when unconfigured."""
    return _usable_key(os.getenv("BLOCKFROST_KEY"))


def faucet_blockfrost_key() -> str | None:
    return _usable_key(os.getenv("BLOCKFROST_API_KEY")) or blockfrost_key()


def receiving_address() -> str:
    return os.getenv("HOSKDOG_RECEIVING_ADDRESS") or DEFAULT_RECEIVING_ADDRESS


def koios_url() -> str:
    url = os.getenv("KOIOS_API") or get_faucet_settings()["api"]["koiosUrl"]
    return url.rstrip("/")


def token_policy_id() -> str:
    return os.getenv("HKDG_POLICY_ID") or get_faucet_settings()["faucet"]["token"]["policyId"]


def use_mock_slurp() -> bool:
    return os.getenv("USE_MOCK_SLURP", "").lower() == "true"


def is_development() -> bool:
    env = os.getenv("APP_ENV") or os.getenv("NODE_ENV") or ""
    return env.lower() == "development"


def history_path() -> Path:
    return Path(os.getenv("SLURP_HISTORY_PATH") or DEFAULT_HISTORY_PATH)


def validate_configuration() -> List[str]:
    """Check the live faucet configuration and return a list of problems."""
    problems: List[str] = []

    required = ["FAUCET_ADDRESS", "FAUCET_SKEY", "HKDG_POLICY_ID", "KOIOS_API"]
    missing = [key for key in required if not os.getenv(key)]
    if missing:
        problems.append("Missing required environment variables: " + ", ".join(missing))

    faucet_address = os.getenv("FAUCET_ADDRESS")
    if faucet_address and not faucet_address.startswith("addr"):
        problems.append("FAUCET_ADDRESS must be a valid Cardano address (starts with addr)")

    policy_id = os.getenv("HKDG_POLICY_ID")
    if policy_id and not POLICY_ID_PATTERN.fullmatch(policy_id):
        problems.append("HKDG_POLICY_ID must be 56 hex characters")

    koios = os.getenv("KOIOS_API")
    if koios and not koios.startswith("http"):
        problems.append("KOIOS_API must be a valid URL")

    return problems


__all__ = [
    "DEFAULT_FAUCET_SETTINGS",
    "blockfrost_key",
    "faucet_blockfrost_key",
    "get_faucet_settings",
    "history_path",
    "is_development",
    "is_mainnet",
    "koios_url",
    "network_name",
    "receiving_address",
    "token_policy_id",
    "use_mock_slurp",
    "validate_configuration",
]
