"""Print the faucet wallet's UTxOs, balances and remaining payout capacity."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from blockfrost import ApiError
from pycardano.exception import PyCardanoException

from hoskdog.chain.faucet import ChainFaucet, FaucetError, format_hkdg
from hoskdog.config import get_faucet_settings, network_name
from hoskdog.utils.formatting import lovelace_to_ada

LOGGER = logging.getLogger(__name__)

_HINTS = (
    ("project_id", "Check your BLOCKFROST_API_KEY in .env file"),
    ("private key", "Check your FAUCET_SKEY in .env file"),
    ("network", "Check your internet connection and Blockfrost service status"),
)


def report(faucet: ChainFaucet) -> List[str]:
    """Build the balance report lines for ``faucet``."""
    lines = [f"Network: {network_name()}", f"Faucet Address: {faucet.address}", ""]

    utxos = faucet.context.utxos(faucet.address)
    lines.append(f"Total UTxOs: {len(utxos)}")
    for index, utxo in enumerate(utxos, start=1):
        amount = utxo.output.amount
        coin = amount.coin if hasattr(amount, "coin") else int(amount)
        hkdg = faucet.hkdg_quantity(amount)
        suffix = f" + {format_hkdg(hkdg)} HKDG" if hkdg else ""
        lines.append(f"  UTxO {index}: {lovelace_to_ada(coin):.6f} ADA{suffix}")

    balance = faucet.balance(utxos)
    lines += ["", f"ADA:  {balance.ada:.6f} ADA", f"HKDG: {format_hkdg(balance.hkdg)} HKDG", ""]
    lines.append(f"Status: {'OPERATIONAL' if balance.can_operate else 'NOT OPERATIONAL'}")
    if balance.hkdg == 0:
        lines.append("  - No HKDG tokens available for distribution")
    if balance.ada <= 2:
        lines.append("  - Insufficient ADA for transaction fees (need > 2 ADA)")

    rewards = get_faucet_settings()["faucet"]["rewards"]
    lines.append("")
    for label, key in (("Meme Holder", "memeHolders"), ("ADA Only", "adaOnly")):
        reward = rewards[key]
        if reward <= 0:
            lines.append(f"{label} Rewards: not configured")
            continue
        lines.append(f"{label} Rewards ({format_hkdg(reward)} HKDG): {balance.hkdg // reward} slurps available")

    lines += ["", f"Policy ID: {faucet.policy_id}", f"Asset Name: {faucet.asset_name}", f"Asset Unit: {faucet.asset_unit()}"]
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    try:
        for line in report(ChainFaucet()):
            print(line)
    except (FaucetError, PyCardanoException, ApiError, RuntimeError, ValueError) as exc:
        LOGGER.error("Error checking wallet balance: %s", exc)
        lowered = str(exc).lower()
        for needle, hint in _HINTS:
            if needle in lowered:
                LOGGER.error(hint)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
