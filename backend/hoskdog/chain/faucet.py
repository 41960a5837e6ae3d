"""Faucet backends: live HKDG transfers through Blockfrost, or a simulation."""

from __future__ import annotations

import logging
import os
import secrets
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple

from blockfrost import ApiError
from pycardano import (
    Address,
    ChainContext,
    MultiAsset,
    Network,
    PaymentSigningKey,
    PaymentVerificationKey,
    TransactionBuilder,
    TransactionOutput,
    Value,
)
from pycardano.exception import PyCardanoException
from pycardano.utils import min_lovelace_post_alonzo

from hoskdog.chain.context import get_context
from hoskdog.config import (
    faucet_blockfrost_key,
    get_faucet_settings,
    is_mainnet,
    token_policy_id,
    use_mock_slurp,
)
from hoskdog.utils.addresses import parse_address
from hoskdog.utils.formatting import explorer_url, format_token_amount, lovelace_to_ada

LOGGER = logging.getLogger(__name__)

MIN_OPERATING_ADA = 2
MOCK_DELAY_SECONDS = 2.0

_ERROR_HINTS = (
    ("insufficient funds", "Faucet wallet has insufficient funds"),
    ("utxo not found", "Faucet wallet UTxO not found - may need to wait for sync"),
    ("invalid address", "Invalid recipient address format"),
    ("collateral", "Insufficient collateral in faucet wallet"),
)


class FaucetError(RuntimeError):
    """Raised when a faucet transfer cannot be completed."""


@dataclass
class FaucetBalance:
    ada: float
    hkdg: int
    utxo_count: int

    @property
    def can_operate(self) -> bool:
        return self.hkdg > 0 and self.ada > MIN_OPERATING_ADA


def _token_settings() -> Dict[str, Any]:
    return get_faucet_settings()["faucet"]["token"]


def format_hkdg(amount: int) -> str:
    return format_token_amount(amount, _token_settings()["decimals"])


def load_signing_key(value: str) -> PaymentSigningKey:
    """Load the faucet key from a ``.skey`` file, raw hex or CBOR hex."""
    value = value.strip()
    if value.endswith(".skey"):
        return PaymentSigningKey.load(value)
    if len(value) == 64:
        return PaymentSigningKey(bytes.fromhex(value))
    return PaymentSigningKey.from_cbor(value)


class MockFaucet:
    """Simulated transfers for exercising the claim flow without a wallet."""

    mode = "mock"

    def __init__(self, delay: float = MOCK_DELAY_SECONDS):
        self.delay = delay

    def validate_transfer(self, recipient: str, amount: int) -> Tuple[bool, Optional[str]]:
        if not recipient.startswith("addr"):
            return False, 'Address must start with "addr"'
        return True, None

    def send_tokens(self, recipient: str, amount: int) -> Dict[str, str]:
        LOGGER.info("[MOCK] Building transaction: %s HKDG -> %s", format_hkdg(amount), recipient)
        if self.delay:
            time.sleep(self.delay)
        tx_hash = secrets.token_hex(32)
        LOGGER.info("[MOCK] Transaction submitted: %s", tx_hash)
        return {"tx_hash": tx_hash, "explorer_url": explorer_url(tx_hash)}

    def balance(self) -> FaucetBalance:
        return FaucetBalance(ada=25.5, hkdg=100_000_000, utxo_count=5)


class ChainFaucet:
    """Pays HKDG from the faucet wallet using Blockfrost for chain access."""

    mode = "production"

    def __init__(
        self,
        context: Optional[ChainContext] = None,
        signing_key: Optional[PaymentSigningKey] = None,
        address: Optional[Address] = None,
        policy_id: Optional[str] = None,
        asset_name: Optional[str] = None,
    ):
        self._context = context
        self._signing_key = signing_key
        self._address = address
        self.policy_id = policy_id or token_policy_id()
        self.asset_name = asset_name or _token_settings()["assetName"]

    @property
    def context(self) -> ChainContext:
        if self._context is None:
            self._context = get_context(faucet_blockfrost_key())
        return self._context

    @property
    def signing_key(self) -> PaymentSigningKey:
        if self._signing_key is None:
            raw = os.getenv("FAUCET_SKEY")
            if not raw:
                raise FaucetError("FAUCET_SKEY is not configured")
            self._signing_key = load_signing_key(raw)
        return self._signing_key

    @property
    def address(self) -> Address:
        if self._address is None:
            configured = os.getenv("FAUCET_ADDRESS")
            if configured:
                self._address = parse_address(configured)
            else:
                network = Network.MAINNET if is_mainnet() else Network.TESTNET
                verification_key = PaymentVerificationKey.from_signing_key(self.signing_key)
                self._address = Address(payment_part=verification_key.hash(), network=network)
            LOGGER.info("Faucet address: %s", self._address)
        return self._address

    def _asset_name_bytes(self) -> bytes:
        return self.asset_name.encode("utf-8")

    def asset_unit(self) -> str:
        return self.policy_id + self._asset_name_bytes().hex()

    def hkdg_quantity(self, amount: Any) -> int:
        value = amount if isinstance(amount, Value) else Value(int(amount))
        name = self._asset_name_bytes()
        for policy, assets in value.multi_asset.items():
            if policy.payload.hex() != self.policy_id.lower():
                continue
            for asset_name, quantity in assets.items():
                if asset_name.payload == name:
                    return int(quantity)
        return 0

    def balance(self, utxos: Optional[List[Any]] = None) -> FaucetBalance:
        """Sum ADA and HKDG over ``utxos``, fetching the wallet UTxOs when omitted."""
        if utxos is None:
            utxos = self.context.utxos(self.address)
        lovelace = 0
        hkdg = 0
        for utxo in utxos:
            amount = utxo.output.amount
            lovelace += amount.coin if isinstance(amount, Value) else int(amount)
            hkdg += self.hkdg_quantity(amount)
        return FaucetBalance(ada=lovelace_to_ada(lovelace), hkdg=hkdg, utxo_count=len(utxos))

    def validate_transfer(self, recipient: str, amount: int) -> Tuple[bool, Optional[str]]:
        try:
            parse_address(recipient)
        except ValueError:
            return False, "Invalid recipient address format"

        try:
            balance = self.balance()
        except (PyCardanoException, ApiError) as exc:
            LOGGER.error("Validation failed while reading faucet balance: %s", exc)
            return False, str(exc)

        if balance.hkdg < amount:
            return False, (
                f"Insufficient HKDG balance. Available: {format_hkdg(balance.hkdg)}, "
                f"Required: {format_hkdg(amount)}"
            )
        if balance.ada < MIN_OPERATING_ADA:
            return False, "Insufficient ADA for transaction fees"

        LOGGER.info("Transaction validation passed for %s", recipient)
        return True, None

    def send_tokens(self, recipient: str, amount: int) -> Dict[str, str]:
        recipient_address = parse_address(recipient)
        tokens = MultiAsset.from_primitive(
            {bytes.fromhex(self.policy_id): {self._asset_name_bytes(): int(amount)}}
        )

        LOGGER.info(
            "Building transaction: %s %s -> %s (unit %s)",
            format_hkdg(amount),
            self.asset_name,
            recipient,
            self.asset_unit(),
        )

        try:
            min_coin = min_lovelace_post_alonzo(TransactionOutput(recipient_address, Value(0, tokens)), self.context)
            builder = TransactionBuilder(self.context)
            builder.add_input_address(self.address)
            builder.add_output(TransactionOutput(recipient_address, Value(min_coin, tokens)))
            signed = builder.build_and_sign([self.signing_key], change_address=self.address)
            self.context.submit_tx(signed)
        except (PyCardanoException, ApiError) as exc:
            LOGGER.exception("Faucet transaction failed: %s", exc)
            lowered = str(exc).lower()
            for needle, message in _ERROR_HINTS:
                if needle in lowered:
                    raise FaucetError(message) from exc
            raise FaucetError(str(exc)) from exc

        tx_hash = signed.id.payload.hex()
        LOGGER.info("Transaction submitted to Cardano network: %s", tx_hash)
        return {"tx_hash": tx_hash, "explorer_url": explorer_url(tx_hash)}


@lru_cache(maxsize=1)
def get_faucet_backend():
    """Return the faucet backend selected by ``USE_MOCK_SLURP``."""
    if use_mock_slurp():
        LOGGER.info("Loading MOCK slurp implementation for testing")
        return MockFaucet()
    LOGGER.info("Loading PRODUCTION slurp implementation with real Cardano transactions")
    return ChainFaucet()


__all__ = [
    "ChainFaucet",
    "FaucetBalance",
    "FaucetError",
    "MockFaucet",
    "format_hkdg",
    "get_faucet_backend",
    "load_signing_key",
]
