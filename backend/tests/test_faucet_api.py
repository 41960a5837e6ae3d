from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi import HTTPException

from hoskdog.api import faucet as faucet_api
from hoskdog.chain.faucet import FaucetBalance, FaucetError, MockFaucet, format_hkdg
from hoskdog.models import SlurpRequest
from hoskdog.utils import claims

RECIPIENT = "addr1qxrecipient"


@pytest.fixture()
def mock_faucet(monkeypatch):
    backend = MockFaucet(delay=0)
    monkeypatch.setattr(faucet_api, "get_faucet_backend", lambda: backend)
    return backend


def test_slurp_sends_reward_and_records_claim(client, mock_faucet):
    response = client.post("/api/slurp", json={"address": RECIPIENT, "tier": "meme"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert len(body["txHash"]) == 64
    assert body["explorerUrl"] == f"https://cardanoscan.io/transaction/{body['txHash']}"
    assert body["amount"] == "2,000"
    assert body["message"] == "Successfully sent 2,000 HKDG to your wallet!"
    assert body["note"].startswith("[MOCK MODE]")

    history = claims.load_history()
    assert history[0]["address"] == RECIPIENT
    assert history[0]["tier"] == "meme"
    assert history[0]["amount"] == 2_000_000_000
    assert history[0]["txHash"] == body["txHash"]
    assert history[0]["mode"] == "mock"


def test_second_slurp_within_a_day_is_rejected(client, mock_faucet):
    assert client.post("/api/slurp", json={"address": RECIPIENT, "tier": "ada"}).status_code == 200

    response = client.post("/api/slurp", json={"address": RECIPIENT, "tier": "ada"})

    assert response.status_code == 429
    assert response.json() == {"error": "Already claimed today. Please wait 24 hours."}


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"address": RECIPIENT}, "Address and tier are required"),
        ({"tier": "meme"}, "Address and tier are required"),
        ({"address": RECIPIENT, "tier": "whale"}, "Invalid tier"),
    ],
)
def test_slurp_validates_request(client, mock_faucet, payload, message):
    response = client.post("/api/slurp", json=payload)
    assert response.status_code == 400
    assert response.json() == {"error": message}


def test_slurp_reports_failed_validation(client, mock_faucet):
    response = client.post("/api/slurp", json={"address": "stake1notpayable", "tier": "ada"})

    assert response.status_code == 400
    assert response.json() == {
        "error": "Transaction validation failed",
        "details": 'Address must start with "addr"',
    }
    assert claims.load_history() == []


def test_slurp_transfer_failure(client, monkeypatch):
    class BrokenFaucet(MockFaucet):
        def send_tokens(self, recipient, amount):
            raise FaucetError("Faucet wallet has insufficient funds")

    monkeypatch.setattr(faucet_api, "get_faucet_backend", lambda: BrokenFaucet(delay=0))

    response = client.post("/api/slurp", json={"address": RECIPIENT, "tier": "ada"})

    assert response.status_code == 500
    assert response.json()["error"] == "Slurp failed"
    assert claims.load_history() == []


def test_faucet_status(client, mock_faucet):
    response = client.get("/api/faucet-status")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "operational (mock mode)"
    assert body["balance"] == {"ada": 25.5, "hkdg": "100", "hkdgRaw": 100_000_000, "utxos": 5}
    assert body["canOperate"] is True
    assert body["mode"] == "mock"
    assert body["network"] == "Mainnet"


def test_faucet_status_cannot_operate_without_ada(client, monkeypatch):
    class DrainedFaucet(MockFaucet):
        def balance(self):
            return FaucetBalance(ada=1.5, hkdg=10, utxo_count=1)

    monkeypatch.setattr(faucet_api, "get_faucet_backend", lambda: DrainedFaucet(delay=0))

    assert client.get("/api/faucet-status").json()["canOperate"] is False


def test_stats_after_slurps(client, mock_faucet):
    client.post("/api/slurp", json={"address": RECIPIENT, "tier": "meme"})
    client.post("/api/slurp", json={"address": "addr1qxother", "tier": "ada"})

    body = client.get("/api/stats").json()

    assert body["totalSlurps"] == 2
    assert body["uniqueAddresses"] == 2
    assert body["totalDistributed"] == "3,000"
    assert body["memeHolderSlurps"] == 1
    assert body["adaOnlySlurps"] == 1
    assert body["modeCounts"] == {"mock": 2}
    assert body["mode"] == "mock"


def test_format_hkdg_uses_token_decimals():
    assert format_hkdg(2_000_000_000) == "2,000"
    assert format_hkdg(1_234_567) == "1.235"
    assert format_hkdg(0) == "0"


def test_mock_balance_can_operate():
    assert MockFaucet(delay=0).balance().can_operate is True


def test_transfer_runs_while_address_is_locked(client, monkeypatch):
    held = []

    class LockCheckingFaucet(MockFaucet):
        def send_tokens(self, recipient, amount):
            held.append(claims.address_lock(recipient).locked())
            return super().send_tokens(recipient, amount)

    monkeypatch.setattr(faucet_api, "get_faucet_backend", lambda: LockCheckingFaucet(delay=0))

    assert client.post("/api/slurp", json={"address": RECIPIENT, "tier": "ada"}).status_code == 200
    assert held == [True]
    assert claims.address_lock(RECIPIENT).locked() is False


def test_concurrent_slurps_for_one_address_pay_once(monkeypatch):
    monkeypatch.setattr(faucet_api, "get_faucet_backend", lambda: MockFaucet(delay=0.2))

    def attempt(_):
        try:
            return faucet_api.slurp(SlurpRequest(address=RECIPIENT, tier="ada")).tx_hash
        except HTTPException as exc:
            return exc.status_code

    with ThreadPoolExecutor(max_workers=2) as pool:
        outcomes = list(pool.map(attempt, range(2)))

    assert outcomes.count(429) == 1
    assert len(claims.load_history()) == 1
