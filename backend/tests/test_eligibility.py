import pytest

from hoskdog.ingest.koios_client import KoiosError
from hoskdog.utils import eligibility

HOSKY = "a0028f350aaabe0545fdcb56b039bfb08e4bb4d8c4d7c3c7d481c235"
SNEK = "279c909f348e533da5808898f87f9a14bb2c3dfbbacccd631d927a3f"


@pytest.fixture()
def holdings(monkeypatch):
    state = {"assets": [], "balance": 0}
    monkeypatch.setattr(eligibility, "fetch_address_assets", lambda _address: state["assets"])
    monkeypatch.setattr(eligibility, "fetch_address_balance", lambda _address: state["balance"])
    monkeypatch.setattr(eligibility, "has_recent_claim", lambda _address: False)
    return state


def test_meme_holder_tier(holdings):
    holdings["assets"] = [{"policy_id": SNEK, "asset_name": "534e454b", "quantity": "12"}]

    result = eligibility.check_eligibility("addr1holder")

    assert result == {
        "eligible": True,
        "tier": "meme",
        "reward": 2_000_000_000,
        "deposit": 2_000_000,
        "reason": "HOSKY or SNEK token detected",
    }


def test_meme_tier_wins_over_ada_balance(holdings):
    holdings["assets"] = [{"policy_id": HOSKY, "quantity": "1"}]
    holdings["balance"] = 50_000_000
    assert eligibility.check_eligibility("addr1holder")["tier"] == "meme"


def test_ada_tier_requires_three_ada(holdings):
    holdings["balance"] = 3_000_000
    result = eligibility.check_eligibility("addr1holder")
    assert result["tier"] == "ada"
    assert result["reward"] == 1_000_000_000
    assert result["deposit"] == 3_000_000

    holdings["balance"] = 2_999_999
    result = eligibility.check_eligibility("addr1holder")
    assert result["eligible"] is False
    assert result["reason"] == "Need HOSKY/SNEK tokens or 3+ ADA balance"


def test_unrelated_tokens_do_not_qualify(holdings):
    holdings["assets"] = [{"policy_id": "ff" * 28, "quantity": "1000"}, {"policy_id": SNEK, "quantity": "0"}]
    assert eligibility.holds_meme_tokens("addr1holder") is False


def test_recent_claim_blocks_eligibility(holdings, monkeypatch):
    monkeypatch.setattr(eligibility, "has_recent_claim", lambda _address: True)

    result = eligibility.check_eligibility("addr1holder")

    assert result["eligible"] is False
    assert result["tier"] is None
    assert result["reason"] == "Already claimed today. Please wait 24 hours."


def test_koios_failures_count_as_no_holdings(monkeypatch):
    def failing(_address):
        raise KoiosError("down")

    monkeypatch.setattr(eligibility, "fetch_address_assets", failing)
    monkeypatch.setattr(eligibility, "fetch_address_balance", failing)
    monkeypatch.setattr(eligibility, "has_recent_claim", lambda _address: False)

    assert eligibility.holds_meme_tokens("addr1holder") is False
    assert eligibility.ada_balance("addr1holder") == 0
    assert eligibility.check_eligibility("addr1holder")["eligible"] is False


def test_check_eligibility_endpoint(client, monkeypatch, holdings):
    holdings["balance"] = 10_000_000

    response = client.post("/api/check-eligibility", json={"address": "addr1holder"})

    assert response.status_code == 200
    assert response.json() == {
        "eligible": True,
        "tier": "ada",
        "reward": 1_000_000_000,
        "deposit": 3_000_000,
        "reason": "Sufficient ADA balance",
    }


def test_check_eligibility_requires_address(client):
    response = client.post("/api/check-eligibility", json={"address": "  "})
    assert response.status_code == 400
    assert response.json() == {"error": "Wallet address is required"}


def test_ineligible_response_omits_reward_fields(client, holdings):
    body = client.post("/api/check-eligibility", json={"address": "addr1holder"}).json()
    assert body == {"eligible": False, "reason": "Need HOSKY/SNEK tokens or 3+ ADA balance"}
