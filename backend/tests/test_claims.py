import json

from hoskdog.utils import claims

DAY_MS = 24 * 60 * 60 * 1000


def test_history_file_missing_means_no_claims(tmp_path):
    path = tmp_path / "missing.json"
    assert claims.load_history(path) == []
    assert claims.has_recent_claim("addr1a", path=path) is False


def test_record_claim_creates_file_and_numbers_entries(tmp_path):
    path = tmp_path / "logs" / "history.json"

    first = claims.record_claim({"address": "addr1a", "tier": "meme", "amount": 5, "timestamp": 1}, "mock", path=path)
    second = claims.record_claim({"address": "addr1b", "tier": "ada", "amount": 7, "timestamp": 2}, "mock", path=path)

    assert first["id"] == 1
    assert second["id"] == 2
    assert second["mode"] == "mock"
    stored = json.loads(path.read_text())
    assert [entry["address"] for entry in stored] == ["addr1a", "addr1b"]
    assert "date" in stored[0]


def test_recent_claim_window(tmp_path):
    path = tmp_path / "history.json"
    now = 10 * DAY_MS
    claims.record_claim({"address": "addr1a", "timestamp": now - DAY_MS + 1000}, "mock", path=path)
    claims.record_claim({"address": "addr1b", "timestamp": now - DAY_MS - 1000}, "mock", path=path)

    assert claims.has_recent_claim("addr1a", now_ms=now, path=path) is True
    assert claims.has_recent_claim("addr1b", now_ms=now, path=path) is False
    assert claims.has_recent_claim("addr1c", now_ms=now, path=path) is False


def test_corrupt_history_allows_claims(tmp_path):
    path = tmp_path / "history.json"
    path.write_text("{not json")
    assert claims.has_recent_claim("addr1a", path=path) is False


def test_record_claim_failure_is_logged_not_raised(tmp_path):
    path = tmp_path / "history.json"
    path.write_text(json.dumps({"not": "a list"}))
    assert claims.record_claim({"address": "addr1a"}, "mock", path=path) is None


def test_claim_statistics(tmp_path):
    path = tmp_path / "history.json"
    claims.record_claim({"address": "addr1a", "tier": "meme", "amount": 2_000_000_000}, "mock", path=path)
    claims.record_claim({"address": "addr1a", "tier": "ada", "amount": 1_000_000_000}, "production", path=path)
    last = claims.record_claim({"address": "addr1b", "tier": "ada", "amount": 1_000_000_000}, "mock", path=path)

    stats = claims.claim_statistics(path)

    assert stats["total_slurps"] == 3
    assert stats["unique_addresses"] == 2
    assert stats["total_distributed"] == 4_000_000_000
    assert stats["meme_holder_slurps"] == 1
    assert stats["ada_only_slurps"] == 2
    assert stats["mode_counts"] == {"mock": 2, "production": 1}
    assert stats["last_slurp"] == last["date"]


def test_claim_statistics_empty(tmp_path):
    stats = claims.claim_statistics(tmp_path / "history.json")
    assert stats["total_slurps"] == 0
    assert stats["last_slurp"] is None


def test_history_path_follows_environment(monkeypatch, tmp_path):
    target = tmp_path / "custom.json"
    monkeypatch.setenv("SLURP_HISTORY_PATH", str(target))
    claims.record_claim({"address": "addr1a"}, "mock")
    assert target.exists()


def test_address_lock_is_shared_per_address():
    lock = claims.address_lock("addr1a")
    assert claims.address_lock("addr1a") is lock
    assert claims.address_lock("addr1b") is not lock
