import json

from hoskdog import config


def test_network_name_normalisation(monkeypatch):
    monkeypatch.setenv("NETWORK", "mainnet")
    assert config.network_name() == "Mainnet"
    monkeypatch.setenv("NETWORK", "preprod")
    assert config.network_name() == "Preprod"
    monkeypatch.delenv("NETWORK")
    monkeypatch.setenv("CARDANO_NETWORK", "Preview")
    assert config.network_name() == "Preprod"


def test_blockfrost_keys(monkeypatch):
    assert config.blockfrost_key() is None
    assert config.faucet_blockfrost_key() is None

    monkeypatch.setenv("BLOCKFROST_KEY", "mainnetproxy")
    assert config.faucet_blockfrost_key() == "mainnetproxy"

    monkeypatch.setenv("BLOCKFROST_API_KEY", "mainnetfaucet")
    assert config.faucet_blockfrost_key() == "mainnetfaucet"
    assert config.blockfrost_key() == "mainnetproxy"


def test_use_mock_slurp(monkeypatch):
    monkeypatch.setenv("USE_MOCK_SLURP", "TRUE")
    assert config.use_mock_slurp() is True
    monkeypatch.setenv("USE_MOCK_SLURP", "no")
    assert config.use_mock_slurp() is False


def test_validate_configuration_reports_missing_values(monkeypatch):
    for key in ("FAUCET_ADDRESS", "FAUCET_SKEY", "HKDG_POLICY_ID"):
        monkeypatch.delenv(key, raising=False)

    problems = config.validate_configuration()

    assert len(problems) == 1
    assert "FAUCET_ADDRESS" in problems[0]
    assert "KOIOS_API" in problems[0]


def test_validate_configuration_checks_formats(monkeypatch):
    monkeypatch.setenv("FAUCET_ADDRESS", "stake1uxyz")
    monkeypatch.setenv("FAUCET_SKEY", "deadbeef")
    monkeypatch.setenv("HKDG_POLICY_ID", "1234")
    monkeypatch.setenv("KOIOS_API", "ftp://koios")

    problems = config.validate_configuration()

    assert len(problems) == 3


def test_validate_configuration_accepts_complete_setup(monkeypatch):
    monkeypatch.setenv("FAUCET_ADDRESS", "addr1qxyz")
    monkeypatch.setenv("FAUCET_SKEY", "deadbeef")
    monkeypatch.setenv("HKDG_POLICY_ID", "ab" * 28)
    monkeypatch.setenv("KOIOS_API", "https://api.koios.rest/api/v1")

    assert config.validate_configuration() == []


def test_settings_file_overrides_defaults(monkeypatch, tmp_path):
    settings = tmp_path / "settings.json"
    settings.write_text(json.dumps({"faucet": {"rewards": {"adaOnly": 5}}}))
    monkeypatch.setenv("FAUCET_SETTINGS_PATH", str(settings))
    config.get_faucet_settings.cache_clear()
    try:
        loaded = config.get_faucet_settings()
        assert loaded["faucet"]["rewards"]["adaOnly"] == 5
        assert loaded["faucet"]["rewards"]["memeHolders"] == 2_000_000_000
        assert len(loaded["faucet"]["eligibilityTokens"]) == 2
    finally:
        monkeypatch.delenv("FAUCET_SETTINGS_PATH")
        config.get_faucet_settings.cache_clear()
