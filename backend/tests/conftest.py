import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure the backend package is importable
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from hoskdog.main import app  # noqa: E402  pylint: disable=wrong-import-position
from hoskdog.middleware import rate_limit  # noqa: E402  pylint: disable=wrong-import-position


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("SLURP_HISTORY_PATH", str(tmp_path / "slurp-history.json"))
    monkeypatch.setenv("NETWORK", "Mainnet")
    for key in ("BLOCKFROST_KEY", "BLOCKFROST_API_KEY", "APP_ENV", "NODE_ENV", "KOIOS_API"):
        monkeypatch.delenv(key, raising=False)
    rate_limit.STORAGE.reset()
    yield
    rate_limit.STORAGE.reset()


@pytest.fixture()
def client():
    return TestClient(app)
