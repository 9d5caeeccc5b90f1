import os
import sys
from pathlib import Path

# Keep a developer's real credentials out of the test run
os.environ["ENV"] = "test"
for _key in (
    "DATABASE_URL",
    "AZURE_SQL_SERVER",
    "AZURE_SQL_DATABASE",
    "AZURE_SQL_USER",
    "AZURE_SQL_PASSWORD",
    "AZURE_STORAGE_CONNECTION_STRING",
    "STRIPE_SECRET_KEY",
    "SENDGRID_API_KEY",
    "SHIPPO_API_KEY",
):
    os.environ[_key] = ""
os.environ.setdefault("FILE_CACHE_URL", "sqlite+aiosqlite:///:memory:")

sys.path.append(Path(__file__).resolve().parents[1].as_posix())

import pytest
from fastapi.testclient import TestClient

from printbay.config.settings import Settings
from printbay.main import create_app

MEMORY_DB = "sqlite+aiosqlite:///:memory:"


@pytest.fixture()
def make_settings(tmp_path):
    def _make(**overrides) -> Settings:
        values = {
            "ENV": "test",
            "UPLOAD_DIR": str(tmp_path / "uploads"),
            "FILE_CACHE_URL": MEMORY_DB,
            "SIMULATION_DELAY_SCALE": 0.0,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture()
def client(make_settings):
    """App with an in-memory database; every other vendor in mock mode."""
    app = create_app(make_settings(DATABASE_URL=MEMORY_DB))
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def mock_client(make_settings):
    """App with no integrations configured at all."""
    app = create_app(make_settings())
    with TestClient(app) as c:
        yield c
