import pytest
from fastapi.testclient import TestClient

from printbay.dependencies import build_integrations
from printbay.main import create_app
from printbay.routes.health import aggregate_status, check_services


@pytest.mark.parametrize(
    "statuses,expected",
    [
        (["healthy", "healthy"], "healthy"),
        (["healthy", "degraded"], "degraded"),
        (["healthy", "unhealthy"], "unhealthy"),
        (["unhealthy", "degraded", "healthy"], "degraded"),
        ([], "healthy"),
    ],
)
def test_aggregate_status(statuses, expected):
    assert aggregate_status(statuses) == expected


def test_health_without_credentials_is_unhealthy(mock_client):
    r = mock_client.get("/api/health")
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["status"] == "unhealthy"
    services = body["services"]
    for name in ("api", "files", "pricing", "orders", "notifications"):
        assert services[name]["status"] == "healthy"
    for name in ("database", "storage", "payments", "email", "shipping"):
        assert services[name]["status"] == "unhealthy"
        assert services[name]["configured"] is False
    assert "cpuCores" in body["system"]
    assert body["version"] == "1.0.0"


def test_database_healthy_when_connected(client):
    services = client.get("/api/health").json()["services"]
    assert services["database"]["status"] == "healthy"
    assert services["database"]["configured"] is True
    assert services["storage"]["status"] == "unhealthy"


def test_database_connect_failure_reported(make_settings, tmp_path):
    bad = f"sqlite+aiosqlite:///{tmp_path}/missing/dir/shop.db"
    app = create_app(make_settings(DATABASE_URL=bad))
    with TestClient(app) as c:
        db = c.get("/api/health").json()["services"]["database"]
    assert db["status"] == "unhealthy"
    assert db["configured"] is True
    assert "initialization failed" in db["error"]


@pytest.mark.asyncio
async def test_check_services_reports_every_integration(make_settings):
    integrations = build_integrations(make_settings(STRIPE_SECRET_KEY="sk_test_123"))
    services = await check_services(integrations)
    assert set(services) == {
        "api", "files", "pricing", "orders", "notifications",
        "database", "storage", "payments", "email", "shipping",
    }
    assert services["payments"].status == "healthy"
    assert services["email"].error == "email credentials not configured"


def test_healthz(mock_client):
    r = mock_client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
