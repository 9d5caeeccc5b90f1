# printbay/routes/health.py
import logging
from datetime import datetime, timezone
from typing import Dict, Iterable

from fastapi import APIRouter, Depends

from printbay.core.exceptions import IntegrationError
from printbay.dependencies import Integrations, get_integrations
from printbay.schemas.health import HealthResponse, HealthStatus, ServiceHealth
from printbay.utils.responses import json_errors, success_response
from printbay.utils.system_info import get_system_status_snapshot

router = APIRouter()
log = logging.getLogger("uvicorn.error")

# Served by this process, healthy whenever it answers
ALWAYS_UP = ("api", "files", "pricing", "orders", "notifications")


def aggregate_status(statuses: Iterable[HealthStatus]) -> HealthStatus:
    statuses = list(statuses)
    any_degraded = "degraded" in statuses
    if "unhealthy" in statuses:
        return "degraded" if any_degraded else "unhealthy"
    if any_degraded:
        return "degraded"
    return "healthy"


async def check_services(integrations: Integrations) -> Dict[str, ServiceHealth]:
    now = datetime.now(timezone.utc)
    services: Dict[str, ServiceHealth] = {}

    for name in ALWAYS_UP:
        services[name] = ServiceHealth(name=name, status="healthy", configured=True, last_checked=now)

    db = integrations.database
    try:
        await db.initialize()
        if db.configured:
            services["database"] = ServiceHealth(name="database", status="healthy", configured=True, last_checked=now)
        else:
            services["database"] = ServiceHealth(
                name="database", status="unhealthy", configured=False, last_checked=now,
                error="Database credentials not configured",
            )
    except IntegrationError as e:
        services["database"] = ServiceHealth(
            name="database", status="unhealthy", configured=True, last_checked=now, error=str(e),
        )

    for name, svc in (
        ("storage", integrations.storage),
        ("payments", integrations.payments),
        ("email", integrations.notifications),
        ("shipping", integrations.shipping),
    ):
        services[name] = ServiceHealth(
            name=name,
            status="healthy" if svc.configured else "unhealthy",
            configured=svc.configured,
            last_checked=now,
            error=None if svc.configured else f"{name} credentials not configured",
        )
    return services


@router.get("/api/health")
@json_errors("Health check failed")
async def health(integrations: Integrations = Depends(get_integrations)):
    services = await check_services(integrations)
    overall = aggregate_status(s.status for s in services.values())
    if overall != "healthy":
        log.warning("⚠️ Health: %s (%s)", overall,
                    ", ".join(n for n, s in services.items() if s.status != "healthy"))
    return success_response(
        HealthResponse(
            status=overall,
            services=services,
            timestamp=datetime.now(timezone.utc),
            version=integrations.settings.app_version,
            system=get_system_status_snapshot(),
        )
    )


@router.get("/healthz", include_in_schema=False)
async def healthz():
    return {"status": "ok"}
