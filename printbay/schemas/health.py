# printbay/schemas/health.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Literal, Optional

from printbay.schemas._base import APIModel as BaseModel

HealthStatus = Literal["healthy", "degraded", "unhealthy"]


class ServiceHealth(BaseModel):
    name: str
    status: HealthStatus
    configured: bool
    last_checked: datetime
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: HealthStatus
    services: Dict[str, ServiceHealth]
    timestamp: datetime
    version: str
    system: Dict[str, Any] = {}
