# printbay/dependencies/__init__.py

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, Optional

from fastapi import Request

from printbay.config.settings import Settings
from printbay.core.exceptions import IntegrationError
from printbay.services.database import DatabaseService
from printbay.services.email import NotificationService
from printbay.services.payments import PaymentService
from printbay.services.shipping import ShippingService
from printbay.services.storage import StorageService

__all__ = [
    "Integrations",
    "build_integrations",
    "get_integrations",
    "get_settings_dep",
    "get_database",
    "get_storage",
    "get_shipping",
    "get_payments",
    "get_notifications",
    "get_rng",
]

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────────────
# Container
# ──────────────────────────────────────────────────────────────────────────────

@dataclass
class Integrations:
    """One handle per vendor, built once per app and kept on `app.state`."""

    settings: Settings
    database: DatabaseService
    storage: StorageService
    shipping: ShippingService
    payments: PaymentService
    notifications: NotificationService
    rng: random.Random = field(default_factory=random.Random)

    def services(self) -> Dict[str, object]:
        return {
            "database": self.database,
            "storage": self.storage,
            "shipping": self.shipping,
            "payments": self.payments,
            "email": self.notifications,
        }

    def modes(self) -> Dict[str, bool]:
        """name -> True when the integration talks to its real vendor."""
        return {name: svc.configured for name, svc in self.services().items()}

    async def initialize_all(self) -> None:
        """Warm every integration. A vendor that fails to start is logged, not fatal."""
        for name, svc in self.services().items():
            try:
                await svc.initialize()
            except IntegrationError as e:
                logger.error("❌ %s failed to initialize at startup: %s", name, e)

    async def close_all(self) -> None:
        for svc in self.services().values():
            await svc.close()


def build_integrations(settings: Settings, rng: Optional[random.Random] = None) -> Integrations:
    return Integrations(
        settings=settings,
        database=DatabaseService(settings),
        storage=StorageService(settings),
        shipping=ShippingService(settings),
        payments=PaymentService(settings),
        notifications=NotificationService(settings),
        rng=rng or random.Random(),
    )


# ──────────────────────────────────────────────────────────────────────────────
# FastAPI dependencies
# ──────────────────────────────────────────────────────────────────────────────

def get_integrations(request: Request) -> Integrations:
    return request.app.state.integrations


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.integrations.settings


def get_rng(request: Request) -> random.Random:
    return request.app.state.integrations.rng


async def get_database(request: Request) -> DatabaseService:
    svc = get_integrations(request).database
    await svc.initialize()
    return svc


async def get_storage(request: Request) -> StorageService:
    svc = get_integrations(request).storage
    await svc.initialize()
    return svc


async def get_shipping(request: Request) -> ShippingService:
    svc = get_integrations(request).shipping
    await svc.initialize()
    return svc


async def get_payments(request: Request) -> PaymentService:
    svc = get_integrations(request).payments
    await svc.initialize()
    return svc


async def get_notifications(request: Request) -> NotificationService:
    svc = get_integrations(request).notifications
    await svc.initialize()
    return svc
