# printbay/models/__init__.py

"""
Aggregate exports for all ORM models.

Vendor tables share `Base`; the client file cache lives on `CacheBase`.
"""

from printbay.db.base_class import Base, CacheBase

from .models import (  # noqa: E402
    CachedFile,
    Order,
    Payment,
    PricingRecord,
    ShippingLabel,
)

__all__ = [
    "Base",
    "CacheBase",
    "CachedFile",
    "Order",
    "Payment",
    "PricingRecord",
    "ShippingLabel",
]
