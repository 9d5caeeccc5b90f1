"""
Custom exceptions for The Printed Bay API.

Exception Hierarchy:
    PrintBayError (base)
    ├── IntegrationError        - a configured vendor call failed (→ HTTP 500)
    ├── UploadRejected          - upload failed validation (→ 4xx)
    └── SimulationDisabledError - simulation requested while switched off

Unconfigured integrations never raise; they answer with mock data.
"""

from typing import Any, Dict, Optional


class PrintBayError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class IntegrationError(PrintBayError):
    """
    A vendor SDK or REST call failed while the integration was configured.

    Attributes:
        service: Integration name ("database", "shipping", "storage", ...)
    """

    def __init__(self, service: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.service = service
        super().__init__(f"{service}: {message}", details)


class UploadRejected(PrintBayError):
    """Upload validation failure carrying the HTTP status to answer with."""

    def __init__(self, status_code: int, message: str, details: Optional[Dict[str, Any]] = None):
        self.status_code = status_code
        super().__init__(message, details)


class SimulationDisabledError(PrintBayError):
    """Raised by the simulation layer when it has been switched off."""
