"""Observability helpers (structured logging)."""

from notification_service.observability.logging_config import configure_logging

__all__ = ["configure_logging"]
