"""FastAPI application entry point for the notification service."""

from datetime import UTC, datetime

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notification_service.api.dependencies import get_channel_senders
from notification_service.api.routes import notifications
from notification_service.config import settings
from notification_service.observability import configure_logging

logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Notification Service API",
    description="Multi-channel notification dispatch (push, email, SMS)",
    version="0.1.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(notifications.router)


@app.on_event("startup")
async def startup_event():
    """
    FastAPI startup event handler.

    Configures logging and builds the channel clients once.
    """
    configure_logging()

    senders = get_channel_senders()
    logger.info(
        "Notification service started",
        environment=settings.environment,
        channels=[
            {"channel": channel.value, "test_mode": getattr(sender, "test_mode", False)}
            for channel, sender in senders.items()
        ],
    )


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Basic health check endpoint for Docker and monitoring."""
    return {
        "status": "healthy",
        "service": settings.service_name,
        "timestamp": datetime.now(UTC).isoformat(),
    }
