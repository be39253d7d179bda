"""
Structlog configuration for the notification service.

Call ``configure_logging()`` once at application startup. Modules obtain their
logger with ``structlog.get_logger(__name__)`` and log an event name plus
key-value context:

    logger.info("notification_created", notification_id=str(n.id), user_id=user_id)

Development renders colored console output; production renders one JSON
object per line.
"""

import logging
from typing import Optional

import structlog

from notification_service.config import settings


def configure_logging(
    log_level: Optional[str] = None,
    is_production: Optional[bool] = None,
) -> None:
    """
    Configure structlog and the standard library root logger.

    Args:
        log_level: Override for ``settings.log_level``
        is_production: Override for ``settings.is_production``; selects JSON output
    """
    prod_mode = is_production if is_production is not None else settings.is_production

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if prod_mode:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    effective_level = (log_level or settings.log_level).upper()
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, effective_level, logging.INFO),
    )
