"""
Logging configuration.

Configures loguru logger for services and task workers.
Sets up log rotation and retention policies.
"""

from loguru import logger

from backoffice.config.settings import settings


def setup_logging() -> None:
    """Configure logger with file rotation."""
    logger.add(
        settings.log_file,
        rotation="1 day",
        retention="7 days",
        level=settings.log_level,
        encoding="utf-8",
    )

    logger.info("Starting commission back office workers...")
