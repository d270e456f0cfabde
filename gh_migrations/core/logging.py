"""Logging configuration for the migration tool."""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.stdlib import LoggerFactory

from .config import Settings, get_settings


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Setup structured logging configuration."""
    settings = settings or get_settings()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if settings.log_format == "json"
            else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )

    if settings.log_file is None:
        return

    settings.log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(settings.log_file)
    file_handler.setLevel(logging.DEBUG)

    if settings.log_format == "json":
        formatter = logging.Formatter('%(message)s')
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    file_handler.setFormatter(formatter)
    logging.getLogger().addHandler(file_handler)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


class MigrationLogger:
    """Logger that tags every event with the owning migration job."""

    def __init__(self, org: str, repo: str, migration_id: Optional[int] = None):
        self.logger = get_logger("migration_job")
        self.context = {"org": org, "repo": repo}
        if migration_id is not None:
            self.context["migration_id"] = migration_id

    def info(self, message: str, **kwargs: Any) -> None:
        self.logger.info(message, **self.context, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self.logger.error(message, **self.context, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.logger.warning(message, **self.context, **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        self.logger.debug(message, **self.context, **kwargs)
