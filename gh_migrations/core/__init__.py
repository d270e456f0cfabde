"""Core services for the migration tool."""

from .config import BlobStoreConfig, RunConfig, Settings, get_settings
from .logging import setup_logging, get_logger, MigrationLogger
from .storage import ArchiveStorage

__all__ = [
    "BlobStoreConfig",
    "RunConfig",
    "Settings",
    "get_settings",
    "setup_logging",
    "get_logger",
    "MigrationLogger",
    "ArchiveStorage",
]
