"""Services layer: launch, poll, archive and orchestrate migrations."""

from .archive_handler import ArchiveHandler
from .launcher import MigrationLauncher
from .orchestrator import MigrationOrchestrator, run_migrations
from .poller import StatusPoller

__all__ = [
    "ArchiveHandler",
    "MigrationLauncher",
    "MigrationOrchestrator",
    "StatusPoller",
    "run_migrations",
]
