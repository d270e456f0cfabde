"""Main engine for migration orchestration."""

import asyncio
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from ..clients.blob_store import BlobArchiveStore
from ..clients.github import GitHubMigrationClient
from ..core.config import RunConfig, Settings, get_settings
from ..core.logging import get_logger
from ..core.storage import ArchiveStorage
from ..models.migration import (
    LaunchFailure,
    MigrationReport,
    MigrationRequest,
    QueuedMigration,
)
from .archive_handler import ArchiveHandler
from .launcher import MigrationLauncher
from .poller import StatusPoller

logger = get_logger(__name__)


class MigrationOrchestrator:
    """Launches all migrations, then tracks every launched one to completion."""

    def __init__(
        self,
        launcher: MigrationLauncher,
        poller: StatusPoller,
        storage: ArchiveStorage,
    ):
        self.launcher = launcher
        self.poller = poller
        self.storage = storage

    @classmethod
    def build(
        cls,
        client: GitHubMigrationClient,
        run_config: RunConfig,
        settings: Optional[Settings] = None,
        blob_store: Optional[BlobArchiveStore] = None,
    ) -> "MigrationOrchestrator":
        settings = settings or get_settings()
        storage = ArchiveStorage(run_config.output_dir)
        launcher = MigrationLauncher(
            client,
            lock_repositories=run_config.lock_repositories,
            jitter_seconds=settings.launch_jitter_seconds,
        )
        poller = StatusPoller(
            client,
            ArchiveHandler(client, storage, blob_store),
            max_attempts=settings.max_poll_attempts,
            poll_interval=settings.poll_interval_seconds,
        )
        return cls(launcher, poller, storage)

    async def run(self, requests: Sequence[MigrationRequest]) -> MigrationReport:
        report = MigrationReport()
        self.storage.ensure_output_dir()

        logger.info("Launching migrations", count=len(requests))
        results = await asyncio.gather(*(self.launcher.launch(r) for r in requests))

        queued: List[QueuedMigration] = [r for r in results if isinstance(r, QueuedMigration)]
        report.launch_failures = [r for r in results if isinstance(r, LaunchFailure)]

        logger.info(
            "Migrations launched",
            queued=len(queued),
            failed=len(report.launch_failures),
            migration_ids=[m.migration_id for m in queued]
        )

        report.outcomes = list(await asyncio.gather(*(self.poller.poll(m) for m in queued)))
        report.completed_at = datetime.now(timezone.utc)

        logger.info("Migration run completed", **report.summary())
        return report


async def run_migrations(
    requests: Sequence[MigrationRequest],
    run_config: RunConfig,
    token: str,
    endpoint: str,
    settings: Optional[Settings] = None,
) -> MigrationReport:
    """Run a complete migration batch.

    The remote store, when configured, is verified before anything is launched;
    a StorageSetupError aborts the run at that point.
    """
    settings = settings or get_settings()
    blob_store = None
    if run_config.remote_store is not None:
        blob_store = BlobArchiveStore.from_config(run_config.remote_store)

    try:
        if blob_store is not None:
            await blob_store.verify()

        async with GitHubMigrationClient(endpoint, token, settings=settings) as client:
            orchestrator = MigrationOrchestrator.build(client, run_config, settings, blob_store)
            return await orchestrator.run(requests)
    finally:
        if blob_store is not None:
            await blob_store.aclose()
