"""Submits migration creation requests."""

import asyncio
import random
from typing import Awaitable, Callable, Union

from ..clients.github import GitHubMigrationClient
from ..core.exceptions import MigrationAPIError
from ..core.logging import MigrationLogger
from ..models.migration import LaunchFailure, MigrationRequest, QueuedMigration

LaunchResult = Union[QueuedMigration, LaunchFailure]


class MigrationLauncher:
    """Starts one migration per request.

    A small random delay may precede each request so that launching many jobs at
    once does not hit the API in a single burst. Failures are not retried.
    """

    def __init__(
        self,
        client: GitHubMigrationClient,
        lock_repositories: bool,
        jitter_seconds: float = 5.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.lock_repositories = lock_repositories
        self.jitter_seconds = jitter_seconds
        self._sleep = sleep

    async def launch(self, request: MigrationRequest) -> LaunchResult:
        job_logger = MigrationLogger(request.org, request.repo)

        if self.jitter_seconds > 0:
            await self._sleep(random.uniform(0, self.jitter_seconds))

        try:
            migration_id = await self.client.create_migration(
                request.org,
                [request.repo],
                lock_repositories=self.lock_repositories,
            )
        except MigrationAPIError as e:
            job_logger.error("Failed to start migration", error=str(e), status_code=e.status_code)
            return LaunchFailure(
                org=request.org,
                repo=request.repo,
                error=str(e),
                status_code=e.status_code,
            )

        job_logger.info(
            "Started migration",
            migration_id=migration_id,
            lock_repositories=self.lock_repositories
        )
        return QueuedMigration(org=request.org, repo=request.repo, migration_id=migration_id)
