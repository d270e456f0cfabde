"""Tracks a queued migration until it reaches a terminal state."""

import asyncio
from typing import Awaitable, Callable, Optional, Tuple

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from ..clients.github import GitHubMigrationClient
from ..core.exceptions import ArchiveError, MigrationAPIError
from ..core.logging import MigrationLogger
from ..models.migration import (
    MigrationOutcome,
    MigrationStatus,
    QueuedMigration,
    classify_state,
)
from .archive_handler import ArchiveHandler

# Observations that keep the job polling; UNKNOWN is a transient fetch error.
_KEEP_POLLING = {MigrationStatus.PENDING, MigrationStatus.UNKNOWN}


def _last_result(retry_state: RetryCallState) -> MigrationStatus:
    return retry_state.outcome.result()


class StatusPoller:
    """Polls migration status at a fixed interval with a bounded number of attempts."""

    def __init__(
        self,
        client: GitHubMigrationClient,
        archive_handler: ArchiveHandler,
        max_attempts: int = 180,
        poll_interval: float = 60.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.archive_handler = archive_handler
        self.max_attempts = max_attempts
        self.poll_interval = poll_interval
        self._sleep = sleep

    async def poll(self, migration: QueuedMigration) -> MigrationOutcome:
        job_logger = MigrationLogger(migration.org, migration.repo, migration.migration_id)
        remote_state: Optional[str] = None
        error: Optional[str] = None
        attempts = 0

        def log_wait(retry_state: RetryCallState) -> None:
            job_logger.info(
                "Waiting before checking migration status again",
                delay_seconds=self.poll_interval,
                attempt=retry_state.attempt_number,
                max_attempts=self.max_attempts
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.poll_interval),
            retry=retry_if_result(lambda status: status in _KEEP_POLLING),
            retry_error_callback=_last_result,
            before_sleep=log_wait,
            sleep=self._sleep,
        )

        status = MigrationStatus.PENDING
        async for attempt in retrying:
            with attempt:
                attempts = attempt.retry_state.attempt_number
                status, remote_state, error = await self._observe(migration, job_logger)
            if not attempt.retry_state.outcome.failed:
                attempt.retry_state.set_result(status)

        if status is MigrationStatus.EXPORTED:
            return await self._complete_export(migration, job_logger, remote_state, attempts)

        if status is MigrationStatus.FAILED:
            job_logger.error("Archive generation failed", attempts=attempts)
            return self._outcome(migration, MigrationStatus.FAILED, remote_state, attempts)

        job_logger.error(
            "Maximum number of attempts reached",
            max_attempts=self.max_attempts,
            last_status=status.value
        )
        final = MigrationStatus.UNKNOWN if status is MigrationStatus.UNKNOWN else MigrationStatus.TIMED_OUT
        return self._outcome(migration, final, remote_state, attempts, error=error)

    async def _observe(
        self,
        migration: QueuedMigration,
        job_logger: MigrationLogger,
    ) -> Tuple[MigrationStatus, Optional[str], Optional[str]]:
        """Fetch one status sample. Fetch errors become an UNKNOWN observation."""
        try:
            state = await self.client.get_migration_state(migration.org, migration.migration_id)
        except MigrationAPIError as e:
            job_logger.warning("Failed to get migration status", error=str(e))
            return MigrationStatus.UNKNOWN, None, str(e)

        job_logger.info("Migration status", state=state)
        return classify_state(state), state, None

    async def _complete_export(
        self,
        migration: QueuedMigration,
        job_logger: MigrationLogger,
        remote_state: Optional[str],
        attempts: int,
    ) -> MigrationOutcome:
        job_logger.info("Migration export complete", attempts=attempts)
        try:
            artifact = await self.archive_handler.handle(migration)
        except (MigrationAPIError, ArchiveError) as e:
            job_logger.error("Failed to retrieve migration archive", error=str(e))
            return self._outcome(
                migration,
                MigrationStatus.FAILED,
                remote_state,
                attempts,
                error=f"Archive retrieval failed: {e}",
            )

        return MigrationOutcome(
            org=migration.org,
            repo=migration.repo,
            migration_id=migration.migration_id,
            status=MigrationStatus.EXPORTED,
            remote_state=remote_state,
            attempts=attempts,
            artifact=artifact,
        )

    @staticmethod
    def _outcome(
        migration: QueuedMigration,
        status: MigrationStatus,
        remote_state: Optional[str],
        attempts: int,
        error: Optional[str] = None,
    ) -> MigrationOutcome:
        return MigrationOutcome(
            org=migration.org,
            repo=migration.repo,
            migration_id=migration.migration_id,
            status=status,
            remote_state=remote_state,
            attempts=attempts,
            error=error,
        )
