"""Tests for MigrationOrchestrator and run_migrations."""

import asyncio
import random
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from gh_migrations.core.config import BlobStoreConfig, RunConfig
from gh_migrations.core.exceptions import StorageSetupError
from gh_migrations.models.migration import (
    MigrationOutcome,
    MigrationRequest,
    MigrationStatus,
    QueuedMigration,
)
from gh_migrations.services.launcher import MigrationLauncher
from gh_migrations.services.orchestrator import MigrationOrchestrator, run_migrations


class ShuffledClient:
    """Resolves creation calls in a random order; some repos fail."""

    def __init__(self, failing, make_api_error):
        self.failing = failing
        self.make_api_error = make_api_error
        self.next_id = 1000

    async def create_migration(self, org, repositories, lock_repositories):
        for _ in range(random.randint(0, 10)):
            await asyncio.sleep(0)
        if repositories[0] in self.failing:
            raise self.make_api_error("rejected", status_code=422)
        self.next_id += 1
        return self.next_id


class RecordingPoller:
    def __init__(self):
        self.polled = []

    async def poll(self, migration: QueuedMigration) -> MigrationOutcome:
        self.polled.append(migration)
        return MigrationOutcome(
            org=migration.org,
            repo=migration.repo,
            migration_id=migration.migration_id,
            status=MigrationStatus.TIMED_OUT,
        )


class TestRun:

    @pytest.mark.asyncio
    async def test_only_launched_jobs_are_polled(self, storage, make_api_error):
        requests = [MigrationRequest(org="octo", repo=f"repo-{i}") for i in range(50)]
        failing = {f"repo-{i}" for i in range(0, 50, 5)}
        launcher = MigrationLauncher(
            ShuffledClient(failing, make_api_error), lock_repositories=True, jitter_seconds=0
        )
        poller = RecordingPoller()
        orchestrator = MigrationOrchestrator(launcher, poller, storage)

        report = await orchestrator.run(requests)

        assert len(poller.polled) == 40
        assert len(report.outcomes) == 40
        assert len(report.launch_failures) == 10
        assert {f.repo for f in report.launch_failures} == failing
        assert len({m.migration_id for m in poller.polled}) == 40
        assert report.completed_at is not None

    @pytest.mark.asyncio
    async def test_creates_output_directory(self, storage, make_client):
        launcher = MigrationLauncher(make_client(), lock_repositories=False, jitter_seconds=0)
        orchestrator = MigrationOrchestrator(launcher, RecordingPoller(), storage)

        report = await orchestrator.run([])

        assert storage.output_dir.is_dir()
        assert report.outcomes == []

    @pytest.mark.asyncio
    async def test_end_to_end_with_mixed_outcomes(
        self, tmp_path, settings, make_client, make_api_error, blob_store
    ):
        client = make_client(
            launches={"a": 1, "b": 2, "c": 3, "d": make_api_error("nope")},
            states={1: ["exporting", "exported"], 2: ["failed"], 3: ["pending"]},
        )
        run_config = RunConfig(lock_repositories=True, output_dir=tmp_path / "out")
        orchestrator = MigrationOrchestrator.build(client, run_config, settings, blob_store)

        report = await orchestrator.run(
            [MigrationRequest(org="octo", repo=r) for r in ("a", "b", "c", "d")]
        )

        statuses = {o.repo: o.status for o in report.outcomes}
        assert statuses == {
            "a": MigrationStatus.EXPORTED,
            "b": MigrationStatus.FAILED,
            "c": MigrationStatus.TIMED_OUT,
        }
        assert [f.repo for f in report.launch_failures] == ["d"]
        assert client.status_calls == {1: 2, 2: 1, 3: settings.max_poll_attempts}
        assert [u["tags"] for u in blob_store.uploads] == [{"owner": "octo", "repo": "a"}]
        assert all(c["lock_repositories"] for c in client.create_calls)


class TestRunMigrations:

    @pytest.mark.asyncio
    async def test_unreachable_store_aborts_before_launch(self, tmp_path, settings):
        store = MagicMock()
        store.verify = AsyncMock(side_effect=StorageSetupError("unreachable"))
        store.aclose = AsyncMock()
        run_config = RunConfig(
            output_dir=tmp_path / "out",
            remote_store=BlobStoreConfig(connection_string="cs", container="archives"),
        )

        with patch(
            "gh_migrations.services.orchestrator.BlobArchiveStore.from_config", return_value=store
        ), patch("gh_migrations.services.orchestrator.GitHubMigrationClient") as client_cls:
            with pytest.raises(StorageSetupError):
                await run_migrations(
                    [MigrationRequest(org="o", repo="r")], run_config, "token", "api.github.com", settings
                )

        client_cls.assert_not_called()
        store.aclose.assert_awaited_once()
        assert not (tmp_path / "out").exists()

    @pytest.mark.asyncio
    async def test_runs_without_remote_store(self, tmp_path, settings, make_client):
        fake_client = make_client(launches={"r": 5}, states={5: ["failed"]})
        client_cm = MagicMock()
        client_cm.__aenter__ = AsyncMock(return_value=fake_client)
        client_cm.__aexit__ = AsyncMock(return_value=False)
        run_config = RunConfig(output_dir=tmp_path / "out")

        with patch(
            "gh_migrations.services.orchestrator.GitHubMigrationClient", return_value=client_cm
        ) as client_cls, patch(
            "gh_migrations.services.orchestrator.BlobArchiveStore.from_config"
        ) as from_config:
            report = await run_migrations(
                [MigrationRequest(org="o", repo="r")], run_config, "token", "api.github.com", settings
            )

        client_cls.assert_called_once_with("api.github.com", "token", settings=settings)
        from_config.assert_not_called()
        client_cm.__aexit__.assert_awaited_once()
        assert [o.status for o in report.outcomes] == [MigrationStatus.FAILED]
