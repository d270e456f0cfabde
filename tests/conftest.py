"""Shared test fixtures and fakes for the gh_migrations test suite."""

from pathlib import Path
from typing import Dict, List, Optional, Union

import pytest

from gh_migrations.core.config import Settings
from gh_migrations.core.exceptions import ArchiveUploadError, MigrationAPIError
from gh_migrations.core.storage import ArchiveStorage


class FakeMigrationClient:
    """In-memory stand-in for GitHubMigrationClient.

    ``launches`` maps repo name to a migration id or an exception to raise.
    ``states`` maps migration id to a sequence of states (or exceptions); the
    last entry repeats once the sequence is exhausted.
    """

    def __init__(
        self,
        launches: Optional[Dict[str, Union[int, Exception]]] = None,
        states: Optional[Dict[int, List[Union[str, Exception]]]] = None,
        archives: Optional[Dict[int, Union[bytes, Exception]]] = None,
    ):
        self.launches = launches or {}
        self.states = states or {}
        self.archives = archives or {}
        self.create_calls: List[dict] = []
        self.status_calls: Dict[int, int] = {}
        self.archive_calls: List[int] = []

    async def create_migration(self, org, repositories, lock_repositories):
        self.create_calls.append(
            {"org": org, "repositories": repositories, "lock_repositories": lock_repositories}
        )
        result = self.launches[repositories[0]]
        if isinstance(result, Exception):
            raise result
        return result

    async def get_migration_state(self, org, migration_id):
        count = self.status_calls.get(migration_id, 0)
        self.status_calls[migration_id] = count + 1
        sequence = self.states[migration_id]
        result = sequence[min(count, len(sequence) - 1)]
        if isinstance(result, Exception):
            raise result
        return result

    async def iter_archive(self, org, migration_id, chunk_size=None):
        self.archive_calls.append(migration_id)
        content = self.archives.get(migration_id, b"archive-%d" % migration_id)
        if isinstance(content, Exception):
            raise content
        yield content[: len(content) // 2]
        yield content[len(content) // 2:]


class FakeBlobStore:
    """Records uploads; optionally fails them."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.uploads: List[dict] = []

    async def upload(self, local_path: Path, key: str, tags: Dict[str, str]) -> None:
        self.uploads.append(
            {"local_path": local_path, "key": key, "tags": tags, "existed": local_path.exists()}
        )
        if self.fail:
            raise ArchiveUploadError("container unavailable")


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def api_error(message: str = "boom", status_code: Optional[int] = None) -> MigrationAPIError:
    return MigrationAPIError(message, status_code=status_code)


@pytest.fixture()
def settings():
    return Settings(
        poll_interval_seconds=0,
        max_poll_attempts=3,
        launch_jitter_seconds=0,
        request_timeout=5,
    )


@pytest.fixture()
def storage(tmp_path):
    return ArchiveStorage(tmp_path / "archives")


@pytest.fixture()
def recording_sleep():
    return RecordingSleep()


@pytest.fixture()
def make_client():
    """Factory for FakeMigrationClient instances."""
    return FakeMigrationClient


@pytest.fixture()
def blob_store():
    return FakeBlobStore()


@pytest.fixture()
def failing_blob_store():
    return FakeBlobStore(fail=True)


@pytest.fixture()
def make_api_error():
    return api_error
