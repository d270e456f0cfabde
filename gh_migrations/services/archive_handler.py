"""Downloads exported archives and optionally relocates them to blob storage."""

from typing import Optional

from ..clients.blob_store import BlobArchiveStore
from ..clients.github import GitHubMigrationClient
from ..core.exceptions import ArchiveUploadError
from ..core.logging import MigrationLogger
from ..core.storage import ArchiveStorage
from ..models.migration import ArchiveArtifact, QueuedMigration


class ArchiveHandler:
    """Stores the archive of an exported migration.

    The archive is always written locally first. When a blob store is configured
    the file is uploaded under its own filename and the local copy removed; a
    failed upload leaves the local copy in place.
    """

    def __init__(
        self,
        client: GitHubMigrationClient,
        storage: ArchiveStorage,
        blob_store: Optional[BlobArchiveStore] = None,
    ):
        self.client = client
        self.storage = storage
        self.blob_store = blob_store

    async def handle(self, migration: QueuedMigration) -> ArchiveArtifact:
        """Download and store the archive.

        Raises MigrationAPIError or ArchiveError when the archive cannot be
        downloaded or written. Upload problems are logged, never raised.
        """
        job_logger = MigrationLogger(migration.org, migration.repo, migration.migration_id)
        job_logger.info(
            "Downloading migration archive",
            file_path=str(self.storage.archive_path(migration.migration_id))
        )

        local_path, size = await self.storage.write_archive(
            migration.migration_id,
            self.client.iter_archive(migration.org, migration.migration_id),
        )
        artifact = ArchiveArtifact(
            migration_id=migration.migration_id,
            local_path=local_path,
            size_bytes=size,
        )
        job_logger.info("Archive downloaded", file_path=str(local_path), file_size=size)

        if self.blob_store is None:
            return artifact

        key = local_path.name
        try:
            await self.blob_store.upload(
                local_path,
                key,
                tags={"owner": migration.org, "repo": migration.repo},
            )
        except ArchiveUploadError as e:
            job_logger.error(
                "Archive upload failed, keeping local copy",
                file_path=str(local_path),
                error=str(e)
            )
            artifact.upload_error = str(e)
            return artifact

        artifact.remote_key = key
        try:
            await self.storage.remove(local_path)
        except OSError as e:
            job_logger.warning(
                "Uploaded archive but could not remove local copy",
                file_path=str(local_path),
                error=str(e)
            )

        return artifact
