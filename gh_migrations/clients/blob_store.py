"""Azure Blob Storage destination for migration archives."""

from pathlib import Path
from typing import Dict

from azure.core.exceptions import AzureError, ResourceExistsError
from azure.storage.blob.aio import BlobServiceClient

from ..core.config import BlobStoreConfig
from ..core.exceptions import ArchiveUploadError, StorageSetupError
from ..core.logging import get_logger

logger = get_logger(__name__)


class BlobArchiveStore:
    """Uploads archives into a single blob container."""

    def __init__(self, service_client: BlobServiceClient, container: str):
        self.service_client = service_client
        self.container = container
        self.container_client = service_client.get_container_client(container)

    @classmethod
    def from_config(cls, config: BlobStoreConfig) -> "BlobArchiveStore":
        try:
            service_client = BlobServiceClient.from_connection_string(config.connection_string)
        except ValueError as e:
            raise StorageSetupError(f"Invalid storage connection string: {e}") from e
        return cls(service_client, config.container)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self.service_client.close()

    async def verify(self) -> None:
        """Make sure the container is reachable, creating it when missing."""
        try:
            if await self.container_client.exists():
                logger.info("Blob container reachable", container=self.container)
                return
            await self.container_client.create_container()
            logger.info("Created blob container", container=self.container)
        except ResourceExistsError:
            # Created concurrently by someone else
            logger.info("Blob container reachable", container=self.container)
        except AzureError as e:
            raise StorageSetupError(
                f"Blob container '{self.container}' is not reachable: {e}"
            ) from e

    async def upload(self, local_path: Path, key: str, tags: Dict[str, str]) -> None:
        """Upload a local file as blob ``key`` with the given index tags."""
        try:
            with open(local_path, "rb") as data:
                await self.container_client.upload_blob(
                    name=key,
                    data=data,
                    overwrite=True,
                    tags=tags,
                )
        except (AzureError, OSError) as e:
            raise ArchiveUploadError(f"Upload of {local_path} as '{key}' failed: {e}") from e

        logger.info(
            "Uploaded archive",
            container=self.container,
            key=key,
            file_path=str(local_path)
        )
