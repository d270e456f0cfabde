"""Local storage for downloaded migration archives."""

from pathlib import Path
from typing import AsyncIterable, Tuple, Union

import aiofiles
import aiofiles.os

from .exceptions import ArchiveError
from .logging import get_logger

logger = get_logger(__name__)


class ArchiveStorage:
    """Writes migration archives to a deterministic path under the output directory."""

    def __init__(self, output_dir: Union[str, Path]):
        self.output_dir = Path(output_dir)

    def ensure_output_dir(self) -> bool:
        """Create the output directory if needed. Returns True when it was created."""
        if self.output_dir.is_dir():
            logger.info("Output directory already exists", output_dir=str(self.output_dir))
            return False

        self.output_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Created output directory", output_dir=str(self.output_dir))
        return True

    def archive_path(self, migration_id: int) -> Path:
        return self.output_dir / f"migration_archive_{migration_id}.tar.gz"

    async def write_archive(
        self,
        migration_id: int,
        chunks: AsyncIterable[bytes],
    ) -> Tuple[Path, int]:
        """Stream archive content to disk, replacing any earlier copy.

        Returns the file path and the number of bytes written.
        """
        file_path = self.archive_path(migration_id)
        size = 0

        try:
            async with aiofiles.open(file_path, 'wb') as f:
                async for chunk in chunks:
                    await f.write(chunk)
                    size += len(chunk)
        except OSError as e:
            await self._discard_partial(file_path)
            raise ArchiveError(f"Failed to write archive {file_path}: {e}") from e
        except Exception:
            # Source stream broke mid-download
            await self._discard_partial(file_path)
            raise

        logger.info(
            "Saved migration archive",
            migration_id=migration_id,
            file_path=str(file_path),
            file_size=size
        )

        return file_path, size

    async def remove(self, file_path: Path) -> None:
        await aiofiles.os.remove(file_path)
        logger.info("Removed local archive", file_path=str(file_path))

    async def _discard_partial(self, file_path: Path) -> None:
        try:
            await aiofiles.os.remove(file_path)
        except FileNotFoundError:
            return
        except OSError as e:
            logger.warning(
                "Failed to remove partial archive",
                file_path=str(file_path),
                error=str(e)
            )
            return
        logger.warning("Removed partial archive", file_path=str(file_path))
