"""Async client for the organization migrations API."""

from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from ..core.config import Settings, get_settings
from ..core.exceptions import MigrationAPIError
from ..core.logging import get_logger

logger = get_logger(__name__)

GITHUB_MEDIA_TYPE = "application/vnd.github+json"


def normalize_endpoint(endpoint: str) -> str:
    """Return an absolute base URL, defaulting bare hosts to https."""
    endpoint = endpoint.strip().rstrip("/")
    if "://" not in endpoint:
        endpoint = f"https://{endpoint}"
    return endpoint


class GitHubMigrationClient:
    """Thin wrapper over the REST endpoints used to run org migrations."""

    def __init__(
        self,
        endpoint: str,
        token: str,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.base_url = normalize_endpoint(endpoint)
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.settings.request_timeout,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": GITHUB_MEDIA_TYPE,
            },
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def create_migration(
        self,
        org: str,
        repositories: List[str],
        lock_repositories: bool,
    ) -> int:
        """Start an org migration and return its identifier."""
        data = await self._request_json(
            "POST",
            f"/orgs/{org}/migrations",
            json={
                "repositories": repositories,
                "lock_repositories": lock_repositories,
            },
        )
        return self._require_int(data, "id")

    async def get_migration_state(self, org: str, migration_id: int) -> str:
        """Return the current state string of a migration."""
        data = await self._request_json("GET", f"/orgs/{org}/migrations/{migration_id}")
        state = data.get("state")
        if not isinstance(state, str):
            raise MigrationAPIError(
                f"Migration {migration_id} status response has no 'state' field"
            )
        return state

    async def iter_archive(
        self,
        org: str,
        migration_id: int,
        chunk_size: Optional[int] = None,
    ) -> AsyncIterator[bytes]:
        """Stream the migration archive as byte chunks."""
        url = f"/orgs/{org}/migrations/{migration_id}/archive"
        try:
            async with self.client.stream("GET", url) as response:
                response.raise_for_status()
                async for chunk in response.aiter_bytes(chunk_size or self.settings.archive_chunk_size):
                    yield chunk
        except httpx.HTTPStatusError as e:
            raise MigrationAPIError(
                f"Archive download for migration {migration_id} returned {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise MigrationAPIError(
                f"Archive download for migration {migration_id} failed: {e}"
            ) from e

    async def _request_json(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        logger.debug("API request", method=method, url=url)

        try:
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise MigrationAPIError(
                f"{method} {url} returned {e.response.status_code}: {e.response.text[:200]}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise MigrationAPIError(f"{method} {url} failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise MigrationAPIError(f"{method} {url} returned a non-JSON body") from e

        if not isinstance(data, dict):
            raise MigrationAPIError(f"{method} {url} returned an unexpected body")
        return data

    @staticmethod
    def _require_int(data: Dict[str, Any], key: str) -> int:
        value = data.get(key)
        # bool is an int subclass; reject it explicitly
        if not isinstance(value, int) or isinstance(value, bool):
            raise MigrationAPIError(f"Response is missing an integer '{key}' field")
        return value
