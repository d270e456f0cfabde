"""Clients for the migrations API and the remote archive store."""

from .blob_store import BlobArchiveStore
from .github import GitHubMigrationClient, normalize_endpoint

__all__ = [
    "BlobArchiveStore",
    "GitHubMigrationClient",
    "normalize_endpoint",
]
