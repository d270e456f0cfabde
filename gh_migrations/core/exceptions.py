"""Exception hierarchy for the migration tool."""

from typing import Optional


class MigrationToolError(Exception):
    """Base exception for all migration tool errors."""


class ConfigurationError(MigrationToolError):
    """Raised when command-line or environment input is invalid."""


class MigrationAPIError(MigrationToolError):
    """Raised when a call to the migrations API fails or returns a malformed body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ArchiveError(MigrationToolError):
    """Raised when an archive cannot be written to local storage."""


class StorageSetupError(MigrationToolError):
    """Raised when the configured remote store cannot be reached at startup."""


class ArchiveUploadError(MigrationToolError):
    """Raised when an archive upload to the remote store fails."""
