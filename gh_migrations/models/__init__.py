"""Data models for the migration tool."""

from .migration import (
    ArchiveArtifact,
    LaunchFailure,
    MigrationOutcome,
    MigrationReport,
    MigrationRequest,
    MigrationStatus,
    QueuedMigration,
    classify_state,
    parse_repo_list,
)

__all__ = [
    "ArchiveArtifact",
    "LaunchFailure",
    "MigrationOutcome",
    "MigrationReport",
    "MigrationRequest",
    "MigrationStatus",
    "QueuedMigration",
    "classify_state",
    "parse_repo_list",
]
