"""Migration job models for orchestration."""

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..core.exceptions import ConfigurationError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MigrationStatus(str, Enum):
    """Migration job status enumeration."""
    PENDING = "pending"
    EXPORTED = "exported"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    UNKNOWN = "unknown"

    @property
    def is_terminal(self) -> bool:
        return self is not MigrationStatus.PENDING


# Remote states that end a job; anything else (pending, exporting, ...) is in progress.
_TERMINAL_REMOTE_STATES = {
    "exported": MigrationStatus.EXPORTED,
    "failed": MigrationStatus.FAILED,
}


def classify_state(state: str) -> MigrationStatus:
    """Map a remote migration state onto EXPORTED, FAILED or PENDING."""
    return _TERMINAL_REMOTE_STATES.get(state, MigrationStatus.PENDING)


class MigrationRequest(BaseModel):
    """A single org/repo pair to migrate."""
    model_config = ConfigDict(frozen=True)

    org: str = Field(..., min_length=1)
    repo: str = Field(..., min_length=1)

    @classmethod
    def parse(cls, entry: str) -> "MigrationRequest":
        """Build a request from an ``org/repo`` string."""
        parts = [part.strip() for part in entry.split("/")]
        if len(parts) != 2 or not all(parts):
            raise ConfigurationError(
                f"Invalid repository '{entry.strip()}', expected the form org/repo"
            )
        return cls(org=parts[0], repo=parts[1])

    def __str__(self) -> str:
        return f"{self.org}/{self.repo}"


def parse_repo_list(text: str) -> List[MigrationRequest]:
    """Parse a comma delimited list of org/repo pairs.

    Blank entries (e.g. a trailing comma) are skipped.
    """
    requests = [
        MigrationRequest.parse(entry)
        for entry in text.split(",")
        if entry.strip()
    ]
    if not requests:
        raise ConfigurationError("No repositories were provided")
    return requests


class QueuedMigration(BaseModel):
    """A migration the platform accepted and assigned an identifier to."""
    model_config = ConfigDict(frozen=True)

    org: str
    repo: str
    migration_id: int
    queued_at: datetime = Field(default_factory=_utcnow)


class LaunchFailure(BaseModel):
    """A request whose creation call failed; it is never polled."""
    org: str
    repo: str
    error: str
    status_code: Optional[int] = None


class ArchiveArtifact(BaseModel):
    """Archive downloaded for an exported migration."""
    migration_id: int
    local_path: Path
    size_bytes: int = 0
    remote_key: Optional[str] = None
    upload_error: Optional[str] = None

    @property
    def delivered_remotely(self) -> bool:
        return self.remote_key is not None


class MigrationOutcome(BaseModel):
    """Terminal record for one queued migration."""
    org: str
    repo: str
    migration_id: int
    status: MigrationStatus
    remote_state: Optional[str] = None
    attempts: int = 0
    artifact: Optional[ArchiveArtifact] = None
    error: Optional[str] = None
    completed_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _check_terminal(self) -> "MigrationOutcome":
        if not self.status.is_terminal:
            raise ValueError("An outcome must carry a terminal status")
        if self.status is MigrationStatus.EXPORTED and self.artifact is None:
            raise ValueError("An exported outcome must carry its archive artifact")
        return self


class MigrationReport(BaseModel):
    """Aggregated results of a migration run."""
    launch_failures: List[LaunchFailure] = Field(default_factory=list)
    outcomes: List[MigrationOutcome] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=_utcnow)
    completed_at: Optional[datetime] = None

    def count(self, status: MigrationStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)

    @property
    def all_exported(self) -> bool:
        return not self.launch_failures and all(
            outcome.status is MigrationStatus.EXPORTED for outcome in self.outcomes
        )

    def summary(self) -> Dict[str, Any]:
        """Counts per terminal status plus launch failures."""
        counts: Dict[str, Any] = {
            status.value: self.count(status)
            for status in MigrationStatus
            if status.is_terminal
        }
        counts["launch_failed"] = len(self.launch_failures)
        counts["launched"] = len(self.outcomes)
        if self.completed_at is not None:
            counts["duration_seconds"] = (self.completed_at - self.started_at).total_seconds()
        return counts
