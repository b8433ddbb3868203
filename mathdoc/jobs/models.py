import mimetypes
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any


class JobStatus(str, Enum):
    """Remote processing states a job moves through."""

    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.ERROR)

    @classmethod
    def parse(cls, value: str) -> "JobStatus | None":
        """Return the matching status, or None for unrecognized values."""
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class UploadFile:
    """A document to upload: name, MIME type and raw bytes."""

    filename: str
    mime_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: Path, mime_type: str | None = None) -> "UploadFile":
        """Read a file from disk, guessing its MIME type from the extension."""
        if mime_type is None:
            guessed, _ = mimetypes.guess_type(path.name)
            mime_type = guessed or "application/octet-stream"
        return cls(filename=path.name, mime_type=mime_type, content=path.read_bytes())


@dataclass
class Job:
    """One submitted document awaiting remote conversion."""

    id: str
    status: JobStatus = JobStatus.QUEUED
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    requested_formats: tuple[str, ...] = ()
    page_range: str | None = None

    def transition_to(self, status: JobStatus) -> None:
        """Move to a new status; terminal states are final."""
        if status == self.status:
            return
        if self.status.is_terminal:
            raise ValueError(
                f"Job {self.id} is already {self.status.value}, cannot become {status.value}"
            )
        self.status = status


@dataclass(frozen=True)
class StatusRecord:
    """Snapshot returned by one status query."""

    status: str
    elapsed_ms: int
    results: dict[str, Any] | None = None
    error_message: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def job_status(self) -> JobStatus | None:
        return JobStatus.parse(self.status)
