import asyncio
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class JobState(StrEnum):
    polling = "POLLING"
    succeeded = "SUCCEEDED"
    failed = "FAILED"


class RemoteStatus(StrEnum):
    """Status codes reported by the remote deep research API."""

    searching = "searching"
    filtering = "filtering"
    processing = "processing"
    pending = "pending"
    completed = "completed"
    success = "success"
    failed = "failed"
    error = "error"
    other = "other"  # anything the API reports that we do not know


TERMINAL_SUCCESS = {RemoteStatus.completed, RemoteStatus.success}
TERMINAL_FAILURE = {RemoteStatus.failed, RemoteStatus.error}


class JobContext(BaseModel):
    """Per call id record of one tracked search job.

    Notes:
    - One context per `call_id`; it replaces what used to be several parallel
      maps (query, job id, user, project) so cleanup happens as a unit.
    - `task` is the asyncio task running the poll schedule. The registry owns
      its lifetime; it is excluded from dumps.
    - Only the Poller bound to this context mutates it after creation.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    call_id: str
    query: str
    remote_job_id: str
    user_name: Optional[str] = None
    project_id: Optional[str] = None

    state: JobState = JobState.polling
    poll_count: int = Field(default=0, ge=0)
    result: Optional[Dict[str, Any]] = None  # terminal success envelope

    task: Optional[asyncio.Task] = Field(default=None, exclude=True, repr=False)

    created: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Local creation timestamp (UTC)",
    )
    updated: Optional[datetime] = Field(default=None, description="Local last update timestamp (UTC)")

    def touch(self) -> None:
        self.updated = datetime.now(timezone.utc)

    def record_check(self) -> int:
        """Count one successful remote status check; the counter only grows."""
        self.poll_count += 1
        self.touch()
        return self.poll_count

    def transition(self, state: JobState) -> None:
        self.state = state
        self.touch()

    def is_in_terminal_state(self) -> bool:
        return self.state in {JobState.succeeded, JobState.failed}


class SubmitResult(BaseModel):
    """Acknowledgment returned by a successful submission."""

    remote_job_id: str
    call_id: str


class HealthStatus(BaseModel):
    active_job_count: int = Field(ge=0)
