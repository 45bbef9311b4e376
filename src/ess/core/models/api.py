"""HTTP request/response DTOs for the web adapter."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ess.core.models.job import JobState


class ExpertSearchRequest(BaseModel):
    # project ids arrive as numbers from some clients
    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")

    search_query: Optional[str] = None
    user_first_name: Optional[str] = None
    project_id: Optional[str] = None


class ExpertSearchResponse(BaseModel):
    success: bool = True
    message: str = "Search initiated successfully"
    search_id: str
    call_id: str


class HealthResponse(BaseModel):
    status: str = "healthy"
    timestamp: datetime
    active_polling: int = Field(serialization_alias="activePolling")


class JobView(BaseModel):
    call_id: str
    remote_job_id: str
    query: str
    user_name: Optional[str] = None
    project_id: Optional[str] = None
    state: JobState
    poll_count: int
    created: datetime
    updated: Optional[datetime] = None
