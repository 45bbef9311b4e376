from typing import Any, Optional

from ess.core.models.problem import ProblemResponse


class ExpertSearchError(Exception):
    """Base exception for expert search failures.

    Attributes:
        message: Human-readable error description
        diagnostic: Technical diagnostic information for debugging
        call_id: Optional call identifier of the affected job
    """
    def __init__(
        self,
        message: str,
        diagnostic: Optional[str] = None,
        call_id: Optional[str] = None
    ):
        self.message = message
        self.diagnostic = diagnostic
        self.call_id = call_id
        super().__init__(message)


class UpstreamError(ExpertSearchError):
    """Raised by the HTTP client adapter for any failed remote request.

    Carries a problem response describing the upstream condition
    (timeout 504, connection error 502, HTTP error status, invalid JSON 502).
    """
    def __init__(self, response: ProblemResponse):
        self.response = response
        super().__init__(message=response.title, diagnostic=response.detail)


# Synchronous submission errors (returned to the caller)

class SubmissionValidationError(ExpertSearchError):
    """Raised when a submission lacks a search query."""


class ConfigurationError(ExpertSearchError):
    """Raised when the remote search API credential is not configured."""


class RemoteInitiationError(ExpertSearchError):
    """Raised when the remote search could not be initiated.

    Attributes:
        upstream_status: HTTP status code returned by the search API (if any)
        upstream_body: Response body returned by the search API (if any)
    """
    def __init__(
        self,
        message: str,
        upstream_status: Optional[int] = None,
        upstream_body: Any = None,
        diagnostic: Optional[str] = None,
        call_id: Optional[str] = None
    ):
        self.upstream_status = upstream_status
        self.upstream_body = upstream_body
        super().__init__(message=message, diagnostic=diagnostic, call_id=call_id)


# Post-submission errors (logged and swallowed, never surfaced)

class RemotePollTransportError(ExpertSearchError):
    """Raised when a single status check against the search API fails.

    Attributes:
        remote_job_id: Search API job identifier that was polled
        upstream_status: HTTP status code (if the failure was an HTTP error)
    """
    def __init__(
        self,
        remote_job_id: str,
        upstream_status: Optional[int] = None,
        diagnostic: Optional[str] = None
    ):
        self.remote_job_id = remote_job_id
        self.upstream_status = upstream_status
        message = f"Status check failed for remote job {remote_job_id}"
        super().__init__(message=message, diagnostic=diagnostic)


class PersistenceError(ExpertSearchError):
    """Raised when the expert store rejects a read or write.

    Attributes:
        operation: Store operation that failed (e.g. 'update_project_status')
        project_id: Project the operation targeted
    """
    def __init__(
        self,
        operation: str,
        project_id: Optional[str] = None,
        diagnostic: Optional[str] = None
    ):
        self.operation = operation
        self.project_id = project_id
        message = f"Store operation '{operation}' failed for project {project_id}"
        super().__init__(message=message, diagnostic=diagnostic)
