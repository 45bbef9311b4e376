from abc import ABC, abstractmethod
from typing import Any, Dict


class SearchApiPort(ABC):
    """Port to the remote asynchronous expert search API."""

    @property
    @abstractmethod
    def configured(self) -> bool:
        """True when the API credential is available."""
        raise NotImplementedError

    @abstractmethod
    async def initiate(self, query: str, limit: int = 30) -> str:
        """Start a remote search and return its job id.

        Raises RemoteInitiationError when the request fails or no job id
        comes back.
        """
        raise NotImplementedError

    @abstractmethod
    async def poll_status(self, remote_job_id: str) -> Dict[str, Any]:
        """Return the current remote payload: {status, results?, ...}.

        Raises RemotePollTransportError on any transport-level failure.
        """
        raise NotImplementedError
