# ess/core/interfaces/http_client.py
from abc import ABC, abstractmethod
from typing import Any, Dict

class HttpClientPort(ABC):
    @abstractmethod
    async def __aenter__(self) -> "HttpClientPort":
        """Async context manager entry method"""
        pass

    @abstractmethod
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit method"""
        pass

    @abstractmethod
    async def get(
        self,
        url: str,
        timeout: float | None = None,
        headers: Dict[str, str] | None = None,
        params: Dict[str, str] | None = None,
    ) -> Any:
        """Make a GET request and return the parsed JSON body.

        Non-2xx statuses, timeouts, connection problems and non-JSON bodies
        raise UpstreamError. The timeout is optional; adapters may use an
        internal default ClientTimeout when timeout is None.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the HTTP client session"""
        pass

    @abstractmethod
    async def post(self, url: str, json: Any, timeout: float | None = None, headers: Dict[str, str] | None = None) -> Dict[str, Any]:
        """Make a POST request. Returns a dict with keys: 'status' (int),
        'headers' (dict) and 'body' (parsed JSON or raw text).

        HTTP error statuses are returned, not raised, so the caller can
        inspect them. Transport failures raise UpstreamError.
        """
        pass

    @abstractmethod
    async def patch(
        self,
        url: str,
        json: Any,
        timeout: float | None = None,
        headers: Dict[str, str] | None = None,
        params: Dict[str, str] | None = None,
    ) -> Dict[str, Any]:
        """Make a PATCH request. Same return contract as `post`."""
        pass
