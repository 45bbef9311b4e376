# ess/adapters/aiohttp_client_adapter.py
import asyncio
import aiohttp
from typing import Any, Dict, Optional

from ess.core.interfaces.http_client import HttpClientPort
from ess.core.exceptions import UpstreamError
from ess.core.models.problem import ProblemResponse
from ess.core.settings import logger


class AioHttpClientAdapter(HttpClientPort):
    def __init__(self, total: float = 10.0, sock_read: float = 10.0, sock_connect: float = 5.0):
        self._session: Optional[aiohttp.ClientSession] = None
        # Per-field defaults; a caller-provided timeout only overrides `total`
        self._default_total = total
        self._default_sock_read = sock_read
        self._default_sock_connect = sock_connect
        self._default_client_timeout = aiohttp.ClientTimeout(
            total=self._default_total,
            sock_read=self._default_sock_read,
            sock_connect=self._default_sock_connect,
        )

    async def __aenter__(self):
        """Async context manager entry"""
        self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()
        return False

    def _timeout(self, timeout: float | None) -> aiohttp.ClientTimeout:
        if timeout is None:
            return self._default_client_timeout
        return aiohttp.ClientTimeout(
            total=timeout,
            sock_read=self._default_sock_read,
            sock_connect=self._default_sock_connect,
        )

    def _require_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError("HTTP client not initialized. Use 'async with' context manager.")
        return self._session

    async def get(
        self,
        url: str,
        timeout: float | None = None,
        headers: Dict[str, str] | None = None,
        params: Dict[str, str] | None = None,
    ) -> Any:
        """
        Fetch JSON from URL.

        Translates HTTP/network errors into UpstreamError carrying a problem
        response: error status -> same status, non-JSON body -> 502,
        timeout -> 504, connection error -> 502.
        """
        session = self._require_session()
        try:
            async with session.get(url, timeout=self._timeout(timeout), headers=headers, params=params) as response:
                if response.status >= 400:
                    response_text = await response.text()
                    logger.error(
                        "HTTP error when requesting remote service. URL: %s, Status: %s, Content: %s",
                        url,
                        response.status,
                        response_text[:500],
                    )
                    raise UpstreamError(
                        ProblemResponse(
                            title="Upstream HTTP Error",
                            status=response.status,
                            detail=response_text[:500] or f"The remote service returned an HTTP error: {response.status}",
                        )
                    )
                try:
                    return await response.json()
                except (aiohttp.ContentTypeError, ValueError):
                    response_text = await response.text()
                    logger.error(
                        "Invalid JSON response from remote service. URL: %s, Content: %s",
                        url,
                        response_text[:500],
                    )
                    raise UpstreamError(
                        ProblemResponse(
                            title="Invalid Response Content",
                            status=502,
                            detail=(
                                "The response from the remote service was not valid JSON"
                                f": '{response_text[:100]}'"
                            ),
                        )
                    )
        except UpstreamError:
            raise
        except Exception as exc:
            raise self._map_transport_error("GET", url, exc) from exc

    async def post(self, url: str, json: Any, timeout: float | None = None, headers: Dict[str, str] | None = None) -> Dict[str, Any]:
        return await self._send("POST", url, json=json, timeout=timeout, headers=headers)

    async def patch(
        self,
        url: str,
        json: Any,
        timeout: float | None = None,
        headers: Dict[str, str] | None = None,
        params: Dict[str, str] | None = None,
    ) -> Dict[str, Any]:
        return await self._send("PATCH", url, json=json, timeout=timeout, headers=headers, params=params)

    async def _send(
        self,
        method: str,
        url: str,
        json: Any,
        timeout: float | None = None,
        headers: Dict[str, str] | None = None,
        params: Dict[str, str] | None = None,
    ) -> Dict[str, Any]:
        session = self._require_session()
        try:
            async with session.request(
                method, url, json=json, timeout=self._timeout(timeout), headers=headers, params=params
            ) as response:
                # Return error statuses so the caller can inspect them
                try:
                    body = await response.json()
                except (aiohttp.ContentTypeError, ValueError):
                    body = await response.text()
                return {
                    "status": response.status,
                    "headers": dict(response.headers),
                    "body": body,
                }
        except Exception as exc:
            raise self._map_transport_error(method, url, exc) from exc

    def _map_transport_error(self, method: str, url: str, exc: Exception) -> UpstreamError:
        if isinstance(exc, asyncio.TimeoutError):
            logger.error("Timeout on %s to remote service. URL: %s", method, url)
            return UpstreamError(
                ProblemResponse(
                    title="Upstream Timeout",
                    status=504,
                    detail="The request to the remote service timed out.",
                )
            )
        if isinstance(exc, aiohttp.ClientResponseError):
            logger.error("HTTP error on %s to remote service. URL: %s, Status: %s, Error: %s", method, url, exc.status, str(exc))
            return UpstreamError(
                ProblemResponse(
                    title="Upstream HTTP Error",
                    status=exc.status,
                    detail=f"The remote service returned an HTTP error: {exc.status}",
                )
            )
        if isinstance(exc, aiohttp.ClientError):
            logger.error("Connection error on %s to remote service. URL: %s, Error: %s", method, url, str(exc))
            return UpstreamError(
                ProblemResponse(
                    title="Upstream Connection Error",
                    status=502,
                    detail="There was a connection error with the remote service.",
                )
            )
        logger.error("Unexpected error on %s to remote service. URL: %s, Error: %s", method, url, str(exc))
        return UpstreamError(
            ProblemResponse(
                title="Internal Server Error",
                status=500,
                detail=f"An unexpected error occurred while calling the remote service: {exc}",
            )
        )

    async def close(self) -> None:
        """Close the session"""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
