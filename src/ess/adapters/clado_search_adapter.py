"""SearchApiPort implementation for the Clado deep research API.

POST {base}/api/search/deep_research        -> {"job_id": ...}
GET  {base}/api/search/deep_research/{id}   -> {"status": ..., "results": [...]}
"""

from typing import Any, Dict, Optional

from ess.core.exceptions import RemoteInitiationError, RemotePollTransportError, UpstreamError
from ess.core.interfaces.http_client import HttpClientPort
from ess.core.interfaces.search_api import SearchApiPort
from ess.core.settings import logger

DEEP_RESEARCH_PATH = "/api/search/deep_research"


class CladoSearchAdapter(SearchApiPort):
    def __init__(self, http_client: HttpClientPort, base_url: str, api_key: Optional[str]):
        self._http = http_client
        self._base_url = str(base_url).rstrip("/")
        self._api_key = api_key

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    async def initiate(self, query: str, limit: int = 30) -> str:
        url = self._base_url + DEEP_RESEARCH_PATH
        logger.debug(f"[clado:initiate] POST url={url} limit={limit}")
        try:
            resp = await self._http.post(url, json={"query": query, "limit": limit}, headers=self._headers())
        except UpstreamError as exc:
            raise RemoteInitiationError(
                "Failed to initiate Clado search",
                upstream_status=exc.response.status,
                diagnostic=exc.response.detail,
            ) from exc

        status = resp.get("status", 500)
        body = resp.get("body")
        if status >= 400:
            raise RemoteInitiationError(
                "Failed to initiate Clado search",
                upstream_status=status,
                upstream_body=body,
                diagnostic=str(body)[:500],
            )

        job_id = body.get("job_id") if isinstance(body, dict) else None
        if not job_id:
            raise RemoteInitiationError(
                "No search ID returned from Clado",
                upstream_body=body,
            )
        return str(job_id)

    async def poll_status(self, remote_job_id: str) -> Dict[str, Any]:
        url = f"{self._base_url}{DEEP_RESEARCH_PATH}/{remote_job_id}"
        try:
            body = await self._http.get(url, headers=self._headers())
        except UpstreamError as exc:
            raise RemotePollTransportError(
                remote_job_id,
                upstream_status=exc.response.status,
                diagnostic=exc.response.detail,
            ) from exc
        if not isinstance(body, dict):
            raise RemotePollTransportError(
                remote_job_id,
                diagnostic=f"unexpected status body type={type(body).__name__}",
            )
        return body
