"""ExpertStorePort implementation on top of Supabase's PostgREST API.

Tables used:
- projects: `id`, `clado_status`, `clado_polling_count`
- experts:  one row per ExpertRecord

The service role key is sent both as `apikey` and as bearer token.
"""

from typing import Any, Dict, Sequence

from ess.core.exceptions import PersistenceError, UpstreamError
from ess.core.interfaces.expert_store import ExpertStorePort
from ess.core.interfaces.http_client import HttpClientPort
from ess.core.models.expert import ExpertRecord
from ess.core.settings import logger


class SupabaseExpertStore(ExpertStorePort):
    def __init__(
        self,
        http_client: HttpClientPort,
        rest_url: str,
        service_key: str,
        projects_table: str = "projects",
        experts_table: str = "experts",
    ):
        self._http = http_client
        self._rest_url = rest_url.rstrip("/")
        self._service_key = service_key
        self._projects = projects_table
        self._experts = experts_table

    def _headers(self, prefer: str | None = None) -> Dict[str, str]:
        headers = {
            "apikey": self._service_key,
            "Authorization": f"Bearer {self._service_key}",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _current_polling_count(self, project_id: str) -> int:
        try:
            rows = await self._http.get(
                f"{self._rest_url}/{self._projects}",
                headers=self._headers(),
                params={"select": "clado_polling_count", "id": f"eq.{project_id}"},
            )
        except UpstreamError as exc:
            raise PersistenceError("read_polling_count", project_id, diagnostic=exc.response.detail) from exc
        if isinstance(rows, list) and rows:
            return rows[0].get("clado_polling_count") or 0
        return 0

    async def update_project_status(
        self,
        project_id: str,
        status: str | None = None,
        increment_polling: bool = False,
    ) -> None:
        update: Dict[str, Any] = {}
        if status:
            update["clado_status"] = status
        if increment_polling:
            update["clado_polling_count"] = await self._current_polling_count(project_id) + 1
        if not update:
            return

        try:
            resp = await self._http.patch(
                f"{self._rest_url}/{self._projects}",
                json=update,
                headers=self._headers(prefer="return=minimal"),
                params={"id": f"eq.{project_id}"},
            )
        except UpstreamError as exc:
            raise PersistenceError("update_project_status", project_id, diagnostic=exc.response.detail) from exc
        if resp.get("status", 500) >= 400:
            raise PersistenceError("update_project_status", project_id, diagnostic=str(resp.get("body"))[:500])
        logger.info(f"[supabase:projects] project {project_id} updated {update}")

    async def insert_experts(self, records: Sequence[ExpertRecord]) -> int:
        if not records:
            return 0
        project_id = records[0].project_id
        rows = [r.model_dump(mode="json") for r in records]
        try:
            resp = await self._http.post(
                f"{self._rest_url}/{self._experts}",
                json=rows,
                headers=self._headers(prefer="return=representation"),
            )
        except UpstreamError as exc:
            raise PersistenceError("insert_experts", project_id, diagnostic=exc.response.detail) from exc
        if resp.get("status", 500) >= 400:
            raise PersistenceError("insert_experts", project_id, diagnostic=str(resp.get("body"))[:500])
        body = resp.get("body")
        return len(body) if isinstance(body, list) else len(rows)
