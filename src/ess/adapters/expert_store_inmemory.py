"""In-memory implementation of ExpertStorePort.

Async-safe using an asyncio.Lock. Suitable for tests and local runs without a
Supabase project. Projects are created on first write.
"""
from __future__ import annotations

import asyncio
from copy import deepcopy
from typing import Any, Dict, List, Optional, Sequence

from ess.core.interfaces.expert_store import ExpertStorePort
from ess.core.models.expert import ExpertRecord


class InMemoryExpertStore(ExpertStorePort):
    def __init__(self) -> None:
        self._projects: Dict[str, Dict[str, Any]] = {}
        self._experts: List[ExpertRecord] = []
        self._lock = asyncio.Lock()

    async def update_project_status(
        self,
        project_id: str,
        status: Optional[str] = None,
        increment_polling: bool = False,
    ) -> None:
        async with self._lock:
            project = self._projects.setdefault(
                project_id, {"clado_status": None, "clado_polling_count": 0}
            )
            if status:
                project["clado_status"] = status
            if increment_polling:
                project["clado_polling_count"] = (project.get("clado_polling_count") or 0) + 1

    async def insert_experts(self, records: Sequence[ExpertRecord]) -> int:
        async with self._lock:
            self._experts.extend(r.model_copy(deep=True) for r in records)
            return len(records)

    # Convenience accessors (not part of port but useful for tests)
    async def project(self, project_id: str) -> Optional[Dict[str, Any]]:
        async with self._lock:
            p = self._projects.get(project_id)
            return deepcopy(p) if p else None

    async def experts(self, project_id: Optional[str] = None) -> List[ExpertRecord]:
        async with self._lock:
            return [
                e.model_copy(deep=True)
                for e in self._experts
                if project_id is None or e.project_id == project_id
            ]
