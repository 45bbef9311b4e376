"""StatusProjector: maps remote search status onto the persisted project status.

Only four remote outcomes are ever written to `clado_status`:

- searching  -> "searching"
- filtering  -> "filtering"
- failed / error -> "failed"
- completed / success -> "success" (written by ResultPersister once experts are stored)

processing, pending and unknown statuses never cause a status write. Every
successful remote check bumps the project's `clado_polling_count`.
"""

from typing import Any, Optional

from ess.core.exceptions import PersistenceError
from ess.core.interfaces.expert_store import ExpertStorePort
from ess.core.models.job import RemoteStatus
from ess.core.settings import logger

PROJECT_STATUS_BY_REMOTE = {
    RemoteStatus.searching: "searching",
    RemoteStatus.filtering: "filtering",
    RemoteStatus.failed: "failed",
    RemoteStatus.error: "failed",
    RemoteStatus.completed: "success",
    RemoteStatus.success: "success",
}

# statuses written as soon as they are observed during polling
PROGRESS_STATUSES = {RemoteStatus.searching, RemoteStatus.filtering}


class StatusProjector:
    def __init__(self, store: ExpertStorePort):
        self._store = store

    @staticmethod
    def classify(raw_status: Any) -> RemoteStatus:
        # exact, case-sensitive match; "Completed" keeps the job polling
        if not isinstance(raw_status, str):
            return RemoteStatus.other
        try:
            return RemoteStatus(raw_status)
        except ValueError:
            return RemoteStatus.other

    @staticmethod
    def project(status: RemoteStatus) -> Optional[str]:
        return PROJECT_STATUS_BY_REMOTE.get(status)

    async def record_check(self, project_id: str, status: RemoteStatus) -> None:
        """Book one successful remote check against the project.

        Bumps the durable poll counter first, then writes the status for
        searching/filtering. The counter bump is read-then-write in the store
        and assumes a single active job per project.
        """
        await self._write(project_id, increment_polling=True)
        if status in PROGRESS_STATUSES:
            await self._write(project_id, status=self.project(status))

    async def apply(self, project_id: str, status: str) -> None:
        await self._write(project_id, status=status)

    async def _write(
        self,
        project_id: str,
        status: Optional[str] = None,
        increment_polling: bool = False,
    ) -> None:
        try:
            await self._store.update_project_status(
                project_id, status=status, increment_polling=increment_polling
            )
        except PersistenceError as exc:
            logger.error(
                f"[project:status] update failed project_id={project_id} "
                f"status={status} increment={increment_polling} error={exc.diagnostic or exc}"
            )
            return
        logger.debug(
            f"[project:status] updated project_id={project_id} status={status} increment={increment_polling}"
        )
