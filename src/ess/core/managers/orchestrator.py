"""Orchestrator: accepts expert search submissions and launches pollers.

Responsibilities:
1. Validate the submission (query present, API credential configured).
2. Initiate the remote search.
3. Register the job under its call id (replacing an earlier job with the same id).
4. Start background polling and mark the project as "searching".
5. Acknowledge with the remote job id and the call id.

Only `submit` ever raises to a caller. Everything after the acknowledgment
fails silently and is visible only through the persisted project status.
"""

from __future__ import annotations

from typing import Optional

from ess.core.config import PollerConfig
from ess.core.exceptions import (
    ConfigurationError,
    RemoteInitiationError,
    SubmissionValidationError,
)
from ess.core.interfaces.expert_store import ExpertStorePort
from ess.core.interfaces.search_api import SearchApiPort
from ess.core.managers.job_registry import JobRegistry
from ess.core.managers.poller import Poller
from ess.core.managers.result_persister import ResultPersister
from ess.core.managers.status_projector import StatusProjector
from ess.core.models.job import HealthStatus, JobContext, SubmitResult
from ess.core.settings import logger
from ess.core.utils.call_id import generate_call_id


class Orchestrator:
    def __init__(
        self,
        search_api: SearchApiPort,
        store: ExpertStorePort,
        config: PollerConfig,
        registry: Optional[JobRegistry] = None,
    ) -> None:
        self._search_api = search_api
        self.config = config
        self.registry = registry or JobRegistry()
        self.projector = StatusProjector(store)
        self.persister = ResultPersister(store, self.projector)

    async def submit(
        self,
        query: Optional[str],
        user_name: Optional[str] = None,
        project_id: Optional[str] = None,
        call_id: Optional[str] = None,
    ) -> SubmitResult:
        call_id = call_id or generate_call_id()
        logger.info(f"[job:submit] expert search request query={query!r} call_id={call_id} project_id={project_id}")

        if not query or not query.strip():
            raise SubmissionValidationError("search_query is required", call_id=call_id)
        if not self._search_api.configured:
            raise ConfigurationError("Clado API key not configured", call_id=call_id)

        try:
            remote_job_id = await self._search_api.initiate(query, limit=self.config.result_limit)
        except RemoteInitiationError as exc:
            logger.error(f"[job:submit] initiate failed call_id={call_id} status={exc.upstream_status} error={exc.diagnostic or exc}")
            if project_id:
                await self.projector.apply(project_id, "failed")
            exc.call_id = call_id
            raise

        logger.info(f"[job:submit] search initiated remote_job_id={remote_job_id} call_id={call_id}")
        context = self.registry.create(
            call_id,
            query,
            remote_job_id,
            user_name=user_name,
            project_id=project_id,
        )
        # the first check only happens one interval after start, so the
        # "searching" write below always precedes it
        self._poller_for(context).start()
        if project_id:
            await self.projector.apply(project_id, "searching")

        return SubmitResult(remote_job_id=remote_job_id, call_id=call_id)

    def health(self) -> HealthStatus:
        return HealthStatus(active_job_count=self.registry.active_count())

    def get_job(self, call_id: str) -> Optional[JobContext]:
        return self.registry.get(call_id)

    @property
    def last_completed(self):
        return self.registry.last_completed

    async def shutdown(self) -> None:
        await self.registry.shutdown()

    def _poller_for(self, context: JobContext) -> Poller:
        return Poller(
            context,
            self._search_api,
            self.registry,
            self.projector,
            self.persister,
            self.config,
        )
