"""Poller: drives one search job from submission to a terminal state.

The poll loop sleeps for the configured interval, then runs one tick, and
repeats until the job is SUCCEEDED or FAILED. Ticks of the same job never
overlap. There is no backoff and no retry cap: a failed status check is
logged and the next tick simply tries again.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict

from ess.core.config import PollerConfig
from ess.core.exceptions import RemotePollTransportError
from ess.core.interfaces.search_api import SearchApiPort
from ess.core.managers.job_registry import JobRegistry
from ess.core.managers.result_persister import ResultPersister
from ess.core.managers.status_projector import StatusProjector
from ess.core.models.job import (
    TERMINAL_FAILURE,
    TERMINAL_SUCCESS,
    JobContext,
    JobState,
    RemoteStatus,
)
from ess.core.settings import logger


class Poller:
    """State machine for a single JobContext.

    Only this poller mutates its context once started.
    """

    def __init__(
        self,
        context: JobContext,
        search_api: SearchApiPort,
        registry: JobRegistry,
        projector: StatusProjector,
        persister: ResultPersister,
        config: PollerConfig,
    ) -> None:
        self.context = context
        self._search_api = search_api
        self._registry = registry
        self._projector = projector
        self._persister = persister
        self.config = config

    def start(self) -> asyncio.Task:
        """Schedule the poll loop and hand its task to the registry."""
        ctx = self.context
        logger.info(
            f"[job:poll] starting polling remote_job_id={ctx.remote_job_id} call_id={ctx.call_id} interval={self.config.poll_interval}s"
        )
        task = asyncio.create_task(self._run(), name=f"poll:{ctx.call_id}")
        self._registry.attach_task(ctx, task)
        return task

    async def _run(self) -> None:
        while not self.context.is_in_terminal_state():
            await asyncio.sleep(self.config.poll_interval)
            await self.tick()
        logger.debug(f"[job:poll] loop finished call_id={self.context.call_id} state={self.context.state}")

    async def tick(self) -> bool:
        """Perform one status check and apply its side effects.

        Returns True once the job reached a terminal state.
        """
        ctx = self.context
        if ctx.is_in_terminal_state():
            return True

        try:
            return await self._check(ctx)
        except RemotePollTransportError as exc:
            logger.error(
                f"[job:poll] status check failed remote_job_id={ctx.remote_job_id} call_id={ctx.call_id} "
                f"upstream_status={exc.upstream_status} error={exc.diagnostic}"
            )
        except Exception as exc:
            logger.error(
                f"[job:poll] tick error remote_job_id={ctx.remote_job_id} call_id={ctx.call_id} "
                f"error={type(exc).__name__}: {exc}"
            )
        return ctx.is_in_terminal_state()

    async def _check(self, ctx: JobContext) -> bool:
        payload = await self._search_api.poll_status(ctx.remote_job_id)

        status = self._projector.classify(payload.get("status"))
        check_number = ctx.record_check()
        logger.info(
            f"[job:poll] check {check_number} remote_job_id={ctx.remote_job_id} call_id={ctx.call_id} status={payload.get('status')}"
        )

        if ctx.project_id:
            await self._projector.record_check(ctx.project_id, status)

        if status in TERMINAL_SUCCESS:
            await self._handle_success(payload)
            return True
        if status in TERMINAL_FAILURE:
            await self._handle_failure(payload, status)
            return True
        # searching, filtering, processing, pending, unknown: keep polling
        return False

    async def _handle_success(self, payload: Dict[str, Any]) -> None:
        ctx = self.context
        ctx.result = {
            "query": ctx.query,
            "user_name": ctx.user_name,
            "project_id": ctx.project_id,
            "call_id": ctx.call_id,
            **payload,
        }
        ctx.transition(JobState.succeeded)
        self._registry.complete(ctx.call_id, ctx)
        logger.info(f"[job:poll] search completed, polling stopped remote_job_id={ctx.remote_job_id} call_id={ctx.call_id}")

        if ctx.project_id and ctx.query:
            await self._persister.persist(payload, ctx.project_id, ctx.query)
        else:
            logger.warning(f"[job:poll] missing project_id or query, skipping expert save call_id={ctx.call_id}")

    async def _handle_failure(self, payload: Dict[str, Any], status: RemoteStatus) -> None:
        ctx = self.context
        logger.error(
            f"[job:poll] search failed remote_job_id={ctx.remote_job_id} call_id={ctx.call_id} status={status} payload={payload}"
        )
        ctx.transition(JobState.failed)
        if ctx.project_id:
            await self._projector.apply(ctx.project_id, "failed")
        self._registry.remove(ctx.call_id, ctx)
