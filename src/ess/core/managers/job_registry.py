"""JobRegistry: owns every active JobContext, keyed by call id.

All methods are plain synchronous dict operations. They run on the event loop
without suspension points, so each one is atomic with respect to the poll
tasks. The registry owns the lifetime of each context's poll task: a task is
cancelled when its entry is replaced or removed, and never outlives it.
"""

from __future__ import annotations

import asyncio
from copy import deepcopy
from typing import Any, Dict, Optional

from ess.core.models.job import JobContext
from ess.core.settings import logger


class JobRegistry:
    def __init__(self) -> None:
        self._jobs: Dict[str, JobContext] = {}
        self._last_completed: Optional[Dict[str, Any]] = None

    def create(
        self,
        call_id: str,
        query: str,
        remote_job_id: str,
        user_name: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> JobContext:
        """Install a fresh context for `call_id`, replacing any existing one.

        The previous task is cancelled before the new context goes in, so a
        superseded poller can never act on the replacement.
        """
        previous = self._jobs.pop(call_id, None)
        if previous is not None:
            self._cancel(previous)
            logger.info(f"[registry:restart] replaced active job call_id={call_id} old_remote_job_id={previous.remote_job_id}")

        context = JobContext(
            call_id=call_id,
            query=query,
            remote_job_id=remote_job_id,
            user_name=user_name,
            project_id=project_id,
        )
        self._jobs[call_id] = context
        return context

    def attach_task(self, context: JobContext, task: asyncio.Task) -> bool:
        """Bind `task` to `context` if the context is still the registered one.

        A task for a context that was already replaced or removed is cancelled
        right away.
        """
        if self._jobs.get(context.call_id) is not context:
            task.cancel()
            return False
        if context.task is not None and context.task is not task:
            self._cancel(context)
        context.task = task
        return True

    def get(self, call_id: str) -> Optional[JobContext]:
        return self._jobs.get(call_id)

    def remove(self, call_id: str, context: Optional[JobContext] = None) -> bool:
        """Purge the entry for `call_id` and cancel its task.

        When `context` is given the entry is only removed if it is that exact
        context. Returns True if something was removed.
        """
        current = self._jobs.get(call_id)
        if current is None or (context is not None and current is not context):
            return False
        del self._jobs[call_id]
        self._cancel(current)
        return True

    def complete(self, call_id: str, context: JobContext) -> bool:
        """Retain the context's result as last completed, then remove it."""
        if context.result is not None:
            self._last_completed = deepcopy(context.result)
        return self.remove(call_id, context)

    @property
    def last_completed(self) -> Optional[Dict[str, Any]]:
        return deepcopy(self._last_completed) if self._last_completed is not None else None

    def active_count(self) -> int:
        return sum(1 for c in self._jobs.values() if c.task is not None and not c.task.done())

    def __contains__(self, call_id: object) -> bool:
        return call_id in self._jobs

    def __len__(self) -> int:
        return len(self._jobs)

    async def shutdown(self) -> None:
        tasks = [c.task for c in self._jobs.values() if c.task is not None]
        for context in list(self._jobs.values()):
            self._cancel(context)
        self._jobs.clear()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    @staticmethod
    def _cancel(context: JobContext) -> None:
        # A poller finishing its own terminal tick must not cancel itself;
        # its loop ends because the state is terminal.
        task = context.task
        context.task = None
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if task is not current:
            task.cancel()
