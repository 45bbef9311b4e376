"""ExpertStorePort: hexagonal port for the persistent project/expert store.

Async methods anticipate network-backed adapters (PostgREST); the in-memory
implementation still uses async for interface uniformity.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from ess.core.models.expert import ExpertRecord


class ExpertStorePort(ABC):
	"""Port abstraction for project status tracking and expert rows."""

	@abstractmethod
	async def update_project_status(
		self,
		project_id: str,
		status: Optional[str] = None,
		increment_polling: bool = False,
	) -> None:
		"""Write `clado_status` and/or bump `clado_polling_count` by one.

		The increment reads the current counter and writes current + 1; it is
		not atomic across concurrent writers of the same project.
		Raises PersistenceError on failure.
		"""
		raise NotImplementedError

	@abstractmethod
	async def insert_experts(self, records: Sequence[ExpertRecord]) -> int:
		"""Insert all records in one batch and return the number stored.

		Raises PersistenceError on failure.
		"""
		raise NotImplementedError
