"""ResultPersister: stores the experts of a successful search.

Each result item becomes one ExpertRecord ranked by its position in the
returned list. The whole list is inserted as one batch and only a successful
insert advances the project status to "success". A failed insert is logged
and dropped: the project keeps whatever status polling last wrote.

There is no dedupe guard; persisting the same payload twice stores the
experts twice.
"""

from copy import deepcopy
from typing import Any, Dict, List, Optional

from ess.core.exceptions import PersistenceError
from ess.core.interfaces.expert_store import ExpertStorePort
from ess.core.managers.status_projector import StatusProjector
from ess.core.models.expert import ExpertRecord
from ess.core.settings import logger

REASONING_SEPARATOR = "\n\n"


def _text(value: Any) -> str:
    return str(value) if value else ""


class ResultPersister:
    def __init__(self, store: ExpertStorePort, projector: StatusProjector):
        self._store = store
        self._projector = projector

    @staticmethod
    def aggregate_reasoning(criteria: Any) -> str:
        """Join the `reasoning` texts of all criteria entries in their given order."""
        if not criteria:
            return ""
        entries = criteria.values() if isinstance(criteria, dict) else criteria
        parts = [
            str(entry["reasoning"])
            for entry in entries
            if isinstance(entry, dict) and entry.get("reasoning")
        ]
        return REASONING_SEPARATOR.join(parts)

    def build_records(
        self, payload: Dict[str, Any], project_id: Optional[str], query: str
    ) -> List[ExpertRecord]:
        results = payload.get("results")
        if not isinstance(results, list):
            return []

        records = []
        for index, item in enumerate(results):
            profile = item.get("profile") if isinstance(item, dict) else None
            if not isinstance(profile, dict):
                profile = {}
            records.append(
                ExpertRecord(
                    name=_text(profile.get("name")),
                    project_id=project_id,
                    linkedin_url=_text(profile.get("linkedin_profile_url") or profile.get("linkedin_url")),
                    headline=_text(profile.get("headline")),
                    summary=_text(profile.get("summary")),
                    reasoning=self.aggregate_reasoning(profile.get("criteria")),
                    for_query=query,
                    rank=index + 1,
                    raw_json=deepcopy(item),
                )
            )
        return records

    async def persist(self, payload: Dict[str, Any], project_id: str, query: str) -> int:
        """Insert the experts of `payload` and mark the project successful.

        Returns the number of stored experts (0 when nothing was stored).
        """
        if not isinstance(payload.get("results"), list):
            logger.info(f"[experts:save] no experts found in results project_id={project_id}")
            return 0

        records = self.build_records(payload, project_id, query)
        logger.info(
            f"[experts:save] saving {len(records)} experts project_id={project_id} ranks=1-{len(records)}"
        )
        try:
            stored = await self._store.insert_experts(records)
        except PersistenceError as exc:
            logger.error(
                f"[experts:save] insert failed project_id={project_id} query={query!r} error={exc.diagnostic or exc}"
            )
            return 0

        logger.info(f"[experts:save] stored {stored} experts project_id={project_id} query={query!r}")
        await self._projector.apply(project_id, "success")
        return stored
