"""Shared fakes and fixtures for the expert search test suite."""

from typing import Any, Dict, List, Optional

import pytest

from ess.adapters.expert_store_inmemory import InMemoryExpertStore
from ess.core.config import PollerConfig
from ess.core.exceptions import RemoteInitiationError
from ess.core.interfaces.search_api import SearchApiPort
from ess.core.managers.job_registry import JobRegistry
from ess.core.managers.result_persister import ResultPersister
from ess.core.managers.status_projector import StatusProjector


class FakeSearchApi(SearchApiPort):
    """Scripted search API.

    `statuses` is consumed one entry per poll; an entry is either a payload
    dict or an exception instance to raise. Once exhausted, the last entry
    repeats.
    """

    def __init__(
        self,
        statuses: Optional[List[Any]] = None,
        configured: bool = True,
        initiate_error: Optional[RemoteInitiationError] = None,
    ):
        self.statuses = list(statuses or [{"status": "processing"}])
        self._configured = configured
        self.initiate_error = initiate_error
        self.initiated: List[Dict[str, Any]] = []
        self.polled: List[str] = []

    @property
    def configured(self) -> bool:
        return self._configured

    async def initiate(self, query: str, limit: int = 30) -> str:
        if self.initiate_error is not None:
            raise self.initiate_error
        self.initiated.append({"query": query, "limit": limit})
        return f"job-{len(self.initiated)}"

    async def poll_status(self, remote_job_id: str) -> Dict[str, Any]:
        self.polled.append(remote_job_id)
        entry = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        if isinstance(entry, Exception):
            raise entry
        return entry


def profile_item(name: str, **criteria_reasoning: str) -> Dict[str, Any]:
    return {
        "profile": {
            "name": name,
            "linkedin_url": f"https://linkedin.com/in/{name.lower()}",
            "headline": f"{name} headline",
            "summary": f"{name} summary",
            "criteria": {key: {"reasoning": text} for key, text in criteria_reasoning.items()},
        }
    }


@pytest.fixture
def fake_search_api_cls():
    return FakeSearchApi


@pytest.fixture
def make_profile():
    return profile_item


@pytest.fixture
def store():
    return InMemoryExpertStore()


@pytest.fixture
def registry():
    return JobRegistry()


@pytest.fixture
def projector(store):
    return StatusProjector(store)


@pytest.fixture
def persister(store, projector):
    return ResultPersister(store, projector)


@pytest.fixture
def fast_config():
    return PollerConfig(poll_interval=0.01, result_limit=30)


@pytest.fixture
def slow_config():
    """Interval long enough that no tick fires during a test."""
    return PollerConfig(poll_interval=60.0, result_limit=30)
