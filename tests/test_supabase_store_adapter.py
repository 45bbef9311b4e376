"""Tests for SupabaseExpertStore against a mocked PostgREST endpoint."""

import re

import pytest
from aioresponses import aioresponses

from ess.adapters.aiohttp_client_adapter import AioHttpClientAdapter
from ess.adapters.supabase_store_adapter import SupabaseExpertStore
from ess.core.exceptions import PersistenceError
from ess.core.models.expert import ExpertRecord

REST = "http://supabase.test/rest/v1"
PROJECTS = re.compile(r"^http://supabase\.test/rest/v1/projects(\?.*)?$")
EXPERTS = f"{REST}/experts"


def requests_for(m, method):
    return [call for key, calls in m.requests.items() if key[0] == method for call in calls]


def record(name, rank):
    return ExpertRecord(
        name=name,
        project_id="p1",
        linkedin_url=f"https://linkedin.com/in/{name.lower()}",
        headline="",
        summary="",
        reasoning="",
        for_query="robotics",
        rank=rank,
        raw_json={"profile": {"name": name}},
    )


@pytest.mark.asyncio
async def test_status_only_update_patches_project():
    with aioresponses() as m:
        m.patch(PROJECTS, status=204, body="")

        async with AioHttpClientAdapter() as client:
            store = SupabaseExpertStore(client, REST, "service-key")
            await store.update_project_status("p1", status="searching")

        patches = requests_for(m, "PATCH")
        assert len(patches) == 1
        assert patches[0].kwargs["json"] == {"clado_status": "searching"}
        assert patches[0].kwargs["params"] == {"id": "eq.p1"}
        headers = patches[0].kwargs["headers"]
        assert headers["apikey"] == "service-key"
        assert headers["Authorization"] == "Bearer service-key"
        assert headers["Prefer"] == "return=minimal"
        assert requests_for(m, "GET") == []


@pytest.mark.asyncio
async def test_increment_reads_current_count_first():
    with aioresponses() as m:
        m.get(PROJECTS, payload=[{"clado_polling_count": 4}], status=200)
        m.patch(PROJECTS, status=204, body="")

        async with AioHttpClientAdapter() as client:
            store = SupabaseExpertStore(client, REST, "service-key")
            await store.update_project_status("p1", increment_polling=True)

        gets = requests_for(m, "GET")
        assert gets[0].kwargs["params"] == {"select": "clado_polling_count", "id": "eq.p1"}
        assert requests_for(m, "PATCH")[0].kwargs["json"] == {"clado_polling_count": 5}


@pytest.mark.asyncio
async def test_increment_on_null_count_starts_at_one():
    with aioresponses() as m:
        m.get(PROJECTS, payload=[{"clado_polling_count": None}], status=200)
        m.patch(PROJECTS, status=204, body="")

        async with AioHttpClientAdapter() as client:
            store = SupabaseExpertStore(client, REST, "service-key")
            await store.update_project_status("p1", increment_polling=True)

        assert requests_for(m, "PATCH")[0].kwargs["json"] == {"clado_polling_count": 1}


@pytest.mark.asyncio
async def test_patch_error_raises_persistence_error():
    with aioresponses() as m:
        m.patch(PROJECTS, payload={"message": "permission denied"}, status=401)

        async with AioHttpClientAdapter() as client:
            store = SupabaseExpertStore(client, REST, "service-key")
            with pytest.raises(PersistenceError) as excinfo:
                await store.update_project_status("p1", status="failed")

        assert excinfo.value.operation == "update_project_status"
        assert excinfo.value.project_id == "p1"
        assert "permission denied" in excinfo.value.diagnostic


@pytest.mark.asyncio
async def test_read_error_raises_persistence_error():
    with aioresponses() as m:
        m.get(PROJECTS, body="boom", status=500)

        async with AioHttpClientAdapter() as client:
            store = SupabaseExpertStore(client, REST, "service-key")
            with pytest.raises(PersistenceError) as excinfo:
                await store.update_project_status("p1", increment_polling=True)

        assert excinfo.value.operation == "read_polling_count"
        assert requests_for(m, "PATCH") == []


@pytest.mark.asyncio
async def test_insert_experts_posts_batch():
    rows = [record("A", 1), record("B", 2)]
    with aioresponses() as m:
        m.post(EXPERTS, payload=[{"id": 1}, {"id": 2}], status=201)

        async with AioHttpClientAdapter() as client:
            store = SupabaseExpertStore(client, REST, "service-key")
            stored = await store.insert_experts(rows)

        assert stored == 2
        call = requests_for(m, "POST")[0]
        assert [r["name"] for r in call.kwargs["json"]] == ["A", "B"]
        assert call.kwargs["json"][1]["rank"] == 2
        assert call.kwargs["json"][0]["raw_json"] == {"profile": {"name": "A"}}
        assert call.kwargs["headers"]["Prefer"] == "return=representation"


@pytest.mark.asyncio
async def test_insert_empty_batch_sends_nothing():
    with aioresponses() as m:
        async with AioHttpClientAdapter() as client:
            store = SupabaseExpertStore(client, REST, "service-key")
            assert await store.insert_experts([]) == 0

        assert m.requests == {}


@pytest.mark.asyncio
async def test_insert_rejection_raises_persistence_error():
    with aioresponses() as m:
        m.post(EXPERTS, payload={"message": "duplicate key"}, status=409)

        async with AioHttpClientAdapter() as client:
            store = SupabaseExpertStore(client, REST, "service-key")
            with pytest.raises(PersistenceError) as excinfo:
                await store.insert_experts([record("A", 1)])

        assert excinfo.value.operation == "insert_experts"
