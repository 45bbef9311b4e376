"""Tests for CladoSearchAdapter against a mocked deep research API."""

import pytest
from aioresponses import aioresponses
from yarl import URL

from ess.adapters.aiohttp_client_adapter import AioHttpClientAdapter
from ess.adapters.clado_search_adapter import CladoSearchAdapter
from ess.core.exceptions import RemoteInitiationError, RemotePollTransportError

BASE = "http://clado.test"
INITIATE_URL = f"{BASE}/api/search/deep_research"


def test_configured_reflects_api_key():
    assert CladoSearchAdapter(AioHttpClientAdapter(), BASE, "key").configured is True
    assert CladoSearchAdapter(AioHttpClientAdapter(), BASE, None).configured is False
    assert CladoSearchAdapter(AioHttpClientAdapter(), BASE, "").configured is False


@pytest.mark.asyncio
async def test_initiate_posts_query_and_limit():
    with aioresponses() as m:
        m.post(INITIATE_URL, payload={"job_id": "abc-123"}, status=200)

        async with AioHttpClientAdapter() as client:
            adapter = CladoSearchAdapter(client, BASE + "/", "secret")
            job_id = await adapter.initiate("robotics experts", limit=30)

        assert job_id == "abc-123"
        call = m.requests[("POST", URL(INITIATE_URL))][0]
        assert call.kwargs["json"] == {"query": "robotics experts", "limit": 30}
        assert call.kwargs["headers"]["Authorization"] == "Bearer secret"


@pytest.mark.asyncio
async def test_initiate_error_status_carries_upstream_details():
    with aioresponses() as m:
        m.post(INITIATE_URL, payload={"detail": "invalid key"}, status=401)

        async with AioHttpClientAdapter() as client:
            adapter = CladoSearchAdapter(client, BASE, "bad")
            with pytest.raises(RemoteInitiationError) as excinfo:
                await adapter.initiate("robotics")

        assert excinfo.value.message == "Failed to initiate Clado search"
        assert excinfo.value.upstream_status == 401
        assert excinfo.value.upstream_body == {"detail": "invalid key"}


@pytest.mark.asyncio
async def test_initiate_without_job_id_fails():
    with aioresponses() as m:
        m.post(INITIATE_URL, payload={"status": "queued"}, status=200)

        async with AioHttpClientAdapter() as client:
            adapter = CladoSearchAdapter(client, BASE, "secret")
            with pytest.raises(RemoteInitiationError) as excinfo:
                await adapter.initiate("robotics")

        assert excinfo.value.message == "No search ID returned from Clado"


@pytest.mark.asyncio
async def test_initiate_timeout_is_an_initiation_error():
    with aioresponses() as m:
        m.post(INITIATE_URL, exception=TimeoutError())

        async with AioHttpClientAdapter() as client:
            adapter = CladoSearchAdapter(client, BASE, "secret")
            with pytest.raises(RemoteInitiationError) as excinfo:
                await adapter.initiate("robotics")

        assert excinfo.value.upstream_status == 504


@pytest.mark.asyncio
async def test_poll_status_returns_payload():
    url = f"{INITIATE_URL}/abc-123"
    with aioresponses() as m:
        m.get(url, payload={"status": "completed", "results": []}, status=200)

        async with AioHttpClientAdapter() as client:
            adapter = CladoSearchAdapter(client, BASE, "secret")
            payload = await adapter.poll_status("abc-123")

        assert payload == {"status": "completed", "results": []}
        call = m.requests[("GET", URL(url))][0]
        assert call.kwargs["headers"]["Authorization"] == "Bearer secret"


@pytest.mark.asyncio
async def test_poll_status_http_error_is_transport_error():
    url = f"{INITIATE_URL}/abc-123"
    with aioresponses() as m:
        m.get(url, body="unavailable", status=503)

        async with AioHttpClientAdapter() as client:
            adapter = CladoSearchAdapter(client, BASE, "secret")
            with pytest.raises(RemotePollTransportError) as excinfo:
                await adapter.poll_status("abc-123")

        assert excinfo.value.remote_job_id == "abc-123"
        assert excinfo.value.upstream_status == 503


@pytest.mark.asyncio
async def test_poll_status_non_object_body_is_transport_error():
    url = f"{INITIATE_URL}/abc-123"
    with aioresponses() as m:
        m.get(url, payload=["not", "an", "object"], status=200)

        async with AioHttpClientAdapter() as client:
            adapter = CladoSearchAdapter(client, BASE, "secret")
            with pytest.raises(RemotePollTransportError):
                await adapter.poll_status("abc-123")
