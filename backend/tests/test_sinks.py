import asyncio
import json
from datetime import timedelta

import httpx
import pytest

from cadence.core.errors import NetworkSaveError, PersistenceError
from cadence.main import create_app
from cadence.models.schemas import FinishedSession
from cadence.services.store import SessionRecordStore
from cadence.services.tracking import HttpSessionSink, SessionTracker, StoreSessionSink

from conftest import T0


def finished_session():
    return FinishedSession(
        timestamp="2024-01-01T08:10:00.000Z",
        averageCadence=162.4,
        totalSteps=1624,
        duration=600.0,
    )


class BrokenRepository:
    async def add(self, record):
        raise PersistenceError("disk full")


def test_store_sink_creates_record(store):
    async def scenario():
        result = await StoreSessionSink(store).save(finished_session())
        records, count = await store.read_all()
        return result, records, count

    result, records, count = asyncio.run(scenario())

    assert result.ok
    assert count == 1
    assert result.record["id"] == records[0].id
    assert records[0].totalSteps == 1624


def test_store_sink_reports_storage_failure():
    sink = StoreSessionSink(SessionRecordStore(BrokenRepository()))

    result = asyncio.run(sink.save(finished_session()))

    assert result.ok is False
    assert isinstance(result.error, NetworkSaveError)


def test_http_sink_posts_payload():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"success": True, "data": {"id": "abc", **seen["body"]}})

    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            sink = HttpSessionSink("http://cadence.local/", client=client)
            return await sink.save(finished_session())

    result = asyncio.run(scenario())

    assert result.ok
    assert result.record["id"] == "abc"
    assert seen["method"] == "POST"
    assert seen["path"] == "/api/cadence"
    assert seen["body"] == finished_session().to_payload()


@pytest.mark.parametrize("status_code", [400, 500, 503])
def test_http_sink_reports_error_status(status_code):
    def handler(request):
        return httpx.Response(status_code, json={"success": False})

    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await HttpSessionSink("http://cadence.local", client=client).save(finished_session())

    result = asyncio.run(scenario())

    assert result.ok is False
    assert isinstance(result.error, NetworkSaveError)


def test_http_sink_reports_connection_error():
    def handler(request):
        raise httpx.ConnectError("Connection refused", request=request)

    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await HttpSessionSink("http://cadence.local", client=client).save(finished_session())

    result = asyncio.run(scenario())

    assert result.ok is False
    assert "Connection refused" in str(result.error)


def test_http_sink_accepts_non_json_success():
    def handler(request):
        return httpx.Response(201, text="created")

    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await HttpSessionSink("http://cadence.local", client=client).save(finished_session())

    result = asyncio.run(scenario())

    assert result.ok
    assert result.record is None


def test_tracker_uploads_session_to_backend(store):
    app = create_app(store=store)

    async def scenario():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport) as client:
            tracker = SessionTracker(sink=HttpSessionSink("http://test", client=client))
            tracker.start_tracking(T0)
            tracker.on_step_count_update(80, T0 + timedelta(seconds=30))
            result = await tracker.stop_tracking(T0 + timedelta(seconds=30))
        records, _ = await store.read_all()
        return result, records

    result, records = asyncio.run(scenario())

    assert result.ok
    assert len(records) == 1
    assert records[0].id == result.record["id"]
    assert records[0].averageCadence == pytest.approx(160.0)
    assert records[0].duration == pytest.approx(30.0)
