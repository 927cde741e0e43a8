import pytest
from fastapi.testclient import TestClient

from cadence.main import create_app

from conftest import session_fields


@pytest.fixture
def client(store):
    with TestClient(create_app(store=store)) as client:
        yield client


def create(client, prefix="/sessions", **overrides):
    response = client.post(prefix, json=session_fields(**overrides))
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_list_empty(client):
    response = client.get("/sessions")

    assert response.status_code == 200
    assert response.json() == {"success": True, "count": 0, "data": []}


def test_create_and_fetch(client):
    response = client.post("/sessions", json=session_fields())

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Cadence record created successfully"
    record = body["data"]
    assert record["timestamp"] == "2024-01-01T00:00:00.000Z"
    assert record["totalSteps"] == 1200
    assert "updatedAt" not in record

    fetched = client.get(f"/sessions/{record['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["data"] == record


def test_list_returns_records_in_order(client):
    first = create(client, totalSteps=10)
    second = create(client, totalSteps=20)

    body = client.get("/sessions").json()

    assert body["count"] == 2
    assert [r["id"] for r in body["data"]] == [first["id"], second["id"]]


def test_create_missing_field_returns_400(client):
    response = client.post("/sessions", json={"timestamp": "2024-01-01T00:00:00Z"})

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert set(detail["fields"]) == {"averageCadence", "totalSteps", "duration"}
    assert detail["error"].startswith("Missing required fields")
    assert client.get("/sessions").json()["count"] == 0


def test_create_invalid_json_returns_400(client):
    response = client.post(
        "/sessions", content=b"{broken", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["detail"]["fields"] == ["body"]


def test_get_unknown_returns_404(client):
    response = client.get("/sessions/does-not-exist")

    assert response.status_code == 404
    assert response.json()["detail"] == "Session record not found"


def test_update_merges_fields(client):
    record = create(client)

    response = client.put(f"/sessions/{record['id']}", json={"averageCadence": 170})

    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["averageCadence"] == 170
    assert updated["totalSteps"] == record["totalSteps"]
    assert updated["createdAt"] == record["createdAt"]
    assert "updatedAt" in updated


def test_update_invalid_value_returns_400(client):
    record = create(client)

    response = client.put(f"/sessions/{record['id']}", json={"duration": -5})

    assert response.status_code == 400
    assert response.json()["detail"]["fields"] == ["duration"]


def test_update_unknown_returns_404_and_changes_nothing(client):
    create(client)
    before = client.get("/sessions").json()

    response = client.put("/sessions/does-not-exist", json={"totalSteps": 1})

    assert response.status_code == 404
    assert client.get("/sessions").json() == before


def test_delete_then_get_returns_404(client):
    record = create(client)

    response = client.delete(f"/sessions/{record['id']}")

    assert response.status_code == 200
    assert response.json()["data"] == record
    assert client.get(f"/sessions/{record['id']}").status_code == 404
    assert client.delete(f"/sessions/{record['id']}").status_code == 404


def test_stats_summary(client):
    create(client, averageCadence=100, totalSteps=500, duration=300)
    create(client, averageCadence=120, totalSteps=600, duration=300)

    response = client.get("/sessions/stats/summary")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "data": {
            "totalRecords": 2,
            "averageCadence": 110.0,
            "totalSteps": 1100,
            "totalDuration": 600.0,
        },
    }


def test_stats_summary_empty(client):
    data = client.get("/sessions/stats/summary").json()["data"]

    assert data == {"totalRecords": 0, "averageCadence": 0, "totalSteps": 0, "totalDuration": 0}


def test_legacy_prefix_shares_collection(client):
    record = create(client, prefix="/api/cadence")

    assert client.get(f"/sessions/{record['id']}").status_code == 200
    assert client.get("/api/cadence").json()["count"] == 1


def test_storage_failure_returns_generic_500(client, data_file):
    data_file.parent.mkdir(parents=True, exist_ok=True)
    data_file.write_text("{corrupt", encoding="utf-8")

    response = client.get("/sessions")

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed retrieving cadence data"
    assert client.get("/sessions/stats/summary").status_code == 500


def test_health(client):
    body = client.get("/health").json()

    assert body["status"] == "OK"
    assert body["service"] == "Cadence Tracker API"
    assert body["timestamp"].endswith("Z")


def test_index_lists_endpoints(client):
    body = client.get("/").json()

    assert body["version"] == "1.0.0"
    assert body["endpoints"]["statsSummary"] == "/sessions/stats/summary"


def test_stats_summary_with_huge_duration(client):
    create(client, averageCadence=160, totalSteps=10, duration=1e30)

    response = client.get("/sessions/stats/summary")

    assert response.status_code == 200
    assert response.json()["data"]["totalDuration"] == 1e30


def test_create_boolean_number_returns_400(client):
    response = client.post("/sessions", json=session_fields(totalSteps=True))

    assert response.status_code == 400
    assert response.json()["detail"]["fields"] == ["totalSteps"]
    assert client.get("/sessions").json()["count"] == 0


def test_unhandled_error_is_access_logged(store, monkeypatch):
    logged = []

    def record_request(logger, **fields):
        logged.append(fields)

    async def broken_read_all():
        raise RuntimeError("boom")

    monkeypatch.setattr("cadence.main.log_request", record_request)
    monkeypatch.setattr(store, "read_all", broken_read_all)

    with TestClient(create_app(store=store), raise_server_exceptions=False) as client:
        response = client.get("/sessions")

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Something went wrong!"}
    assert [(f["method"], f["path"], f["status_code"]) for f in logged] == [
        ("GET", "/sessions", 500)
    ]
