import pytest
from fastapi.testclient import TestClient

import app as api
from features.activity.rules import SEED_AGENTS


@pytest.fixture
def client():
    with TestClient(api.app) as c:
        yield c


def _post(client, frame):
    r = client.post("/activity/frames", json=frame)
    assert r.status_code == 200
    return r.json()


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["monitor_running"] is True
    assert body["paused"] is False


def test_ingest_text_frame(client):
    body = _post(client, "✅ Privacy Agent: 60% privacy score")
    assert body["accepted"] is True
    record = body["record"]
    assert record["level"] == "success"
    assert record["agent"] == "Privacy Agent"
    assert record["metadata"] == {"privacyScore": 60}


def test_ingest_structured_frame(client):
    body = _post(client, {
        "type": "generation_update",
        "data": {"step": "bias_detection", "progress": 45, "message": "Checking fairness"},
    })
    assert body["record"]["type"] == "bias_detection"
    assert body["record"]["agent"] == "Bias Detector"
    assert client.get("/activity/progress").json() == {"progress": 45}


def test_unusable_frame_is_recorded_as_error(client):
    body = _post(client, [1, 2, 3])
    assert body["accepted"] is True
    assert body["record"]["type"] == "error"
    assert body["record"]["level"] == "error"


def test_list_search_and_filter(client):
    _post(client, "✅ Privacy Agent: 60% privacy score")
    _post(client, "🔍 Quality Agent validating generated data...")
    _post(client, "Reticulating splines")

    all_records = client.get("/activity").json()
    assert all_records["count"] == 3
    assert all_records["total"] == 3
    assert all_records["records"][0]["message"] == "Reticulating splines"

    by_agent = client.get("/activity", params={"agent": "Quality Agent"}).json()
    assert [r["agent"] for r in by_agent["records"]] == ["Quality Agent"]

    searched = client.get("/activity", params={"search": "privacy", "agent": "all"}).json()
    assert searched["count"] == 1

    empty = client.get("/activity", params={"search": "zzz"}).json()
    assert empty["count"] == 0
    assert empty["total"] == 3

    limited = client.get("/activity", params={"limit": 2}).json()
    assert limited["count"] == 2
    assert client.get("/activity", params={"limit": -1}).status_code == 400


def test_agents(client):
    agents = client.get("/activity/agents").json()
    assert [a["name"] for a in agents] == list(SEED_AGENTS)
    assert all(a["status"] == "idle" for a in agents)

    _post(client, "✅ Privacy Agent: 60% privacy score")
    privacy = next(a for a in client.get("/activity/agents").json() if a["name"] == "Privacy Agent")
    assert privacy["tasks_completed"] == 1
    assert privacy["status"] == "complete"
    assert client.get("/activity/agents/names").json() == {"agents": ["Privacy Agent"]}


def test_pause_resume_clear(client):
    _post(client, "🔄 [30%] privacy_assessment: assessing")

    r = client.post("/activity/pause")
    assert r.json()["paused"] is True
    for _ in range(5):
        assert _post(client, "dropped while paused")["accepted"] is False

    r = client.post("/activity/resume")
    assert r.json() == {"status": "running", "paused": False, "records": 1}
    assert _post(client, "after resume")["accepted"] is True

    r = client.post("/activity/clear")
    assert r.json()["records"] == 0
    assert client.get("/activity").json()["total"] == 0
    assert client.get("/activity/progress").json() == {"progress": 0}


def test_summary(client):
    _post(client, "❌ Privacy Agent failed to score")
    summary = client.get("/activity/summary").json()
    assert summary["total_records"] == 1
    assert summary["levels"] == {"error": 1}
    assert summary["types"] == {"error": 1}


def test_connection(client):
    r = client.post("/activity/connection", json={"connected": True})
    assert r.json() == {"connected": True}
    assert client.get("/health").json()["connected"] is True


def test_monitor_closed_after_shutdown():
    with TestClient(api.app) as c:
        c.get("/health")
        mon = api.monitor
    assert mon.closed
    assert mon.ingest("late frame") is None
