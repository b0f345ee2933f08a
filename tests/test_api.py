from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from audo_enhance.api import app
from audo_enhance.interfaces.api_handlers import get_job_service


@pytest.fixture
def service(make_service):
    service = make_service()
    app.dependency_overrides[get_job_service] = lambda: service
    yield service
    app.dependency_overrides.clear()


@pytest.fixture
def client(service) -> TestClient:
    return TestClient(app)


def test_health(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_enhance_queues_job_and_reports_status(client) -> None:
    response = client.post(
        "/enhance",
        json={"inputFileUrl": "https://cdn.test/song.mp3", "enhancementType": "Master", "focus": "presence"},
    )

    assert response.status_code == 200
    job_id = response.json()["jobId"]
    job = client.get(f"/jobs/{job_id}").json()
    assert job["jobId"] == job_id
    assert job["status"] == "queued"
    assert job["request"]["enhancementType"] == "master"
    assert job["enhancedFileUrl"] is None


def test_enhance_rejects_invalid_request_without_creating_job(client, service) -> None:
    response = client.post(
        "/enhance",
        json={"inputFileUrl": "https://cdn.test/song.mp3", "enhancementType": "remix"},
    )

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["code"] == "invalid_parameter"
    assert detail["parameter"] == "enhancementType"
    assert detail["allowed_values"] == ["mix", "master", "4d"]
    assert len(service.store) == 0


def test_enhance_rejects_out_of_range_speed(client) -> None:
    response = client.post(
        "/enhance",
        json={"inputFileUrl": "https://cdn.test/a.wav", "enhancementType": "mix", "speedMultiplier": 3},
    )

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "out_of_range"


def test_unknown_job_and_download_return_404(client) -> None:
    assert client.get("/jobs/missing").status_code == 404
    response = client.get("/download/missing")
    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "job_not_found"


def test_download_streams_finished_output(client, deferred_executor) -> None:
    job_id = client.post(
        "/enhance", json={"inputFileUrl": "https://cdn.test/a.wav", "enhancementType": "4d"}
    ).json()["jobId"]
    assert client.get(f"/download/{job_id}").status_code == 404

    deferred_executor.run_pending()

    job = client.get(f"/jobs/{job_id}").json()
    assert job["status"] == "done"
    assert job["enhancedFileUrl"] == f"http://enhance.test/download/{job_id}"
    response = client.get(f"/download/{job_id}")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("audio/wav")
    assert f"enhanced-{job_id}.wav" in response.headers["content-disposition"]
    assert response.content == b"rendered"


def test_feedback_is_listed_in_recent_events(client, deferred_executor) -> None:
    job_id = client.post(
        "/enhance", json={"inputFileUrl": "https://cdn.test/a.wav", "enhancementType": "master"}
    ).json()["jobId"]
    deferred_executor.run_pending()

    response = client.post(
        "/feedback",
        json={"jobId": job_id, "rating": "not_satisfied", "reason": "too_loud", "notes": "clips"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    events = client.get("/events").json()["events"]
    assert [event["eventType"] for event in events] == ["render_completed", "feedback"]
    assert events[-1]["eventId"] == body["eventId"]
    assert events[-1]["reason"] == "too_loud"
    assert client.get("/events", params={"limit": 1}).json()["events"] == events[-1:]


def test_feedback_validation_and_events_limit_bounds(client) -> None:
    response = client.post("/feedback", json={"jobId": "abc", "rating": "meh"})
    assert response.status_code == 400
    assert response.json()["detail"]["parameter"] == "rating"

    assert client.get("/events", params={"limit": 0}).status_code == 422
