import pytest

from resolvix.core.errors import ValidationError
from resolvix.services.log_service import ingest_log, list_logs


def test_ingest_defaults_timestamp_and_metadata(db):
    row = ingest_log(db, level="info", source="10.0.0.9", message="service started")
    assert row.timestamp is not None
    assert row.meta == {}


@pytest.mark.parametrize("field", ["level", "source", "message"])
def test_ingest_requires_fields(db, field):
    values = {"level": "error", "source": "api", "message": "boom"}
    values[field] = ""
    with pytest.raises(ValidationError):
        ingest_log(db, **values)


def test_ingest_rejects_unknown_level(db):
    with pytest.raises(ValidationError):
        ingest_log(db, level="fatal", source="api", message="boom")


def test_list_filters_and_order(db):
    ingest_log(db, level="info", source="api", message="GET /health 200")
    ingest_log(db, level="error", source="api", message="database connection timeout")
    ingest_log(db, level="error", source="worker", message="job crashed")

    errors = list_logs(db, level="error")
    assert [r.message for r in errors] == ["job crashed", "database connection timeout"]

    assert [r.source for r in list_logs(db, source="worker")] == ["worker"]
    assert [r.message for r in list_logs(db, search="timeout")] == ["database connection timeout"]
    assert len(list_logs(db, limit=1)) == 1


def test_http_ingest_and_browse(client, make_profile, auth_headers):
    viewer = make_profile("support")
    resp = client.post(
        "/api/v1/logs/",
        json={"level": "warning", "source": "edge-1", "message": "disk 91% full", "metadata": {"mount": "/"}},
    )
    assert resp.status_code == 201
    assert resp.json()["metadata"] == {"mount": "/"}

    listed = client.get("/api/v1/logs/?level=warning", headers=auth_headers(viewer)).json()
    assert [r["message"] for r in listed] == ["disk 91% full"]


def test_http_rejects_bad_level(client):
    resp = client.post("/api/v1/logs/", json={"level": "fatal", "source": "x", "message": "y"})
    assert resp.status_code == 422


def test_browsing_requires_session(client):
    assert client.get("/api/v1/logs/").status_code == 401
