from datetime import datetime, timezone

from resolvix.models.recommendation import Recommendation
from resolvix.services.intake_service import intake_ticket
from resolvix.services.log_service import ingest_log
from resolvix.services.recommendation_service import build_recommendations, generate_recommendations


def _ticket(db, **extra):
    return intake_ticket(
        db,
        timestamp=datetime(2025, 4, 1, tzinfo=timezone.utc),
        system_ip="10.2.2.2",
        log_line="ERROR webhook delivery failed",
        **extra,
    )


def test_generate_is_additive(db, team):
    ticket = _ticket(db)
    first = generate_recommendations(db, ticket.id)
    second = generate_recommendations(db, ticket.id)

    assert len(first) == len(second) == 3
    assert db.query(Recommendation).filter(Recommendation.ticket_id == ticket.id).count() == 6


def test_templates_use_log_source(db, team):
    log = ingest_log(db, level="error", source="webhooks", message="delivery failed")
    ticket = _ticket(db, log_id=log.id)
    recs = build_recommendations(ticket)
    assert recs[0]["title"] == "Check webhooks configuration"
    assert recs[0]["url"].endswith("/webhooks-config")


def test_templates_fall_back_without_context(db, team):
    ticket = _ticket(db)
    first = build_recommendations(ticket)[0]
    assert first["title"] == "Check service configuration"
    assert "the affected service" in first["description"]


def test_endpoints(client, db, team, auth_headers):
    ticket = _ticket(db, application="checkout")
    headers = auth_headers(team["engineer"][0])

    assert client.get(f"/api/v1/tickets/{ticket.id}/recommendations", headers=headers).json() == []

    created = client.post(f"/api/v1/tickets/{ticket.id}/recommendations", headers=headers)
    assert created.status_code == 201
    assert created.json()[0]["title"] == "Check checkout configuration"

    client.post(f"/api/v1/tickets/{ticket.id}/recommendations", headers=headers)
    assert len(client.get(f"/api/v1/tickets/{ticket.id}/recommendations", headers=headers).json()) == 6


def test_unknown_ticket(client, team, auth_headers):
    resp = client.post("/api/v1/tickets/77/recommendations", headers=auth_headers(team["admin"][0]))
    assert resp.status_code == 404
