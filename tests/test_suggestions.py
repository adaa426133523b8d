"""Tests for the suggestion feed, submission and suggestion votes."""
import uuid

from app.core.settings import settings
from app.models.suggestion import Suggestion, SuggestionStatus
from app.services.agenda_ids import generate_deterministic_uuid
from app.services.moderation import AUTO_APPROVED_MESSAGE, PENDING_MESSAGE

USER_HEADERS = {"Authorization": "Bearer mock-user-token"}
USER2_HEADERS = {"Authorization": "Bearer mock-user2-token"}


def _payload(**overrides):
    body = {"agenda_id": "1", "content": "Add a recall mechanism", "author_name": "Sita"}
    body.update(overrides)
    return body


def test_get_requires_agenda_id(client):
    response = client.get("/api/suggestions")
    assert response.status_code == 400
    assert response.json()["detail"] == "agenda_id is required"


def test_get_rejects_invalid_agenda_id(client):
    response = client.get("/api/suggestions", params={"agenda_id": "not-an-id"})
    assert response.status_code == 400
    assert "Invalid ID format" in response.json()["detail"]


def test_get_returns_approved_newest_first_without_user_id(client, make_agenda, make_suggestion):
    agenda = make_agenda(sequence_id=1)
    old = make_suggestion(agenda.id, content="older", minutes_ago=30)
    new = make_suggestion(agenda.id, content="newer", minutes_ago=1)
    make_suggestion(agenda.id, content="hidden", status=SuggestionStatus.pending)
    make_suggestion(str(uuid.uuid4()), content="other agenda")

    response = client.get("/api/suggestions", params={"agenda_id": "manifesto-1"})
    assert response.status_code == 200
    assert response.headers["Cache-Control"] == "no-cache, no-store, must-revalidate"
    data = response.json()
    assert data["agenda_id"] == agenda.id
    assert [s["id"] for s in data["suggestions"]] == [new.id, old.id]
    assert all("user_id" not in s for s in data["suggestions"])
    assert set(data["suggestions"][0]) == {"id", "content", "author_name", "created_at"}


def test_create_pending_when_auto_approve_off(client, db_session, sent_emails, monkeypatch):
    monkeypatch.setattr(settings, "admin_notification_emails", ["review@example.com"])
    response = client.post("/api/suggestions", json=_payload(), headers=USER_HEADERS)
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["autoApproved"] is False
    assert data["message"] == PENDING_MESSAGE
    assert data["suggestion"]["status"] == "pending"
    assert data["suggestion"]["agenda_id"] == generate_deterministic_uuid("manifesto-1")

    row = db_session.query(Suggestion).one()
    assert row.user_id == "user-1"
    assert row.content == "Add a recall mechanism"

    # background notification ran after the response
    assert len(sent_emails) == 1
    assert sent_emails[0]["to"] == "review@example.com"
    assert "Unknown Agenda" in sent_emails[0]["subject"]


def test_create_auto_approved(client, auto_approve, make_agenda, sent_emails, monkeypatch):
    monkeypatch.setattr(settings, "admin_notification_emails", ["review@example.com"])
    agenda = make_agenda(sequence_id=2, title="Open Budget Portal")
    response = client.post("/api/suggestions", json=_payload(agenda_id="2", content="  trimmed  "),
                           headers=USER_HEADERS)
    assert response.status_code == 200
    data = response.json()
    assert data["autoApproved"] is True
    assert data["message"] == AUTO_APPROVED_MESSAGE
    assert data["suggestion"]["status"] == "approved"
    assert data["suggestion"]["agenda_id"] == agenda.id
    assert data["suggestion"]["content"] == "trimmed"
    assert "Open Budget Portal" in sent_emails[0]["subject"]

    feed = client.get("/api/suggestions", params={"agenda_id": "2"}).json()
    assert [s["content"] for s in feed["suggestions"]] == ["trimmed"]


def test_email_failure_does_not_affect_response(client, monkeypatch):
    from app.services import email as email_mod

    def _boom(*args, **kwargs):
        raise RuntimeError("sendgrid down")

    monkeypatch.setattr(settings, "admin_notification_emails", ["review@example.com"])
    monkeypatch.setattr(email_mod, "send_email", _boom)
    response = client.post("/api/suggestions", json=_payload(), headers=USER_HEADERS)
    assert response.status_code == 200


def test_create_requires_auth(client, db_session):
    response = client.post("/api/suggestions", json=_payload())
    assert response.status_code == 401
    assert db_session.query(Suggestion).count() == 0


def test_create_validation_errors_before_write(client, db_session):
    cases = [
        (_payload(agenda_id=None), "agenda_id is required"),
        (_payload(content="   "), "Suggestion content is required"),
        (_payload(author_name=""), "Author name is required"),
        (_payload(agenda_id="abc"), "Invalid ID format"),
    ]
    for body, message in cases:
        response = client.post("/api/suggestions", json=body, headers=USER_HEADERS)
        assert response.status_code == 400
        assert message in response.json()["detail"]
    assert db_session.query(Suggestion).count() == 0


def test_sixth_post_from_same_ip_is_rate_limited(client, monkeypatch):
    monkeypatch.setattr(settings, "trusted_proxy_count", 1)
    statuses = [
        client.post("/api/suggestions", json=_payload(), headers={"X-Forwarded-For": "203.0.113.9"}).status_code
        for _ in range(6)
    ]
    assert statuses[:5] == [401] * 5
    assert statuses[5] == 429

    blocked = client.post("/api/suggestions", json=_payload(), headers={"X-Forwarded-For": "203.0.113.9"})
    assert int(blocked.headers["Retry-After"]) > 0

    other_ip = client.post("/api/suggestions", json=_payload(), headers={"X-Forwarded-For": "198.51.100.1"})
    assert other_ip.status_code == 401


def test_foreign_origin_is_rejected_first(client, monkeypatch):
    monkeypatch.setattr(settings, "cors_origins", ["https://reforms.example"])
    response = client.post(
        "/api/suggestions",
        json=_payload(),
        headers={**USER_HEADERS, "Origin": "https://evil.example"},
    )
    assert response.status_code == 403

    allowed = client.post(
        "/api/suggestions",
        json=_payload(),
        headers={**USER_HEADERS, "Origin": "https://reforms.example"},
    )
    assert allowed.status_code == 200


def test_vote_on_suggestion(client, make_suggestion):
    suggestion = make_suggestion(str(uuid.uuid4()))
    url = f"/api/suggestions/{suggestion.id}/vote"

    first = client.post(url, json={"vote_type": "like"}, headers=USER_HEADERS)
    assert first.status_code == 200
    assert first.json() == {"likes": 1, "dislikes": 0, "userVote": "like"}

    other = client.post(url, json={"vote_type": "like"}, headers=USER2_HEADERS)
    assert other.json() == {"likes": 2, "dislikes": 0, "userVote": "like"}

    cleared = client.post(url, json={"vote_type": "like"}, headers=USER_HEADERS)
    assert cleared.json() == {"likes": 1, "dislikes": 0, "userVote": None}


def test_vote_on_suggestion_errors(client):
    assert client.post(f"/api/suggestions/{uuid.uuid4()}/vote", json={"vote_type": "like"}).status_code == 401
    bad = client.post("/api/suggestions/123/vote", json={"vote_type": "like"}, headers=USER_HEADERS)
    assert bad.status_code == 400
    missing = client.post(f"/api/suggestions/{uuid.uuid4()}/vote", json={"vote_type": "like"}, headers=USER_HEADERS)
    assert missing.status_code == 404


def test_rotating_forwarded_for_does_not_reset_limit(client):
    codes = [
        client.post(
            "/api/suggestions", json=_payload(), headers={**USER_HEADERS, "X-Forwarded-For": f"10.0.0.{i}"}
        ).status_code
        for i in range(8)
    ]
    assert codes[:5] == [200] * 5
    assert codes[5:] == [429] * 3


def test_wrongly_typed_body_is_a_400(client, db_session):
    response = client.post("/api/suggestions", json=_payload(content=123), headers=USER_HEADERS)
    assert response.status_code == 400
    assert "content" in response.json()["detail"]
    assert response.json()["correlation_id"]

    vote = client.post("/api/agendas/1/vote", json={"vote_type": ["like"]}, headers=USER_HEADERS)
    assert vote.status_code == 400
    assert db_session.query(Suggestion).count() == 0
