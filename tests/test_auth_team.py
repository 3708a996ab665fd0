import pytest
from sqlalchemy.exc import OperationalError

from resolvix.core.errors import BackendError
from resolvix.services import team_service

TEST_PASSWORD = "Test@1234"


class TestAuth:
    def test_register_then_login(self, client):
        resp = client.post(
            "/api/v1/auth/register",
            json={"email": "New.Person@Example.com", "password": "longenough1", "full_name": "New Person"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["email"] == "new.person@example.com"
        assert body["role"] == "support"

        login = client.post("/api/v1/auth/login", json={"email": "new.person@example.com", "password": "longenough1"})
        assert login.status_code == 200
        token = login.json()["access_token"]

        me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.json()["full_name"] == "New Person"

    def test_duplicate_registration(self, client, make_profile):
        existing = make_profile("support")
        resp = client.post("/api/v1/auth/register", json={"email": existing.email, "password": "longenough1"})
        assert resp.status_code == 409

    def test_wrong_password(self, client, make_profile):
        p = make_profile("engineer")
        resp = client.post("/api/v1/auth/login", json={"email": p.email, "password": "nope"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid email or password"

    def test_inactive_account_cannot_login_or_use_token(self, client, make_profile, auth_headers):
        p = make_profile("engineer", status="inactive")
        resp = client.post("/api/v1/auth/login", json={"email": p.email, "password": TEST_PASSWORD})
        assert resp.status_code == 401
        assert client.get("/api/v1/auth/me", headers=auth_headers(p)).status_code == 401

    def test_cookie_session_and_logout(self, client, make_profile):
        p = make_profile("support")
        client.post("/api/v1/auth/login", json={"email": p.email, "password": TEST_PASSWORD})
        assert client.get("/api/v1/auth/me").status_code == 200

        assert client.post("/api/v1/auth/logout").status_code == 204
        assert client.get("/api/v1/auth/me").status_code == 401

    def test_garbage_token(self, client):
        resp = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})
        assert resp.status_code == 401
        assert resp.headers["www-authenticate"] == "Bearer"

    def test_update_own_name(self, client, make_profile, auth_headers):
        p = make_profile("support")
        resp = client.patch("/api/v1/auth/me", json={"full_name": "Renamed"}, headers=auth_headers(p))
        assert resp.json()["full_name"] == "Renamed"


class TestTeam:
    def test_list_filters_by_role_and_accepts_viewer(self, client, team, auth_headers):
        headers = auth_headers(team["engineer"][0])
        names = [p["full_name"] for p in client.get("/api/v1/team/?role=viewer", headers=headers).json()]
        assert names == ["S1", "S2", "S3"]

        assert client.get("/api/v1/team/?role=manager", headers=headers).status_code == 400

    def test_invite_requires_admin(self, client, team, auth_headers):
        payload = {"email": "eng2@example.com", "password": "longenough1", "role": "engineer"}
        denied = client.post("/api/v1/team/", json=payload, headers=auth_headers(team["support"][0]))
        assert denied.status_code == 403

        created = client.post("/api/v1/team/", json=payload, headers=auth_headers(team["admin"][0]))
        assert created.status_code == 201
        assert created.json()["role"] == "engineer"

    def test_invite_normalizes_viewer(self, client, team, auth_headers):
        payload = {"email": "view@example.com", "password": "longenough1", "role": "viewer"}
        resp = client.post("/api/v1/team/", json=payload, headers=auth_headers(team["admin"][0]))
        assert resp.json()["role"] == "support"

    def test_change_role_moves_member_between_pools(self, client, team, auth_headers):
        admin = team["admin"][0]
        s3 = team["support"][2]
        resp = client.patch(f"/api/v1/team/{s3.id}", json={"role": "engineer"}, headers=auth_headers(admin))
        assert resp.json()["role"] == "engineer"

        engineers = client.get("/api/v1/team/?role=engineer", headers=auth_headers(admin)).json()
        assert [p["full_name"] for p in engineers] == ["E1", "S3"]

    def test_admin_cannot_demote_self(self, client, team, auth_headers):
        admin = team["admin"][0]
        resp = client.patch(f"/api/v1/team/{admin.id}", json={"role": "support"}, headers=auth_headers(admin))
        assert resp.status_code == 400

    def test_deactivate_and_unknown_member(self, client, team, auth_headers):
        headers = auth_headers(team["admin"][0])
        resp = client.patch(f"/api/v1/team/{team['support'][0].id}", json={"status": "inactive"}, headers=headers)
        assert resp.json()["status"] == "inactive"

        assert client.patch("/api/v1/team/9999", json={"status": "active"}, headers=headers).status_code == 404
        assert client.patch("/api/v1/team/9999", json={"status": "gone"}, headers=headers).status_code == 422


class TestNotificationSettings:
    def test_defaults_created_on_first_read(self, client, make_profile, auth_headers):
        p = make_profile("support")
        body = client.get("/api/v1/notifications/settings", headers=auth_headers(p)).json()
        assert body["email"] is True
        assert body["push"] is True
        assert body["sms"] is False
        assert body["slack"] is True
        assert body["email_address"] == p.email

    def test_partial_update(self, client, make_profile, auth_headers):
        p = make_profile("support")
        headers = auth_headers(p)
        resp = client.put(
            "/api/v1/notifications/settings",
            json={"sms": True, "push": None, "slack_webhook": "https://hooks.example.com/x"},
            headers=headers,
        )
        body = resp.json()
        assert body["sms"] is True
        assert body["push"] is True
        assert body["slack_webhook"] == "https://hooks.example.com/x"

        again = client.get("/api/v1/notifications/settings", headers=headers).json()
        assert again["sms"] is True


class TestLegacyViewerRole:
    def test_viewer_rows_listed_as_support(self, client, make_profile, auth_headers):
        admin = make_profile("admin")
        legacy = make_profile("viewer")
        support = make_profile("support")

        listed = client.get("/api/v1/team/?role=support", headers=auth_headers(admin)).json()
        assert [p["id"] for p in listed] == [legacy.id, support.id]
        assert {p["role"] for p in listed} == {"support"}

    def test_startup_rewrite_to_canonical_role(self, db, make_profile):
        legacy = make_profile("viewer")
        make_profile("engineer")

        assert team_service.normalize_stored_roles(db) == 1
        db.refresh(legacy)
        assert legacy.role == "support"
        assert team_service.normalize_stored_roles(db) == 0


class TestTeamWriteFailures:
    def test_racing_duplicate_email_is_conflict(self, client, make_profile, monkeypatch):
        existing = make_profile("support")
        monkeypatch.setattr(team_service, "find_by_email", lambda db, email: None)

        resp = client.post("/api/v1/auth/register", json={"email": existing.email, "password": "longenough1"})
        assert resp.status_code == 409

    def test_failed_update_rolls_back(self, db, make_profile, monkeypatch):
        member = make_profile("support")

        def failing_commit():
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        monkeypatch.setattr(db, "commit", failing_commit)
        with pytest.raises(BackendError):
            team_service.update_profile(db, member.id, role="engineer")

        db.refresh(member)
        assert member.role == "support"
