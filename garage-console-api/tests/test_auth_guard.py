"""
Tests for the request-boundary guard: token carriers, rejection cases and
best-effort activity tracking.
"""

from datetime import timedelta
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from console_api.config.settings import settings
from console_api.infrastructure.database.session import db_session
from console_api.repositories.session_repository import SessionRepository


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class TestTokenCarriers:
    def test_bearer_header(self, app, make_user, login, api):
        make_user()
        data = login()

        fresh = app.test_client()
        resp = fresh.get(f"{api}/auth/whoami", headers=_bearer(data["access_token"]))

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["success"] is True
        assert body["data"]["user"]["email"] == "admin@example.com"
        assert body["data"]["session_id"] == data["session_id"]

    def test_access_cookie(self, client, make_user, login, api):
        make_user()
        login()

        resp = client.get(f"{api}/auth/whoami")

        assert resp.status_code == 200

    def test_missing_token(self, client, api):
        resp = client.get(f"{api}/auth/whoami")

        assert resp.status_code == 401
        assert resp.get_json() == {"success": False, "message": "Missing access token", "data": None}

    def test_refresh_token_rejected_as_access(self, app, make_user, login, api):
        make_user()
        data = login()

        resp = app.test_client().get(f"{api}/auth/whoami", headers=_bearer(data["refresh_token"]))

        assert resp.status_code == 401

    def test_expired_access_token(self, app, make_user, login, api, clock):
        make_user()
        data = login()
        clock.advance(minutes=settings.jwt_access_minutes)

        resp = app.test_client().get(f"{api}/auth/whoami", headers=_bearer(data["access_token"]))

        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Token has expired"


class TestStatelessAuthorization:
    def test_access_token_outlives_logout_until_expiry(self, app, make_user, login, api, clock):
        make_user()
        data = login()
        other = app.test_client()

        assert other.post(f"{api}/auth/logout", headers=_bearer(data["access_token"])).status_code == 200

        # no session lookup on the fast path
        assert other.get(f"{api}/auth/whoami", headers=_bearer(data["access_token"])).status_code == 200

        clock.advance(minutes=settings.jwt_access_minutes)
        assert other.get(f"{api}/auth/whoami", headers=_bearer(data["access_token"])).status_code == 401


class TestActivityTracking:
    def test_authenticated_request_touches_session(self, client, make_user, login, api, clock):
        make_user()
        data = login()
        clock.advance(minutes=3)

        client.get(f"{api}/auth/whoami")

        with db_session() as session:
            stored = SessionRepository(session).get_by_id(data["session_id"])
        assert stored.last_activity_at == clock()

    def test_store_failure_does_not_reject(self, client, make_user, login, api):
        make_user()
        login()

        failure = OperationalError("UPDATE sessions", {}, Exception("database is locked"))
        with patch.object(SessionRepository, "touch", side_effect=failure):
            resp = client.get(f"{api}/auth/whoami")

        assert resp.status_code == 200

    def test_expires_at_is_not_extended(self, client, make_user, login, api, clock):
        make_user()
        data = login()

        with db_session() as session:
            before = SessionRepository(session).get_by_id(data["session_id"]).expires_at

        clock.advance(minutes=10)
        client.get(f"{api}/auth/whoami")

        with db_session() as session:
            after = SessionRepository(session).get_by_id(data["session_id"]).expires_at
        assert after == before
        assert after - timedelta(minutes=settings.session_lifetime_minutes) < clock()
