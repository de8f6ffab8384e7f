"""
Profile rename and the two-step email change.
"""

from datetime import timedelta

import pytest
from sqlalchemy import select

from console_api.config.settings import settings
from console_api.infrastructure.database.models.email_change_token_model import EmailChangeTokenModel
from console_api.infrastructure.database.session import db_session
from console_api.repositories.user_repository import UserRepository
from db_helpers import active_session_ids

PASSWORD = "correct-horse-battery"


@pytest.fixture
def admin(make_user):
    return make_user()


@pytest.fixture
def signed_in(client, admin, login):
    login()
    return client


def _email_tokens() -> list[EmailChangeTokenModel]:
    with db_session() as session:
        return list(session.execute(select(EmailChangeTokenModel)).scalars().all())


def _request_change(client, api, new_email="new@example.com", password=PASSWORD):
    return client.post(f"{api}/user/email/change", json={"new_email": new_email, "password": password})


class TestProfile:
    def test_rename(self, signed_in, api, admin, clock):
        resp = signed_in.put(f"{api}/user/profile", json={"name": "  Storage Admin  "})

        assert resp.status_code == 200
        user = resp.get_json()["data"]["user"]
        assert user["name"] == "Storage Admin"
        assert user["updated_at"] == "2025-03-14T09:00:00+00:00"

    @pytest.mark.parametrize("name", ["x", "y" * 101])
    def test_invalid_name(self, signed_in, api, name):
        assert signed_in.put(f"{api}/user/profile", json={"name": name}).status_code == 400

    def test_requires_auth(self, app, api):
        assert app.test_client().put(f"{api}/user/profile", json={"name": "Someone"}).status_code == 401


class TestRequestEmailChange:
    def test_sends_confirmation_to_new_address(self, signed_in, api, admin, mailer, clock):
        resp = _request_change(signed_in, api, "New@Example.com")

        assert resp.status_code == 200
        assert resp.get_json()["data"] is None

        (token,) = _email_tokens()
        assert token.old_email == "admin@example.com"
        assert token.new_email == "new@example.com"
        assert token.expires_at == clock() + timedelta(minutes=settings.email_change_minutes)

        (sent,) = mailer.to("new@example.com")
        assert token.token in sent.text

    def test_wrong_password(self, signed_in, api):
        resp = _request_change(signed_in, api, password="nope")
        assert resp.status_code == 401
        assert _email_tokens() == []

    def test_same_email(self, signed_in, api):
        assert _request_change(signed_in, api, "admin@example.com").status_code == 400

    def test_email_taken(self, signed_in, api, make_user):
        make_user("taken@example.com")
        assert _request_change(signed_in, api, "taken@example.com").status_code == 409

    def test_pending_request_blocks_another(self, signed_in, api, clock, login):
        assert _request_change(signed_in, api).status_code == 200
        assert _request_change(signed_in, api, "other@example.com").status_code == 400

        clock.advance(minutes=settings.email_change_minutes)
        login()  # the first access token is long expired
        assert _request_change(signed_in, api, "other@example.com").status_code == 200


class TestConfirmEmailChange:
    def _confirm(self, client, api, token):
        return client.post(f"{api}/user/email/confirm", query_string={"token": token})

    def test_confirm_applies_change_and_signs_out(self, signed_in, api, admin, mailer, login):
        login()
        _request_change(signed_in, api)
        token = _email_tokens()[0].token

        resp = self._confirm(signed_in, api, token)

        assert resp.status_code == 200
        assert resp.get_json()["data"] == {
            "new_email": "new@example.com",
            "deactivated_sessions": 2,
            "revoked_tokens": 2,
        }

        with db_session() as session:
            assert UserRepository(session).get_by_id(admin.id).email == "new@example.com"
            assert active_session_ids(session, admin.id) == []

        assert [m.subject for m in mailer.to("admin@example.com")] == ["Your email has been changed"]
        assert "Email change successful" in [m.subject for m in mailer.to("new@example.com")]

        login("new@example.com")

    def test_token_is_single_use(self, signed_in, api):
        _request_change(signed_in, api)
        token = _email_tokens()[0].token

        assert self._confirm(signed_in, api, token).status_code == 200
        again = self._confirm(signed_in, api, token)
        assert again.status_code == 401
        assert again.get_json()["message"] == "This token has already been used"

    def test_expired(self, signed_in, api, clock):
        _request_change(signed_in, api)
        token = _email_tokens()[0]
        clock.set(token.expires_at)

        resp = self._confirm(signed_in, api, token.token)
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Token has expired"

    def test_unknown_and_missing(self, client, api):
        assert self._confirm(client, api, "nope").status_code == 401
        assert client.post(f"{api}/user/email/confirm").status_code == 400

    def test_new_email_taken_meanwhile(self, signed_in, api, make_user):
        _request_change(signed_in, api)
        token = _email_tokens()[0].token
        make_user("new@example.com", name="Late Comer")

        assert self._confirm(signed_in, api, token).status_code == 409
        assert _email_tokens()[0].used is False
