"""
Authentication and session tests.

Verifies:
- login by email returns a bearer token and the role's permissions
- wrong password / inactive user are rejected
- logout revokes the token, expired tokens are refused
- password change validates and revokes other sessions
"""

from datetime import timedelta

import pytest

from salesdesk.models import SessionToken
from salesdesk.services import auth_service, session_service
from salesdesk.services.auth_service import PasswordValidationError
from salesdesk.time_utils import utcnow

from conftest import PASSWORD, auth_headers, get_auth_token, make_user


class TestLogin:

    def test_login_returns_token(self, client, staff_user):
        resp = client.post("/api/auth/login", json={"email": "STAFF@shop.test", "password": PASSWORD})

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["token"]
        assert body["user"]["email"] == "staff@shop.test"
        assert "CREATE_SALE" in body["permissions"]
        assert "MANAGE_SALES" not in body["permissions"]

    def test_only_hash_is_stored(self, client, staff_user, db_session):
        token = get_auth_token(client, staff_user.email)
        stored = db_session.query(SessionToken).one()
        assert stored.token_hash == session_service.hash_token(token)
        assert stored.token_hash != token

    def test_wrong_password(self, client, staff_user):
        resp = client.post("/api/auth/login", json={"email": staff_user.email, "password": "nope-nope"})
        assert resp.status_code == 401

    def test_missing_fields(self, client, db_session):
        resp = client.post("/api/auth/login", json={"email": "x@y.z"})
        assert resp.status_code == 400

    def test_inactive_user_cannot_login(self, client, db_session, password_hash):
        make_user(db_session, password_hash, email="gone@shop.test", name="Gone", role="admin", is_active=False)
        assert get_auth_token(client, "gone@shop.test") is None

    def test_updates_last_login(self, client, staff_user, db_session):
        get_auth_token(client, staff_user.email)
        db_session.expire_all()
        assert staff_user.last_login_at is not None


class TestSession:

    def test_me(self, client, admin_headers):
        resp = client.get("/api/auth/me", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.get_json()["user"]["role"] == "admin"

    def test_missing_or_bad_token(self, client, db_session):
        assert client.get("/api/auth/me").status_code == 401
        assert client.get("/api/auth/me", headers=auth_headers("not-a-token")).status_code == 401
        assert client.get("/api/auth/me", headers={"Authorization": "Basic abc"}).status_code == 401

    def test_logout_revokes_token(self, client, staff_headers):
        assert client.post("/api/auth/logout", headers=staff_headers).status_code == 200
        assert client.get("/api/auth/me", headers=staff_headers).status_code == 401

    def test_expired_token(self, client, staff_user, db_session):
        token = get_auth_token(client, staff_user.email)
        stored = db_session.query(SessionToken).one()
        stored.expires_at = utcnow() - timedelta(minutes=1)
        db_session.commit()

        assert client.get("/api/auth/me", headers=auth_headers(token)).status_code == 401

    def test_deactivated_user_loses_session(self, client, staff_user, db_session):
        token = get_auth_token(client, staff_user.email)
        staff_user.is_active = False
        db_session.commit()

        assert session_service.validate_session(token) is None
        db_session.expire_all()
        assert db_session.query(SessionToken).one().is_revoked is True


class TestPasswordChange:

    def test_change_password(self, client, staff_user):
        first = get_auth_token(client, staff_user.email)
        second = get_auth_token(client, staff_user.email)

        resp = client.post(
            "/api/auth/password",
            json={"password": "brand-new", "confirm_password": "brand-new"},
            headers=auth_headers(first),
        )

        assert resp.status_code == 200
        assert resp.get_json()["revoked_sessions"] == 1
        assert client.get("/api/auth/me", headers=auth_headers(first)).status_code == 200
        assert client.get("/api/auth/me", headers=auth_headers(second)).status_code == 401
        assert get_auth_token(client, staff_user.email, "brand-new")

    @pytest.mark.parametrize("payload", [
        {"password": "short", "confirm_password": "short"},
        {"password": "long-enough", "confirm_password": "different"},
        {"password": "long-enough"},
    ])
    def test_rejects_invalid(self, client, staff_headers, payload):
        resp = client.post("/api/auth/password", json=payload, headers=staff_headers)
        assert resp.status_code == 400


class TestPasswordRules:

    def test_minimum_length(self):
        with pytest.raises(PasswordValidationError):
            auth_service.validate_password("12345")
        auth_service.validate_password("123456")

    def test_verify_password(self, password_hash):
        assert auth_service.verify_password(PASSWORD, password_hash)
        assert not auth_service.verify_password("other-password", password_hash)
        assert not auth_service.verify_password(PASSWORD, "not-a-bcrypt-hash")
