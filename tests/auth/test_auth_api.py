# -*- coding: utf-8 -*-
from datetime import timedelta

import pytest

from repositories.user_repository import UserRepository
from services.password_service import FORGOT_PASSWORD_MESSAGE
from utils.datetime_helpers import utcnow
from utils.validators import mask_email

PASSWORD = "secret123"


def _register(client, email="new.user@example.com", password="secret1", **extra):
    payload = {"email": email, "name": "New User", "password": password}
    payload.update(extra)
    return client.post("/api/auth/register", json=payload)


class TestRegister:

    def test_register_returns_user_and_token(self, client):
        resp = _register(client, email="  Mixed.Case@Example.COM ")

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["data"]["token"]
        user = body["data"]["user"]
        assert user["email"] == "mixed.case@example.com"
        assert user["role"] == "basic"
        assert "password_hash" not in user
        assert "auth_token=" in resp.headers.get("Set-Cookie", "")

    def test_duplicate_email_is_conflict(self, client):
        assert _register(client).status_code == 201

        resp = _register(client, email="NEW.USER@example.com")

        assert resp.status_code == 409
        assert resp.get_json()["error"] == "User with this email already exists"

    @pytest.mark.parametrize(
        "payload",
        [
            {"email": "x@example.com", "name": "X"},
            {"email": "x@example.com", "password": "secret1"},
            {"name": "X", "password": "secret1"},
        ],
    )
    def test_missing_fields(self, client, payload):
        resp = client.post("/api/auth/register", json=payload)

        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Email, name, and password are required"

    def test_short_password(self, client):
        resp = _register(client, password="12345")

        assert resp.status_code == 400

    def test_role_ignored_without_super_admin_token(self, client, admin):
        resp = _register(client, role="admin")
        assert resp.get_json()["data"]["user"]["role"] == "basic"

        resp = client.post(
            "/api/auth/register",
            json={"email": "other@example.com", "name": "O", "password": "secret1", "role": "admin"},
            headers=admin["headers"],
        )
        assert resp.get_json()["data"]["user"]["role"] == "basic"

    def test_super_admin_may_assign_role(self, client, super_admin):
        resp = client.post(
            "/api/auth/register",
            json={"email": "lead@example.com", "name": "Lead", "password": "secret1", "role": "admin"},
            headers=super_admin["headers"],
        )

        assert resp.status_code == 201
        assert resp.get_json()["data"]["user"]["role"] == "admin"


class TestLogin:

    def test_login_and_me(self, client, basic_user):
        resp = client.post("/api/auth/login", json={"email": basic_user["email"], "password": PASSWORD})

        assert resp.status_code == 200
        token = resp.get_json()["data"]["token"]
        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.get_json()["data"]["user"]["email"] == basic_user["email"]

    def test_cookie_is_accepted_when_header_missing(self, client, basic_user):
        client.post("/api/auth/login", json={"email": basic_user["email"], "password": PASSWORD})

        me = client.get("/api/auth/me")

        assert me.status_code == 200

    @pytest.mark.parametrize("password", ["wrong-pass", ""])
    def test_bad_credentials(self, client, basic_user, password):
        resp = client.post("/api/auth/login", json={"email": basic_user["email"], "password": password})

        assert resp.status_code in (400, 401)

    def test_unknown_email_is_401(self, client):
        resp = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "whatever"})

        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid email or password"

    def test_inactive_user_cannot_login(self, client, make_user):
        user = make_user(is_active=False)

        resp = client.post("/api/auth/login", json={"email": user["email"], "password": PASSWORD})

        assert resp.status_code == 401

    def test_logout_revokes_token(self, client, basic_user):
        headers = basic_user["headers"]
        assert client.get("/api/auth/me", headers=headers).status_code == 200

        resp = client.post("/api/auth/logout", headers=headers)

        assert resp.status_code == 200
        assert client.get("/api/auth/me", headers=headers).status_code == 401

    def test_missing_and_garbage_tokens(self, client):
        assert client.get("/api/auth/me").get_json()["error"] == "Authentication required"
        resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.token"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid or expired token"


class TestPasswordReset:

    def _token_for(self, app, email):
        with app.app_context():
            return UserRepository.find_by_email(email).reset_password_token

    def test_forgot_password_is_generic(self, client, basic_user):
        known = client.post("/api/auth/forgot-password", json={"email": basic_user["email"]})
        unknown = client.post("/api/auth/forgot-password", json={"email": "nobody@example.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.get_json()["message"] == unknown.get_json()["message"] == FORGOT_PASSWORD_MESSAGE

    @pytest.mark.parametrize("email, message", [(None, "Email is required"), ("bad", "Invalid email format")])
    def test_forgot_password_validation(self, client, email, message):
        resp = client.post("/api/auth/forgot-password", json={"email": email})

        assert resp.status_code == 400
        assert resp.get_json()["error"] == message

    def test_reset_flow_and_reuse(self, app, client, basic_user):
        client.post("/api/auth/forgot-password", json={"email": basic_user["email"]})
        token = self._token_for(app, basic_user["email"])
        assert len(token) == 64

        check = client.get(f"/api/auth/reset-password?token={token}")
        assert check.status_code == 200
        assert check.get_json()["data"]["valid"] is True
        assert check.get_json()["data"]["email"] == mask_email(basic_user["email"])

        resp = client.post("/api/auth/reset-password", json={"token": token, "password": "brand-new"})
        assert resp.status_code == 200

        login = client.post("/api/auth/login", json={"email": basic_user["email"], "password": "brand-new"})
        assert login.status_code == 200

        again = client.post("/api/auth/reset-password", json={"token": token, "password": "another1"})
        assert again.status_code == 400
        assert again.get_json()["error"] == "Invalid or expired reset token"

    def test_expired_token_is_rejected(self, app, client, basic_user):
        client.post("/api/auth/forgot-password", json={"email": basic_user["email"]})
        with app.app_context():
            user = UserRepository.find_by_email(basic_user["email"])
            token = user.reset_password_token
            user.reset_password_expires = utcnow() - timedelta(seconds=1)
            UserRepository.commit()

        assert client.get(f"/api/auth/reset-password?token={token}").status_code == 400
        resp = client.post("/api/auth/reset-password", json={"token": token, "password": "brand-new"})
        assert resp.status_code == 400

    def test_reset_requires_fields(self, client):
        resp = client.post("/api/auth/reset-password", json={"token": "abc"})

        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Reset token and new password are required"

    def test_rate_limit_keeps_response_but_skips_new_token(self, app, client, basic_user):
        app.config["FORGOT_PASSWORD_LIMIT"] = 1
        client.post("/api/auth/forgot-password", json={"email": basic_user["email"]})
        first = self._token_for(app, basic_user["email"])

        resp = client.post("/api/auth/forgot-password", json={"email": basic_user["email"]})

        assert resp.status_code == 200
        assert resp.get_json()["message"] == FORGOT_PASSWORD_MESSAGE
        assert self._token_for(app, basic_user["email"]) == first
