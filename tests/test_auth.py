"""
Tests for authentication: registration, login, logout, session cookies and roles.
"""

import pytest
from lawdesk.auth import hash_password, verify_password, sign_session_id, unsign_session_id
from lawdesk.config import settings
from tests.conftest import keep_cookies, login, LAWYER_EMAIL, LAWYER_PASSWORD


REGISTRATION = {
    "email": "New.Lawyer@Example.com",
    "password": "SecurePass123",
    "fullName": "New Lawyer",
    "username": "newlawyer",
    "role": "lawyer",
}


# =============================================================================
# PASSWORD HASHING
# =============================================================================

class TestPasswordHashing:
    def test_hash_password_returns_salt_and_hash(self):
        """Hashed password should contain salt$hash format."""
        result = hash_password("mypassword")
        salt, pwd_hash = result.split("$")
        assert len(salt) == 32  # 16 bytes = 32 hex chars
        assert len(pwd_hash) == 64  # SHA-256 = 64 hex chars

    def test_hash_password_produces_unique_salts(self):
        assert hash_password("samepassword") != hash_password("samepassword")

    def test_verify_password_correct(self):
        hashed = hash_password("correct_password")
        assert verify_password("correct_password", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = hash_password("correct_password")
        assert verify_password("wrong_password", hashed) is False

    def test_verify_password_malformed_hash(self):
        """Malformed hash string should not crash, just return False."""
        assert verify_password("anything", "not-a-valid-hash") is False
        assert verify_password("anything", "") is False


# =============================================================================
# SESSION COOKIE SIGNING
# =============================================================================

class TestSessionCookie:
    def test_signed_id_round_trips(self):
        token = sign_session_id("abc123")
        assert token != "abc123"
        assert unsign_session_id(token) == "abc123"

    def test_expired_token_returns_none(self):
        import time
        token = sign_session_id("abc123")
        time.sleep(2)
        assert unsign_session_id(token, max_age=1) is None

    def test_tampered_token_returns_none(self):
        token = sign_session_id("abc123")
        assert unsign_session_id(token + "tampered") is None

    def test_garbage_token_returns_none(self):
        assert unsign_session_id("not-a-valid-token-at-all") is None


# =============================================================================
# REGISTRATION
# =============================================================================

class TestRegistration:
    async def test_register_creates_user_and_logs_in(self, client):
        response = await client.post("/api/register", json=REGISTRATION)
        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "new.lawyer@example.com"
        assert data["fullName"] == "New Lawyer"
        assert data["role"] == "lawyer"
        assert data["isActive"] is True
        assert "password" not in data
        assert settings.SESSION_COOKIE_NAME in response.cookies

        keep_cookies(client, response)
        me = await client.get("/api/user")
        assert me.status_code == 200
        assert me.json()["id"] == data["id"]

    async def test_register_defaults_to_secretary(self, client):
        body = {k: v for k, v in REGISTRATION.items() if k != "role"}
        response = await client.post("/api/register", json=body)
        assert response.status_code == 201
        assert response.json()["role"] == "secretary"

    async def test_register_writes_audit_entry(self, client, db):
        from sqlalchemy import select
        from lawdesk.models import AuditLog

        response = await client.post("/api/register", json=REGISTRATION)
        user_id = response.json()["id"]

        result = await db.execute(select(AuditLog).where(AuditLog.action == "user_registered"))
        entry = result.scalar_one()
        assert entry.record_id == user_id
        assert entry.user_id == user_id
        assert "SecurePass123" not in (entry.new_values or "")

    async def test_register_rejects_duplicate_email(self, client, test_user):
        body = dict(REGISTRATION, email=LAWYER_EMAIL.upper())
        response = await client.post("/api/register", json=body)
        assert response.status_code == 400

    async def test_register_rejects_duplicate_username(self, client, test_user):
        body = dict(REGISTRATION, username="lawyer")
        response = await client.post("/api/register", json=body)
        assert response.status_code == 400

    async def test_register_rejects_invalid_email(self, client):
        response = await client.post("/api/register", json=dict(REGISTRATION, email="not-an-email"))
        assert response.status_code == 400
        assert isinstance(response.json()["detail"], list)

    async def test_register_rejects_missing_fields(self, client):
        response = await client.post("/api/register", json={"email": "a@example.com"})
        assert response.status_code == 400
        missing = {error["loc"][-1] for error in response.json()["detail"]}
        assert {"password", "fullName", "username"} <= missing

    async def test_register_rejects_unknown_role(self, client):
        response = await client.post("/api/register", json=dict(REGISTRATION, role="judge"))
        assert response.status_code == 400

    async def test_register_rejects_invalid_json(self, client):
        response = await client.post(
            "/api/register",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 400


# =============================================================================
# LOGIN / LOGOUT
# =============================================================================

class TestLogin:
    async def test_login_success(self, client, test_user):
        response = await client.post("/api/login", json={
            "email": LAWYER_EMAIL,
            "password": LAWYER_PASSWORD,
        })
        assert response.status_code == 200
        assert response.json()["id"] == test_user.id
        assert settings.SESSION_COOKIE_NAME in response.cookies

    async def test_login_email_is_case_insensitive(self, client, test_user):
        response = await client.post("/api/login", json={
            "email": LAWYER_EMAIL.upper(),
            "password": LAWYER_PASSWORD,
        })
        assert response.status_code == 200

    async def test_login_wrong_password(self, client, test_user):
        response = await client.post("/api/login", json={
            "email": LAWYER_EMAIL,
            "password": "WrongPassword",
        })
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    async def test_login_unknown_email(self, client):
        response = await client.post("/api/login", json={
            "email": "nobody@example.com",
            "password": "whatever123",
        })
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    async def test_login_disabled_account_fails_like_wrong_password(self, client, db, test_user):
        wrong = await client.post("/api/login", json={
            "email": LAWYER_EMAIL,
            "password": "WrongPassword",
        })

        test_user.is_active = False
        await db.commit()

        disabled = await client.post("/api/login", json={
            "email": LAWYER_EMAIL,
            "password": LAWYER_PASSWORD,
        })
        assert disabled.status_code == wrong.status_code == 401
        assert disabled.json() == wrong.json()

    async def test_login_writes_audit_entry(self, client, db, test_user):
        from sqlalchemy import select
        from lawdesk.models import AuditLog

        await login(client, LAWYER_EMAIL, LAWYER_PASSWORD)

        result = await db.execute(select(AuditLog).where(AuditLog.action == "user_login"))
        entry = result.scalar_one()
        assert entry.user_id == test_user.id
        assert entry.ip_address is not None


class TestLogout:
    async def test_logout_ends_session(self, auth_client):
        assert (await auth_client.get("/api/user")).status_code == 200

        response = await auth_client.post("/api/logout")
        assert response.status_code == 200
        assert response.json() == {"status": "logged_out"}

        assert (await auth_client.get("/api/user")).status_code == 401

    async def test_logout_without_session_is_ok(self, client):
        response = await client.post("/api/logout")
        assert response.status_code == 200

    async def test_logout_writes_audit_entry(self, auth_client, db, test_user):
        from sqlalchemy import select
        from lawdesk.models import AuditLog

        await auth_client.post("/api/logout")

        result = await db.execute(select(AuditLog).where(AuditLog.action == "user_logout"))
        assert result.scalar_one().user_id == test_user.id


# =============================================================================
# CURRENT USER / PROTECTED ROUTES
# =============================================================================

class TestCurrentUser:
    async def test_user_requires_session(self, client):
        response = await client.get("/api/user")
        assert response.status_code == 401

    async def test_forged_cookie_is_rejected(self, client, test_user):
        client.cookies.set(settings.SESSION_COOKIE_NAME, "forged-session-id")
        response = await client.get("/api/user")
        assert response.status_code == 401

    async def test_signed_but_unknown_session_is_rejected(self, client, test_user):
        client.cookies.set(settings.SESSION_COOKIE_NAME, sign_session_id("never-issued"))
        response = await client.get("/api/user")
        assert response.status_code == 401

    async def test_disabled_user_loses_access(self, auth_client, db, test_user):
        test_user.is_active = False
        await db.commit()

        response = await auth_client.get("/api/user")
        assert response.status_code == 401

    @pytest.mark.parametrize("path", [
        "/api/clients",
        "/api/cases",
        "/api/tasks",
        "/api/documents",
        "/api/dashboard/stats",
    ])
    async def test_protected_routes_require_auth(self, client, path):
        response = await client.get(path)
        assert response.status_code == 401
