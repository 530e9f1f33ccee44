"""
Content Library API - Authentication Tests

Tests for auth.py. Validates:
- Password hashing and verification (bcrypt)
- Access token creation/decoding and the 7 day expiry
- The bearer dependency: missing, malformed, expired and forged tokens
- The admin gate and the email guard
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from jose import JWTError, jwt

from auth import (
    Identity,
    create_access_token,
    decode_access_token,
    hash_password,
    require_same_email,
    verify_password,
)
from errors import Forbidden
from tests.conftest import auth_header

# ===========================================================================
# Passwords
# ===========================================================================


class TestPasswords:
    def test_hash_is_not_plaintext(self):
        hashed = hash_password("hunter2")
        assert hashed != "hunter2"
        assert hashed.startswith("$2")

    def test_hash_is_salted(self):
        assert hash_password("hunter2") != hash_password("hunter2")

    def test_verify(self):
        hashed = hash_password("hunter2")
        assert verify_password("hunter2", hashed)
        assert not verify_password("hunter3", hashed)

    def test_verify_blank_or_garbage(self):
        assert not verify_password("", hash_password("x"))
        assert not verify_password("x", "")
        assert not verify_password("x", "not-a-bcrypt-hash")


# ===========================================================================
# Tokens
# ===========================================================================


class TestTokens:
    def test_round_trip(self, settings):
        token = create_access_token({"id": "abc", "email": "a@example.com"}, settings)
        claims = decode_access_token(token, settings)
        assert claims["id"] == "abc"
        assert claims["email"] == "a@example.com"

    def test_default_expiry_is_seven_days(self, settings):
        token = create_access_token({"id": "abc", "email": "a@example.com"}, settings)
        exp = decode_access_token(token, settings)["exp"]
        expected = datetime.now(timezone.utc) + timedelta(days=7)
        assert abs(exp - expected.timestamp()) < 60

    def test_wrong_secret_rejected(self, settings):
        token = jwt.encode({"id": "abc", "email": "a@example.com"}, "other", algorithm="HS256")
        with pytest.raises(JWTError):
            decode_access_token(token, settings)


# ===========================================================================
# Bearer dependency
# ===========================================================================


class TestBearer:
    def test_missing_header_is_401_before_store(self, client, store):
        store.users = MagicMock()
        resp = client.get("/api/user")
        assert resp.status_code == 401
        assert resp.json() == {"message": "Unauthorized access"}
        store.users.find_one.assert_not_called()

    @pytest.mark.parametrize("path,method", [
        ("/api/user", "get"),
        ("/api/update-profile", "put"),
        ("/users", "get"),
        ("/users/admin/a@example.com", "get"),
        ("/users/admin/0123456789abcdef01234567", "patch"),
    ])
    def test_protected_routes_require_header(self, client, path, method):
        resp = client.request(method.upper(), path, json={})
        assert resp.status_code == 401

    def test_wrong_scheme_is_401(self, client, member):
        resp = client.get("/api/user", headers={"Authorization": f"Token {member['token']}"})
        assert resp.status_code == 401

    def test_garbage_token_is_401(self, client):
        resp = client.get("/api/user", headers=auth_header("not.a.jwt"))
        assert resp.status_code == 401

    def test_expired_token_is_401(self, client, settings, member):
        token = create_access_token(
            {"id": member["id"], "email": member["email"]},
            settings,
            expires_delta=timedelta(seconds=-30),
        )
        resp = client.get("/api/user", headers=auth_header(token))
        assert resp.status_code == 401

    def test_token_without_identity_claims_is_401(self, client, settings):
        token = create_access_token({"role": "admin"}, settings)
        resp = client.get("/api/user", headers=auth_header(token))
        assert resp.status_code == 401

    def test_forged_token_is_401(self, client, member):
        token = jwt.encode({"id": member["id"], "email": member["email"]}, "guess", algorithm="HS256")
        resp = client.get("/api/user", headers=auth_header(token))
        assert resp.status_code == 401


# ===========================================================================
# Gates
# ===========================================================================


class TestGates:
    def test_same_email_passes(self):
        require_same_email("a@example.com", Identity(id="1", email="a@example.com"))

    def test_other_email_forbidden(self):
        with pytest.raises(Forbidden):
            require_same_email("b@example.com", Identity(id="1", email="a@example.com"))

    def test_member_on_admin_route_is_403(self, client, member):
        resp = client.get("/users", headers=auth_header(member["token"]))
        assert resp.status_code == 403
        assert resp.json() == {"message": "Forbidden access"}

    def test_admin_role_is_reread_from_store(self, client, store, admin):
        # token still valid, but the stored role changed
        store.users.update_one({"email": admin["email"]}, {"$set": {"role": "member"}})
        resp = client.get("/users", headers=auth_header(admin["token"]))
        assert resp.status_code == 403

    def test_user_without_role_is_not_admin(self, client, store, member):
        store.users.update_one({"email": member["email"]}, {"$unset": {"role": ""}})
        resp = client.get("/users", headers=auth_header(member["token"]))
        assert resp.status_code == 403

    def test_email_guard_normalizes_domain(self):
        identity = Identity(id="1", email="Bob@example.com")
        assert require_same_email("Bob@Example.COM", identity) == "Bob@example.com"

    def test_email_guard_rejects_malformed_email(self):
        with pytest.raises(Forbidden):
            require_same_email("not-an-email", Identity(id="1", email="a@example.com"))
