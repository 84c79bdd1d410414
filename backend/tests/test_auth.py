"""Test authentication utilities and the admin guard."""

from datetime import timedelta

import pytest
from conftest import TEST_USER_ID
from fastapi import HTTPException

from tradehub.auth import AUTH_COOKIE_NAME, AuthContext, create_access_token, decode_token
from tradehub.config import get_settings


class TestAuthUtilities:
    """Test authentication utility functions."""

    def test_create_and_decode_token(self):
        """Test JWT token creation and decoding."""
        settings = get_settings()
        token = create_access_token(settings, user_id="usr_test123456", email="a@b.co")
        payload = decode_token(token, settings)

        assert payload["sub"] == "usr_test123456"
        assert payload["email"] == "a@b.co"
        assert payload["type"] == "access"
        assert "exp" in payload
        assert "iat" in payload

    def test_expired_token_rejected(self):
        settings = get_settings()
        token = create_access_token(
            settings, user_id="usr_test123456", expires_delta=timedelta(seconds=-1)
        )
        with pytest.raises(HTTPException) as exc:
            decode_token(token, settings)
        assert exc.value.status_code == 401

    def test_garbage_token_rejected(self):
        with pytest.raises(HTTPException) as exc:
            decode_token("not-a-jwt", get_settings())
        assert exc.value.status_code == 401

    def test_auth_context(self):
        ctx = AuthContext(user_id="usr_abc123")
        assert ctx.user_id == "usr_abc123"
        assert ctx.email is None


class TestAuthEndpoints:
    """Test authentication on API endpoints."""

    def test_permissions_without_auth(self, client):
        response = client.get("/me/permissions")
        assert response.status_code == 401

    def test_permissions_with_bad_token(self, client):
        response = client.get("/me/permissions", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_cookie_fallback(self, client):
        token = create_access_token(get_settings(), user_id=TEST_USER_ID)
        client.cookies.set(AUTH_COOKIE_NAME, token)
        response = client.get("/me/permissions")
        assert response.status_code == 200
        assert response.json()["user_id"] == TEST_USER_ID

    def test_missing_profile_row_gets_defaults(self, client, user_rows):
        del user_rows[TEST_USER_ID]
        token = create_access_token(get_settings(), user_id=TEST_USER_ID, email="new@x.co")
        response = client.get("/me/permissions", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        data = response.json()
        assert data["verified"] is False
        assert data["is_admin"] is False

    def test_admin_route_rejects_regular_user(self, client, auth_headers):
        response = client.get("/admin/audit-log", headers=auth_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required"

    def test_admin_role_string_is_not_enough(self, client, auth_headers, user_rows):
        user_rows[TEST_USER_ID]["role"] = "admin"
        response = client.get("/admin/audit-log", headers=auth_headers)
        assert response.status_code == 403

    def test_admin_flag_passes_guard(self, client, admin_headers, mock_db):
        query = mock_db.table.return_value.select.return_value
        query.order.return_value = query
        query.range.return_value = query
        query.execute.return_value.data = []
        query.execute.return_value.count = 0
        response = client.get("/admin/audit-log", headers=admin_headers)
        assert response.status_code == 200
