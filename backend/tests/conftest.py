"""Pytest configuration and fixtures."""

import os
import secrets
import sys
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

# Generate a unique test secret for this test run to prevent token forgery
_TEST_JWT_SECRET = f"test-only-{secrets.token_urlsafe(32)}"

# For unit tests, set mock values ONLY if not running integration tests
if not os.environ.get("RUN_INTEGRATION"):
    os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
    os.environ.setdefault("SUPABASE_SECRET_KEY", "test-secret-key")
    os.environ.setdefault("SUPABASE_PUBLISHABLE_KEY", "test-publishable-key")
    os.environ.setdefault("JWT_SECRET_KEY", _TEST_JWT_SECRET)
    os.environ.setdefault("ABR_GUID", "test-abr-guid")
else:
    # For integration tests, load from .env
    from pathlib import Path

    from dotenv import load_dotenv

    env_path = Path(__file__).parent.parent / ".env"

    if not os.environ.get("CONFIRM_INTEGRATION_CREDENTIALS"):
        print(
            "\nIntegration tests will use REAL credentials from .env. "
            "Set CONFIRM_INTEGRATION_CREDENTIALS=yes to proceed.\n",
            file=sys.stderr,
        )
        pytest.exit(
            "Integration tests require CONFIRM_INTEGRATION_CREDENTIALS=yes",
            returncode=1,
        )
    load_dotenv(env_path, override=True)

from fastapi.testclient import TestClient  # noqa: E402

from tradehub.database import get_db  # noqa: E402
from tradehub.main import app  # noqa: E402
from tradehub.models import User  # noqa: E402
from tradehub.rate_limit import limiter  # noqa: E402

TEST_USER_ID = "usr_TEST_ONLY_000000"
ADMIN_USER_ID = "usr_TEST_ADMIN_0000"

# Fixed reference time for rule tests
NOW = datetime(2025, 1, 9, 10, 0, tzinfo=timezone.utc)


def make_user(**overrides) -> User:
    """Build a normalized user snapshot for rule tests."""
    data = {"id": TEST_USER_ID, "email": "test@example.com"}
    data.update(overrides)
    return User.model_validate(data)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def mock_db():
    """Chainable stand-in for the Supabase client."""
    return MagicMock()


@pytest.fixture
def user_rows():
    """User rows returned by the auth lookup, keyed by id."""
    return {
        TEST_USER_ID: {"id": TEST_USER_ID, "email": "test@example.com", "role": "contractor"},
        ADMIN_USER_ID: {"id": ADMIN_USER_ID, "email": "admin@example.com", "is_admin": True},
    }


@pytest.fixture(autouse=True)
def isolate_backend(monkeypatch, mock_db, user_rows):
    """Avoid real Supabase calls and rate limits in unit tests."""
    if os.environ.get("RUN_INTEGRATION"):
        yield
        return

    async def _fake_get_user(db, user_id):
        return user_rows.get(user_id)

    monkeypatch.setattr("tradehub.database.get_user", _fake_get_user)
    monkeypatch.setattr("tradehub.database._supabase_client", mock_db)
    app.dependency_overrides[get_db] = lambda: mock_db
    limiter.enabled = False
    yield
    limiter.enabled = True
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def client():
    """Create a test client."""
    return TestClient(app)


def _headers_for(user_id: str) -> dict[str, str]:
    from tradehub.auth import create_access_token
    from tradehub.config import get_settings

    token = create_access_token(get_settings(), user_id=user_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    """Auth headers for the regular test user."""
    return _headers_for(TEST_USER_ID)


@pytest.fixture
def admin_headers():
    """Auth headers for the admin test user."""
    return _headers_for(ADMIN_USER_ID)


@pytest.fixture
def verified(user_rows):
    """Mark the regular test user's ABN as verified."""
    user_rows[TEST_USER_ID].update({"abn": "51824753556", "abn_status": "VERIFIED"})
    return user_rows[TEST_USER_ID]
