"""Database utilities for Supabase integration.

These helpers only move rows in and out of Supabase. Every decision about
what a row means is made by ``tradehub.rules`` on normalized snapshots.
"""

from typing import Annotated, Any

from fastapi import Depends

from supabase import Client, create_client

from .config import Settings, get_settings
from .logging_config import get_logger

logger = get_logger("tradehub.database")

_supabase_client: Client | None = None


def get_supabase_client(settings: Settings | None = None) -> Client:
    """Get cached Supabase client."""
    global _supabase_client
    if _supabase_client is None:
        if settings is None:
            settings = get_settings()
        # Prefer new secret key, fall back to legacy service_role_key
        api_key = settings.supabase_secret_key or settings.supabase_service_role_key
        if not api_key:
            raise ValueError("Either SUPABASE_SECRET_KEY or SUPABASE_SERVICE_ROLE_KEY must be set")
        _supabase_client = create_client(settings.supabase_url, api_key)
    return _supabase_client


def get_db(settings: Annotated[Settings, Depends(get_settings)]) -> Client:
    """FastAPI dependency for Supabase client."""
    return get_supabase_client(settings)


# Type alias for dependency injection
Database = Annotated[Client, Depends(get_db)]


# =============================================================================
# Table Names
# =============================================================================

USERS_TABLE = "users"
JOBS_TABLE = "jobs"
REVIEWS_TABLE = "reviews"


# =============================================================================
# User Operations
# =============================================================================


async def get_user(db: Client, user_id: str) -> dict | None:
    """Get a raw user row by ID."""
    result = db.table(USERS_TABLE).select("*").eq("id", user_id).limit(1).execute()
    return result.data[0] if result.data else None


async def update_user(db: Client, user_id: str, updates: dict[str, Any]) -> dict | None:
    """Apply a column update to a user row. Returns the updated row."""
    result = db.table(USERS_TABLE).update(updates).eq("id", user_id).execute()
    return result.data[0] if result.data else None


# =============================================================================
# Job Operations
# =============================================================================


async def get_job(db: Client, job_id: str) -> dict | None:
    """Get a raw job row by ID."""
    result = db.table(JOBS_TABLE).select("*").eq("id", job_id).limit(1).execute()
    return result.data[0] if result.data else None


async def atomic_update_job(
    db: Client,
    job_id: str,
    expected_status: str,
    updates: dict[str, Any],
) -> tuple[dict | None, str | None]:
    """Update a job only if its status is still *expected_status*.

    Returns:
        Tuple of (updated_job, error).
        - If successful: (job_dict, None)
        - If job not found: (None, "not_found")
        - If the status changed underneath us: (None, "conflict")
    """
    result = (
        db.table(JOBS_TABLE)
        .update(updates)
        .eq("id", job_id)
        .eq("status", expected_status)
        .execute()
    )
    if result.data:
        return result.data[0], None

    job = await get_job(db, job_id)
    if not job:
        return None, "not_found"
    logger.warning(
        f"Concurrent status change on job {job_id}: "
        f"expected '{expected_status}', found '{job.get('status')}'"
    )
    return None, "conflict"


# =============================================================================
# Review Operations
# =============================================================================


async def get_reliability_review(db: Client, job_id: str, author_id: str) -> dict | None:
    """Existing reliability review by *author_id* on *job_id*, if any."""
    result = (
        db.table(REVIEWS_TABLE)
        .select("id")
        .eq("job_id", job_id)
        .eq("author_id", author_id)
        .eq("is_reliability_review", True)
        .limit(1)
        .execute()
    )
    return result.data[0] if result.data else None


async def create_review(db: Client, data: dict[str, Any]) -> dict | None:
    """Insert a review row."""
    result = db.table(REVIEWS_TABLE).insert(data).execute()
    return result.data[0] if result.data else None
