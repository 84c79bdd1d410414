"""Admin routes for verification decisions and the audit trail.

Every route here requires the explicit admin flag on the caller's user row.
"""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request, status
from pydantic import BaseModel, Field

from ..audit import audit_action_label, list_audit_logs, new_audit_log, record_audit_log
from ..auth import AdminUser
from ..database import Database, update_user
from ..logging_config import get_logger
from ..models import AuditActionType, VerificationStatus
from ..rate_limit import limiter
from ..rules.verification import build_verification_update

logger = get_logger("tradehub.admin")

router = APIRouter(prefix="/admin", tags=["admin"])

_VALID_STATUSES = ", ".join(s.value for s in VerificationStatus)

_TERMINAL_DECISIONS = {
    VerificationStatus.VERIFIED: AuditActionType.abn_verified,
    VerificationStatus.REJECTED: AuditActionType.abn_rejected,
}


# =============================================================================
# Models
# =============================================================================


class AbnDecisionRequest(BaseModel):
    """Admin decision on a user's ABN.

    ``abn_status`` is untyped and checked by the route so any bad value,
    including a non-string, is answered with 400 before anything is written.
    """

    abn_status: Any = None
    reason: str | None = Field(None, max_length=1000)


class AuditLogEntry(BaseModel):
    id: str
    admin_id: str
    action_type: str
    action_label: str
    details: str
    target_user_id: str | None = None
    target_job_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None


class AuditLogListResponse(BaseModel):
    entries: list[AuditLogEntry]
    total: int
    limit: int
    offset: int


# =============================================================================
# Routes
# =============================================================================


@router.post("/users/{user_id}/abn")
@limiter.limit("30/minute")
async def decide_abn(
    request: Request,
    user_id: str,
    decision: AbnDecisionRequest,
    admin: AdminUser,
    db: Database,
):
    """Set a user's ABN verification status.

    VERIFIED records the reviewer and time on the user row. REJECTED stores the
    reason and clears any earlier approval. Both are appended to the audit log.
    """
    logger.info(f"POST /admin/users/{user_id}/abn | admin={admin.id}")

    try:
        new_status = VerificationStatus(decision.abn_status)
    except (ValueError, TypeError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid abn_status. Must be one of: {_VALID_STATUSES}",
        )

    now = datetime.now(timezone.utc)
    updates = build_verification_update(new_status, admin.id, decision.reason, now)
    updated = await update_user(db, user_id, updates)
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    action_type = _TERMINAL_DECISIONS.get(new_status)
    if action_type is not None:
        details = f"ABN {new_status.value.lower()} by admin"
        if new_status == VerificationStatus.REJECTED and decision.reason:
            details = f"{details}: {decision.reason}"
        entry = new_audit_log(
            admin.id,
            action_type,
            details,
            now=now,
            target_user_id=user_id,
            metadata={
                "abn": updated.get("abn"),
                "reviewer_id": admin.id,
                "decided_at": now.isoformat(),
                "reason": decision.reason,
            },
        )
        try:
            await record_audit_log(db, entry)
        except Exception as e:
            # The user row is already written; surface the missing audit row
            logger.error(
                f"Audit log write failed after ABN decision | user={user_id} | "
                f"status={new_status.value} | admin={admin.id} | error={type(e).__name__}"
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="ABN decision saved but the audit log entry could not be written",
            ) from e

    logger.info(f"ABN status set | user={user_id} | status={new_status.value} | admin={admin.id}")
    return {"ok": True}


@router.get("/audit-log", response_model=AuditLogListResponse)
async def get_audit_log(
    admin: AdminUser,
    db: Database,
    action_type: AuditActionType | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    """Newest-first page of the audit trail."""
    logger.info(f"GET /admin/audit-log | admin={admin.id} | action_type={action_type}")

    rows, total = await list_audit_logs(db, action_type=action_type, limit=limit, offset=offset)
    entries = [
        AuditLogEntry(
            id=row["id"],
            admin_id=row["admin_id"],
            action_type=row["action_type"],
            action_label=audit_action_label(row["action_type"]),
            details=row.get("details") or "",
            target_user_id=row.get("target_user_id"),
            target_job_id=row.get("target_job_id"),
            metadata=row.get("metadata") or {},
            created_at=row.get("created_at"),
        )
        for row in rows
    ]
    return AuditLogListResponse(entries=entries, total=total, limit=limit, offset=offset)
