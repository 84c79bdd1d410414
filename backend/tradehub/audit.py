"""Append-only audit trail for administrative actions.

Entries are built in memory with ``new_audit_log`` and written with
``record_audit_log``. Entries are never updated or deleted.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from supabase import Client

from .logging_config import get_logger
from .models import AuditActionType, AuditLog

logger = get_logger("tradehub.audit")

AUDIT_LOGS_TABLE = "audit_logs"

_ACTION_LABELS: dict[AuditActionType, str] = {
    AuditActionType.user_verification_approved: "User Verification Approved",
    AuditActionType.user_verification_rejected: "User Verification Declined",
    AuditActionType.user_suspended: "Account Placed on Hold",
    AuditActionType.user_unsuspended: "Account Hold Removed",
    AuditActionType.review_approved: "Review Approved",
    AuditActionType.review_rejected: "Review Declined",
    AuditActionType.admin_note_added: "Admin Note Added",
    AuditActionType.job_viewed: "Job Viewed",
    AuditActionType.reliability_event_created: "Reliability Event Created",
    AuditActionType.admin_review_case_created: "Admin Review Case Created",
    AuditActionType.admin_review_case_resolved: "Admin Review Case Resolved",
    AuditActionType.reliability_warning_issued: "Reliability Warning Issued",
    AuditActionType.account_flagged_for_review: "Account Flagged for Review",
    AuditActionType.abn_verified: "ABN Verified",
    AuditActionType.abn_rejected: "ABN Rejected",
}


def audit_action_label(action_type: AuditActionType | str) -> str:
    try:
        return _ACTION_LABELS[AuditActionType(action_type)]
    except ValueError:
        return str(action_type)


def new_audit_log(
    admin_id: str,
    action_type: AuditActionType,
    details: str,
    *,
    now: datetime,
    target_user_id: str | None = None,
    target_job_id: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> AuditLog:
    return AuditLog(
        id=str(uuid.uuid4()),
        admin_id=admin_id,
        action_type=action_type,
        details=details,
        target_user_id=target_user_id,
        target_job_id=target_job_id,
        metadata=metadata or {},
        created_at=now,
    )


def audit_log_row(entry: AuditLog) -> dict[str, Any]:
    """Serialize an entry for insertion into the audit_logs table."""
    return {
        "id": entry.id,
        "admin_id": entry.admin_id,
        "action_type": entry.action_type.value,
        "details": entry.details,
        "target_user_id": entry.target_user_id,
        "target_job_id": entry.target_job_id,
        "metadata": entry.metadata,
        "created_at": entry.created_at.isoformat(),
    }


async def record_audit_log(db: Client, entry: AuditLog) -> dict | None:
    """Insert *entry*. Insert-only; audit rows are never modified."""
    result = db.table(AUDIT_LOGS_TABLE).insert(audit_log_row(entry)).execute()
    logger.info(
        "Audit %s by admin=%s target_user=%s",
        entry.action_type.value,
        entry.admin_id,
        entry.target_user_id,
    )
    return result.data[0] if result.data else None


async def list_audit_logs(
    db: Client,
    action_type: AuditActionType | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[dict], int]:
    """Newest-first page of audit rows."""
    query = db.table(AUDIT_LOGS_TABLE).select("*", count="exact")
    if action_type is not None:
        query = query.eq("action_type", action_type.value)
    query = query.order("created_at", desc=True).range(offset, offset + limit - 1)
    result = query.execute()
    return result.data or [], result.count or 0
