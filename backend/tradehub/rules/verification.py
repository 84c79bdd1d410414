"""ABN verification gate.

Verification gates commit actions (create, publish, apply, confirm, accept,
award, ...) and never browsing. A user who cannot be shown to be verified is
treated as unverified.
"""

from __future__ import annotations

import re
from datetime import datetime
from enum import Enum
from typing import Any

from ..models import Job, User, VerificationStatus, as_utc
from ..urls import verification_gate_url
from .identity import is_logged_in, owns_job

__all__ = [
    "ActionKind",
    "BROWSE_ACTIONS",
    "COMMIT_ACTIONS",
    "build_verification_update",
    "can_commit_action",
    "can_create_job",
    "can_edit_job",
    "can_perform_action",
    "is_valid_abn_format",
    "is_verified",
    "normalize_abn",
    "requires_verification_for_action",
    "verification_gate_url",
    "verification_status_message",
]

_ABN_PATTERN = re.compile(r"^\d{11}$")


class ActionKind(str, Enum):
    # browse
    view = "view"
    browse = "browse"
    search = "search"
    message = "message"
    # commit
    create = "create"
    publish = "publish"
    apply = "apply"
    confirm = "confirm"
    accept = "accept"
    award = "award"
    edit = "edit"
    quote = "quote"
    cancel = "cancel"


BROWSE_ACTIONS = frozenset(
    {ActionKind.view, ActionKind.browse, ActionKind.search, ActionKind.message}
)
COMMIT_ACTIONS = frozenset(set(ActionKind) - BROWSE_ACTIONS)


def is_verified(user: User | None) -> bool:
    """Any one of status, timestamp or explicit flag is enough."""
    if user is None:
        return False
    if user.abn_status == VerificationStatus.VERIFIED:
        return True
    if user.abn_verified_at is not None:
        return True
    return user.abn_verified


def _as_action(action: ActionKind | str) -> ActionKind | None:
    if isinstance(action, ActionKind):
        return action
    try:
        return ActionKind(str(action).strip().lower())
    except ValueError:
        return None


def requires_verification_for_action(action: ActionKind | str) -> bool:
    """Browse actions are never gated. Unknown actions are gated."""
    return _as_action(action) not in BROWSE_ACTIONS


def can_perform_action(user: User | None, action: ActionKind | str) -> bool:
    if user is None:
        return False
    if not requires_verification_for_action(action):
        return True
    return is_verified(user)


def can_commit_action(user: User | None) -> bool:
    return is_verified(user)


def can_create_job(user: User | None) -> bool:
    return is_logged_in(user) and can_commit_action(user)


def can_edit_job(user: User | None, job: Job | None) -> bool:
    return is_logged_in(user) and owns_job(user, job) and can_commit_action(user)


def verification_status_message(user: User | None) -> str | None:
    """User-facing explanation of where verification stands, or None."""
    if user is None or is_verified(user):
        return None
    if not user.abn or not user.abn.strip():
        return "You need to provide your ABN before posting jobs."
    if user.abn_status == VerificationStatus.PENDING:
        return "Your ABN is currently being verified by our team."
    if user.abn_status == VerificationStatus.REJECTED:
        if user.abn_rejection_reason:
            return f"Your ABN verification was rejected: {user.abn_rejection_reason}"
        return "Your ABN verification was rejected."
    return "Your ABN has been submitted and is pending verification."


def normalize_abn(raw: Any) -> str:
    """Strip all whitespace from a submitted ABN."""
    if raw is None:
        return ""
    return re.sub(r"\s", "", str(raw))


def is_valid_abn_format(raw: Any) -> bool:
    return bool(_ABN_PATTERN.match(normalize_abn(raw)))


def build_verification_update(
    status: VerificationStatus,
    reviewer_id: str,
    reason: str | None,
    now: datetime,
) -> dict[str, Any]:
    """Column update for an admin verification decision.

    Only VERIFIED records a verifier and timestamp. REJECTED keeps the reason
    and clears both; non-terminal statuses clear everything.
    """
    update: dict[str, Any] = {"abn_status": status.value}
    if status == VerificationStatus.VERIFIED:
        update["abn_verified_at"] = as_utc(now).isoformat()
        update["abn_verified_by"] = reviewer_id
        update["abn_rejection_reason"] = None
    elif status == VerificationStatus.REJECTED:
        update["abn_rejection_reason"] = reason or None
        update["abn_verified_at"] = None
        update["abn_verified_by"] = None
    else:
        update["abn_rejection_reason"] = None
        update["abn_verified_at"] = None
        update["abn_verified_by"] = None
    return update
