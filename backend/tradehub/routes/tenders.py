"""Tender posting permission check."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel

from ..auth import CurrentUser
from ..logging_config import get_logger
from ..models import SubscriptionPlan
from ..rules.capabilities import (
    Feature,
    can_user_post_tenders,
    get_feature_lock,
    get_tender_close_hours,
)
from ..rules.reliability import is_account_suspended
from ..rules.verification import (
    ActionKind,
    can_perform_action,
    verification_gate_url,
    verification_status_message,
)

logger = get_logger("tradehub.tenders")

router = APIRouter(prefix="/tenders", tags=["tenders"])

TenderDenial = Literal["account_suspended", "upgrade_required", "verification_required"]


class TenderPermissionRequest(BaseModel):
    return_url: str | None = "/tenders/new"


class TenderPermissionResponse(BaseModel):
    allowed: bool
    reason: TenderDenial | None = None
    message: str | None = None
    verification_url: str | None = None
    upgrade_plan: SubscriptionPlan | None = None
    upgrade_plan_name: str | None = None
    upgrade_plan_price: Decimal | None = None
    close_hours: int


@router.post("/permission", response_model=TenderPermissionResponse)
async def check_tender_permission(body: TenderPermissionRequest, user: CurrentUser):
    """Whether the caller may publish a tender right now, and what to do if not."""
    logger.info(f"POST /tenders/permission | user={user.id}")
    now = datetime.now(timezone.utc)
    close_hours = get_tender_close_hours(user.active_plan)

    if is_account_suspended(user, now):
        return TenderPermissionResponse(
            allowed=False,
            reason="account_suspended",
            message="Your account is currently suspended",
            close_hours=close_hours,
        )

    if not can_user_post_tenders(user.role, user.active_plan, user.subscription_status):
        lock = get_feature_lock(user, Feature.post_tender, now)
        logger.info(f"Tender posting locked | user={user.id} | plan={user.active_plan.value}")
        return TenderPermissionResponse(
            allowed=False,
            reason="upgrade_required",
            message=lock.reason,
            upgrade_plan=lock.upgrade_plan,
            upgrade_plan_name=lock.upgrade_plan_name,
            upgrade_plan_price=lock.upgrade_plan_price,
            close_hours=close_hours,
        )

    if not can_perform_action(user, ActionKind.publish):
        return TenderPermissionResponse(
            allowed=False,
            reason="verification_required",
            message=verification_status_message(user),
            verification_url=verification_gate_url(body.return_url),
            close_hours=close_hours,
        )

    return TenderPermissionResponse(allowed=True, close_hours=close_hours)
