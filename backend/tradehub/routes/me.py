"""What the signed-in user may do, resolved in one place for the frontend."""

import math
from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from ..auth import CurrentUser
from ..logging_config import get_logger
from ..models import Capability, Role, SubscriptionPlan, SubscriptionStatus, VerificationStatus
from ..rules.capabilities import (
    Feature,
    get_availability_horizon_days,
    get_max_radius_km,
    get_tender_close_hours,
    get_user_capabilities,
    is_feature_unlocked,
)
from ..rules.identity import is_admin
from ..rules.reliability import is_account_suspended
from ..rules.verification import (
    ActionKind,
    can_perform_action,
    is_verified,
    verification_gate_url,
    verification_status_message,
)

logger = get_logger("tradehub.me")

router = APIRouter(prefix="/me", tags=["me"])


class PermissionLimits(BaseModel):
    max_radius_km: float | None  # None = unlimited
    availability_horizon_days: int
    tender_close_hours: int


class PermissionsResponse(BaseModel):
    user_id: str | None
    role: Role
    is_admin: bool
    verified: bool
    verification_status: VerificationStatus
    verification_message: str | None = None
    verification_url: str | None = None
    active_plan: SubscriptionPlan
    subscription_status: SubscriptionStatus
    account_suspended: bool
    capabilities: list[Capability]
    features: dict[str, bool]
    actions: dict[str, bool]
    limits: PermissionLimits


@router.get("/permissions", response_model=PermissionsResponse)
async def get_permissions(user: CurrentUser, return_url: str | None = None):
    """Verification state, admin flag, capabilities, feature unlocks and limits."""
    logger.info(f"GET /me/permissions | user={user.id}")
    now = datetime.now(timezone.utc)
    verified = is_verified(user)
    radius = get_max_radius_km(user, now)

    return PermissionsResponse(
        user_id=user.id,
        role=user.role,
        is_admin=is_admin(user),
        verified=verified,
        verification_status=user.abn_status,
        verification_message=verification_status_message(user),
        verification_url=None if verified else verification_gate_url(return_url),
        active_plan=user.active_plan,
        subscription_status=user.subscription_status,
        account_suspended=is_account_suspended(user, now),
        capabilities=sorted(get_user_capabilities(user, now), key=lambda c: c.value),
        features={f.value: is_feature_unlocked(user, f, now) for f in Feature},
        actions={a.value: can_perform_action(user, a) for a in ActionKind},
        limits=PermissionLimits(
            max_radius_km=None if math.isinf(radius) else radius,
            availability_horizon_days=get_availability_horizon_days(user, now),
            tender_close_hours=get_tender_close_hours(user.active_plan),
        ),
    )
