"""Capability and entitlement resolution.

Premium features are unlocked by an ACTIVE subscription to a qualifying plan,
by complimentary premium granted by an admin, or, for additional trades, by a
manual override. Anything without a matching rule is denied.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from ..models import (
    PLAN_CONFIGS,
    Capability,
    Role,
    SubscriptionPlan,
    SubscriptionStatus,
    User,
    as_utc,
    parse_plan,
    parse_subscription_status,
)
from .reliability import is_account_suspended

ALL_CAPABILITIES = frozenset(Capability)

SUBCONTRACTOR_TENDER_PLANS = frozenset(
    {SubscriptionPlan.SUBCONTRACTOR_PRO_10, SubscriptionPlan.ALL_ACCESS_PRO_26}
)

FREE_RADIUS_KM = 15
FREE_AVAILABILITY_DAYS = 14
PREMIUM_AVAILABILITY_DAYS = 60


class Feature(str, Enum):
    post_tender = "post_tender"
    post_premium_tender = "post_premium_tender"
    additional_trades = "additional_trades"
    search_from_location = "search_from_location"
    unlimited_radius = "unlimited_radius"
    broadcast_availability = "broadcast_availability"
    hide_business_name = "hide_business_name"


@dataclass(frozen=True)
class FeatureLock:
    """Why a feature is locked and which plan would unlock it."""

    locked: bool
    reason: str | None = None
    upgrade_plan: SubscriptionPlan | None = None
    upgrade_plan_name: str | None = None
    upgrade_plan_price: Decimal | None = None


# =============================================================================
# Tender decision table
# =============================================================================


def can_user_post_tenders(
    role: Role | str | None,
    plan: SubscriptionPlan | str | None,
    status: SubscriptionStatus | str | None,
) -> bool:
    """Admins and contractors always; subcontractors only on an ACTIVE qualifying plan.

    Unrecognised roles match no row of the table and are denied.
    """
    if not isinstance(role, Role):
        try:
            role = Role(str(role).strip().lower())
        except ValueError:
            return False
    if role in (Role.admin, Role.contractor):
        return True
    if role == Role.subcontractor:
        return (
            parse_plan(plan) in SUBCONTRACTOR_TENDER_PLANS
            and parse_subscription_status(status) == SubscriptionStatus.ACTIVE
        )
    return False


# =============================================================================
# Capabilities
# =============================================================================


def has_complimentary_premium(user: User | None, now: datetime) -> bool:
    if user is None or user.complimentary_premium_until is None:
        return False
    return user.complimentary_premium_until > as_utc(now)


def get_user_capabilities(user: User | None, now: datetime) -> frozenset[Capability]:
    if user is None:
        return frozenset()
    if has_complimentary_premium(user, now):
        return ALL_CAPABILITIES
    if user.subscription_status != SubscriptionStatus.ACTIVE:
        return frozenset()
    return PLAN_CONFIGS[user.active_plan].capabilities


def has_capability(user: User | None, capability: Capability, now: datetime) -> bool:
    return capability in get_user_capabilities(user, now)


def has_builder_premium(user: User | None, now: datetime) -> bool:
    return has_capability(user, Capability.BUILDER, now)


def has_contractor_premium(user: User | None, now: datetime) -> bool:
    return has_capability(user, Capability.CONTRACTOR, now)


def has_subcontractor_premium(user: User | None, now: datetime) -> bool:
    return has_capability(user, Capability.SUBCONTRACTOR, now)


def has_any_premium(user: User | None, now: datetime) -> bool:
    return bool(get_user_capabilities(user, now))


def can_unlock_additional_trades(user: User | None, now: datetime) -> bool:
    """The manual override wins regardless of plan or status."""
    if user is None:
        return False
    if user.additional_trades_unlocked:
        return True
    return has_subcontractor_premium(user, now)


def can_use_search_from_location(user: User | None, now: datetime) -> bool:
    return has_builder_premium(user, now) or has_contractor_premium(user, now)


# =============================================================================
# Feature gate
# =============================================================================


def _post_tender(user: User, now: datetime) -> bool:
    return can_user_post_tenders(user.role, user.active_plan, user.subscription_status)


_FEATURE_RULES = {
    Feature.post_tender: _post_tender,
    Feature.post_premium_tender: has_builder_premium,
    Feature.additional_trades: can_unlock_additional_trades,
    Feature.search_from_location: can_use_search_from_location,
    Feature.unlimited_radius: has_any_premium,
    Feature.broadcast_availability: has_subcontractor_premium,
    Feature.hide_business_name: has_builder_premium,
}

_FEATURE_UPGRADES: dict[Feature, tuple[str, SubscriptionPlan]] = {
    Feature.post_tender: (
        "Posting tenders as a subcontractor requires Subcontractor Pro",
        SubscriptionPlan.SUBCONTRACTOR_PRO_10,
    ),
    Feature.post_premium_tender: (
        "Premium tenders require Business Pro",
        SubscriptionPlan.BUSINESS_PRO_20,
    ),
    Feature.additional_trades: (
        "Add more trades to your profile with Subcontractor Pro",
        SubscriptionPlan.SUBCONTRACTOR_PRO_10,
    ),
    Feature.search_from_location: (
        "Search from any location with Business Pro",
        SubscriptionPlan.BUSINESS_PRO_20,
    ),
    Feature.unlimited_radius: (
        f"Expand your work radius beyond {FREE_RADIUS_KM}km",
        SubscriptionPlan.ALL_ACCESS_PRO_26,
    ),
    Feature.broadcast_availability: (
        "Notify contractors when you are available",
        SubscriptionPlan.SUBCONTRACTOR_PRO_10,
    ),
    Feature.hide_business_name: (
        "Hide your business name until engagement with Business Pro",
        SubscriptionPlan.BUSINESS_PRO_20,
    ),
}


def _as_feature(feature: Feature | str) -> Feature | None:
    if isinstance(feature, Feature):
        return feature
    try:
        return Feature(str(feature).strip().lower())
    except ValueError:
        return None


def is_feature_unlocked(user: User | None, feature: Feature | str, now: datetime) -> bool:
    """Suspended accounts and unknown features are denied."""
    if user is None or is_account_suspended(user, now):
        return False
    rule = _FEATURE_RULES.get(_as_feature(feature))
    if rule is None:
        return False
    return rule(user, now)


def get_feature_lock(user: User | None, feature: Feature | str, now: datetime) -> FeatureLock:
    if is_feature_unlocked(user, feature, now):
        return FeatureLock(locked=False)
    if user is not None and is_account_suspended(user, now):
        return FeatureLock(locked=True, reason="Your account is currently suspended")
    upgrade = _FEATURE_UPGRADES.get(_as_feature(feature))
    if upgrade is None:
        return FeatureLock(locked=True, reason="This feature is not available")
    reason, plan = upgrade
    config = PLAN_CONFIGS[plan]
    return FeatureLock(
        locked=True,
        reason=reason,
        upgrade_plan=plan,
        upgrade_plan_name=config.name,
        upgrade_plan_price=config.price_aud,
    )


# =============================================================================
# Limits
# =============================================================================


def get_max_radius_km(user: User | None, now: datetime) -> float:
    if has_any_premium(user, now):
        return math.inf
    return FREE_RADIUS_KM


def get_availability_horizon_days(user: User | None, now: datetime) -> int:
    if has_subcontractor_premium(user, now):
        return PREMIUM_AVAILABILITY_DAYS
    return FREE_AVAILABILITY_DAYS


def get_tender_close_hours(plan: SubscriptionPlan | str | None) -> int:
    plan = parse_plan(plan)
    if plan == SubscriptionPlan.BUSINESS_PRO_20:
        return 72
    if plan == SubscriptionPlan.ALL_ACCESS_PRO_26:
        return 168
    return 24


def get_upgrade_path(targets: frozenset[Capability] | set[Capability]) -> SubscriptionPlan | None:
    """Cheapest single plan that covers every requested capability."""
    if not targets:
        return None
    candidates = [
        config
        for config in PLAN_CONFIGS.values()
        if config.capabilities and set(targets) <= config.capabilities
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda c: c.price_aud).plan
