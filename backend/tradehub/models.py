"""Canonical domain models for the TradeHub rule layer.

Rows arrive from Supabase (snake_case) and from the web client (camelCase),
sometimes with lowercase enum values. Every variant is resolved here, once,
so the predicates in ``tradehub.rules`` only ever see one shape.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

# =============================================================================
# Enums
# =============================================================================


class Role(str, Enum):
    """Account role. Only ever used for the tender decision table."""

    contractor = "contractor"
    subcontractor = "subcontractor"
    admin = "admin"
    unknown = "unknown"


class VerificationStatus(str, Enum):
    """Lifecycle of a user's ABN verification."""

    UNVERIFIED = "UNVERIFIED"
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class SubscriptionPlan(str, Enum):
    NONE = "NONE"
    BUSINESS_PRO_20 = "BUSINESS_PRO_20"
    SUBCONTRACTOR_PRO_10 = "SUBCONTRACTOR_PRO_10"
    ALL_ACCESS_PRO_26 = "ALL_ACCESS_PRO_26"


class SubscriptionStatus(str, Enum):
    NONE = "NONE"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    PAST_DUE = "PAST_DUE"
    CANCELED = "CANCELED"


class Capability(str, Enum):
    """Premium capability granted by a plan."""

    BUILDER = "BUILDER"
    CONTRACTOR = "CONTRACTOR"
    SUBCONTRACTOR = "SUBCONTRACTOR"


class JobStatus(str, Enum):
    open = "open"
    pending_approval = "pending_approval"
    accepted = "accepted"
    confirmed = "confirmed"
    completed = "completed"
    cancelled = "cancelled"
    closed = "closed"


class AuditActionType(str, Enum):
    user_verification_approved = "user_verification_approved"
    user_verification_rejected = "user_verification_rejected"
    user_suspended = "user_suspended"
    user_unsuspended = "user_unsuspended"
    review_approved = "review_approved"
    review_rejected = "review_rejected"
    admin_note_added = "admin_note_added"
    job_viewed = "job_viewed"
    reliability_event_created = "reliability_event_created"
    admin_review_case_created = "admin_review_case_created"
    admin_review_case_resolved = "admin_review_case_resolved"
    reliability_warning_issued = "reliability_warning_issued"
    account_flagged_for_review = "account_flagged_for_review"
    abn_verified = "abn_verified"
    abn_rejected = "abn_rejected"


# =============================================================================
# Plan Configuration
# =============================================================================


class PlanConfig(BaseModel):
    """Static configuration for a subscription plan."""

    plan: SubscriptionPlan
    name: str
    price_aud: Decimal
    description: str
    capabilities: frozenset[Capability] = frozenset()

    class Config:
        frozen = True


# Canonical plan definitions, single source of truth
PLAN_CONFIGS: dict[SubscriptionPlan, PlanConfig] = {
    SubscriptionPlan.NONE: PlanConfig(
        plan=SubscriptionPlan.NONE,
        name="Free",
        price_aud=Decimal("0"),
        description="Basic access",
    ),
    SubscriptionPlan.BUSINESS_PRO_20: PlanConfig(
        plan=SubscriptionPlan.BUSINESS_PRO_20,
        name="Business Pro",
        price_aud=Decimal("20"),
        description="Post tenders and hire subcontractors",
        capabilities=frozenset({Capability.BUILDER, Capability.CONTRACTOR}),
    ),
    SubscriptionPlan.SUBCONTRACTOR_PRO_10: PlanConfig(
        plan=SubscriptionPlan.SUBCONTRACTOR_PRO_10,
        name="Subcontractor Pro",
        price_aud=Decimal("10"),
        description="Enhanced subcontractor tools",
        capabilities=frozenset({Capability.SUBCONTRACTOR}),
    ),
    SubscriptionPlan.ALL_ACCESS_PRO_26: PlanConfig(
        plan=SubscriptionPlan.ALL_ACCESS_PRO_26,
        name="All-Access Pro",
        price_aud=Decimal("26"),
        description="Everything: Builder + Contractor + Subcontractor",
        capabilities=frozenset(
            {Capability.BUILDER, Capability.CONTRACTOR, Capability.SUBCONTRACTOR}
        ),
    ),
}


def get_plan_config(plan: SubscriptionPlan) -> PlanConfig:
    """Look up the config for a plan. Raises KeyError for unknown plans."""
    return PLAN_CONFIGS[plan]


# =============================================================================
# Boundary coercion helpers
# =============================================================================


def _coerce_enum(enum_cls: type[Enum], value: Any, default: Enum, upper: bool) -> Enum:
    if isinstance(value, enum_cls):
        return value
    if value is None:
        return default
    text = str(value).strip()
    text = text.upper() if upper else text.lower()
    try:
        return enum_cls(text)
    except ValueError:
        return default


def parse_role(value: Any) -> Role:
    """Resolve a loose role string. Unknown or missing means unknown, which posts nothing."""
    return _coerce_enum(Role, value, Role.unknown, upper=False)


def parse_verification_status(value: Any) -> VerificationStatus:
    return _coerce_enum(VerificationStatus, value, VerificationStatus.UNVERIFIED, upper=True)


def parse_plan(value: Any) -> SubscriptionPlan:
    return _coerce_enum(SubscriptionPlan, value, SubscriptionPlan.NONE, upper=True)


def parse_subscription_status(value: Any) -> SubscriptionStatus:
    return _coerce_enum(SubscriptionStatus, value, SubscriptionStatus.NONE, upper=True)


def coerce_datetime(value: Any) -> Any:
    """Accept date-only strings and ``date`` objects; pass everything else on."""
    if isinstance(value, str) and len(value.strip()) == 10:
        return datetime.fromisoformat(value.strip())
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day)
    return value


def as_utc(value: datetime | None) -> datetime | None:
    """Naive datetimes are read as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _aliases(snake: str, camel: str) -> AliasChoices:
    return AliasChoices(snake, camel)


# =============================================================================
# Domain Snapshots
# =============================================================================


class User(BaseModel):
    """A user snapshot (mirrors the users table)."""

    id: str | None = None
    email: str | None = None
    role: Role = Role.unknown
    abn: str | None = None
    abn_status: VerificationStatus = Field(
        default=VerificationStatus.UNVERIFIED,
        validation_alias=_aliases("abn_status", "abnStatus"),
    )
    abn_verified_at: datetime | None = Field(
        default=None, validation_alias=_aliases("abn_verified_at", "abnVerifiedAt")
    )
    abn_verified_by: str | None = Field(
        default=None, validation_alias=_aliases("abn_verified_by", "abnVerifiedBy")
    )
    abn_verified: bool = Field(
        default=False, validation_alias=_aliases("abn_verified", "abnVerified")
    )
    abn_rejection_reason: str | None = Field(
        default=None, validation_alias=_aliases("abn_rejection_reason", "abnRejectionReason")
    )
    active_plan: SubscriptionPlan = Field(
        default=SubscriptionPlan.NONE, validation_alias=_aliases("active_plan", "activePlan")
    )
    subscription_status: SubscriptionStatus = Field(
        default=SubscriptionStatus.NONE,
        validation_alias=_aliases("subscription_status", "subscriptionStatus"),
    )
    complimentary_premium_until: datetime | None = Field(
        default=None,
        validation_alias=_aliases("complimentary_premium_until", "complimentaryPremiumUntil"),
    )
    is_admin: bool = Field(default=False, validation_alias=_aliases("is_admin", "isAdmin"))
    additional_trades_unlocked: bool = Field(
        default=False,
        validation_alias=_aliases("additional_trades_unlocked", "additionalTradesUnlocked"),
    )
    account_suspended: bool = Field(
        default=False, validation_alias=_aliases("account_suspended", "accountSuspended")
    )
    suspension_ends_at: datetime | None = Field(
        default=None, validation_alias=_aliases("suspension_ends_at", "suspensionEndsAt")
    )

    class Config:
        frozen = True
        populate_by_name = True
        extra = "ignore"

    @field_validator("role", mode="before")
    @classmethod
    def _role(cls, v: Any) -> Role:
        return parse_role(v)

    @field_validator("abn_status", mode="before")
    @classmethod
    def _abn_status(cls, v: Any) -> VerificationStatus:
        return parse_verification_status(v)

    @field_validator("active_plan", mode="before")
    @classmethod
    def _plan(cls, v: Any) -> SubscriptionPlan:
        return parse_plan(v)

    @field_validator("subscription_status", mode="before")
    @classmethod
    def _status(cls, v: Any) -> SubscriptionStatus:
        return parse_subscription_status(v)

    @field_validator(
        "abn_verified", "is_admin", "additional_trades_unlocked", "account_suspended",
        mode="before",
    )
    @classmethod
    def _strict_true(cls, v: Any) -> bool:
        # Only a literal True counts; null columns and truthy strings do not.
        return v is True

    @field_validator(
        "abn_verified_at", "complimentary_premium_until", "suspension_ends_at", mode="before"
    )
    @classmethod
    def _coerce_dt(cls, v: Any) -> Any:
        if v == "":
            return None
        return coerce_datetime(v)

    @field_validator(
        "abn_verified_at", "complimentary_premium_until", "suspension_ends_at", mode="after"
    )
    @classmethod
    def _utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v)


class Job(BaseModel):
    """A job snapshot (mirrors the jobs table)."""

    id: str | None = None
    contractor_id: str | None = Field(
        default=None, validation_alias=_aliases("contractor_id", "contractorId")
    )
    selected_subcontractor_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "selected_subcontractor_id", "selected_subcontractor", "selectedSubcontractor"
        ),
    )
    confirmed_subcontractor_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "confirmed_subcontractor_id", "confirmed_subcontractor", "confirmedSubcontractor"
        ),
    )
    title: str | None = None
    dates: list[datetime] = Field(default_factory=list)
    start_time: str | None = Field(
        default=None, validation_alias=_aliases("start_time", "startTime")
    )
    status: JobStatus = JobStatus.open
    cancelled_at: datetime | None = Field(
        default=None, validation_alias=_aliases("cancelled_at", "cancelledAt")
    )
    cancelled_by: str | None = Field(
        default=None, validation_alias=_aliases("cancelled_by", "cancelledBy")
    )
    cancellation_reason: str | None = Field(
        default=None, validation_alias=_aliases("cancellation_reason", "cancellationReason")
    )
    was_accepted_or_confirmed_before_cancellation: bool = Field(
        default=False,
        validation_alias=_aliases(
            "was_accepted_or_confirmed_before_cancellation",
            "wasAcceptedOrConfirmedBeforeCancellation",
        ),
    )
    starts_at: datetime | None = Field(
        default=None, validation_alias=_aliases("starts_at", "startsAt")
    )
    reminder_48h_sent: bool = Field(
        default=False, validation_alias=_aliases("reminder_48h_sent", "reminder48hSent")
    )

    class Config:
        frozen = True
        populate_by_name = True
        extra = "ignore"

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("dates", mode="before")
    @classmethod
    def _dates(cls, v: Any) -> Any:
        if v is None:
            return []
        return [coerce_datetime(item) for item in v]

    @field_validator("cancelled_at", "starts_at", mode="before")
    @classmethod
    def _coerce_dt(cls, v: Any) -> Any:
        if v == "":
            return None
        return coerce_datetime(v)

    @field_validator("dates", mode="after")
    @classmethod
    def _dates_utc(cls, v: list[datetime]) -> list[datetime]:
        return [as_utc(d) for d in v]

    @field_validator("cancelled_at", "starts_at", mode="after")
    @classmethod
    def _utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v)

    @field_validator("was_accepted_or_confirmed_before_cancellation", "reminder_48h_sent", mode="before")
    @classmethod
    def _strict_true(cls, v: Any) -> bool:
        return v is True


class AuditLog(BaseModel):
    """Immutable record of an administrative action (mirrors audit_logs)."""

    id: str
    admin_id: str
    action_type: AuditActionType
    details: str
    target_user_id: str | None = None
    target_job_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime

    class Config:
        frozen = True


def user_from_row(row: dict[str, Any] | None) -> User | None:
    """Normalize a raw user row (either key style) into a ``User``."""
    if row is None:
        return None
    return User.model_validate(row)


def job_from_row(row: dict[str, Any] | None) -> Job | None:
    """Normalize a raw job row (either key style) into a ``Job``."""
    if row is None:
        return None
    return Job.model_validate(row)
