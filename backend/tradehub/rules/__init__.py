"""Pure business rules for TradeHub.

Every function here is synchronous and side-effect free. Inputs are the
normalized snapshots from ``tradehub.models``; time-dependent checks take an
explicit ``now``.
"""

from .cancellation import (
    LATE_CANCELLATION_WINDOW_HOURS,
    CancellationEligibility,
    can_leave_reliability_review,
    cancellation_summary,
    effective_start,
    get_hours_until_start,
    hours_before_start,
    is_late_cancellation,
    will_be_late_cancellation,
)
from .capabilities import (
    Feature,
    FeatureLock,
    can_unlock_additional_trades,
    can_use_search_from_location,
    can_user_post_tenders,
    get_availability_horizon_days,
    get_feature_lock,
    get_max_radius_km,
    get_tender_close_hours,
    get_upgrade_path,
    get_user_capabilities,
    has_capability,
    is_feature_unlocked,
)
from .identity import is_admin, is_job_participant, is_logged_in, owns_job
from .lifecycle import (
    TransitionResult,
    can_transition,
    cancellation_flags,
    is_job_expired,
    is_past_last_date,
    is_past_start_date,
)
from .reliability import (
    RELIABILITY_THRESHOLD,
    ReliabilityReviewDraft,
    is_account_suspended,
    reliability_warning_message,
    should_flag_for_review,
    should_send_48h_reminder,
    should_show_reliability_warning,
)
from .verification import (
    ActionKind,
    build_verification_update,
    can_commit_action,
    can_create_job,
    can_edit_job,
    can_perform_action,
    is_valid_abn_format,
    is_verified,
    normalize_abn,
    requires_verification_for_action,
    verification_status_message,
)

__all__ = [
    # Identity
    "is_admin",
    "is_logged_in",
    "owns_job",
    "is_job_participant",
    # Verification
    "ActionKind",
    "is_verified",
    "requires_verification_for_action",
    "can_perform_action",
    "can_commit_action",
    "can_create_job",
    "can_edit_job",
    "verification_status_message",
    "normalize_abn",
    "is_valid_abn_format",
    "build_verification_update",
    # Capabilities
    "Feature",
    "FeatureLock",
    "can_user_post_tenders",
    "get_user_capabilities",
    "has_capability",
    "can_unlock_additional_trades",
    "can_use_search_from_location",
    "is_feature_unlocked",
    "get_feature_lock",
    "get_max_radius_km",
    "get_availability_horizon_days",
    "get_tender_close_hours",
    "get_upgrade_path",
    # Cancellation
    "LATE_CANCELLATION_WINDOW_HOURS",
    "CancellationEligibility",
    "effective_start",
    "hours_before_start",
    "is_late_cancellation",
    "can_leave_reliability_review",
    "get_hours_until_start",
    "will_be_late_cancellation",
    "cancellation_summary",
    # Lifecycle
    "TransitionResult",
    "can_transition",
    "cancellation_flags",
    "is_job_expired",
    "is_past_last_date",
    "is_past_start_date",
    # Reliability
    "RELIABILITY_THRESHOLD",
    "ReliabilityReviewDraft",
    "is_account_suspended",
    "reliability_warning_message",
    "should_flag_for_review",
    "should_send_48h_reminder",
    "should_show_reliability_warning",
]
