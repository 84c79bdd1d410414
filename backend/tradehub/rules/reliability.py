"""Reliability tracking: warnings, review drafts, reminders and suspensions."""

from __future__ import annotations

from datetime import datetime, timedelta

from pydantic import BaseModel, Field, field_validator

from ..models import Job, JobStatus, User, as_utc

RELIABILITY_THRESHOLD = 3
ROLLING_WINDOW_DAYS = 90
REMINDER_LEAD_HOURS = 48


def should_flag_for_review(events_in_window: int) -> bool:
    return events_in_window >= RELIABILITY_THRESHOLD


def should_show_reliability_warning(events_in_window: int) -> bool:
    return events_in_window >= RELIABILITY_THRESHOLD - 1


def reliability_warning_message(events_in_window: int) -> str:
    remaining = RELIABILITY_THRESHOLD - events_in_window
    plural = "s" if events_in_window != 1 else ""
    if remaining <= 0:
        return (
            "Your account has been flagged for admin review due to repeated "
            "non-fulfillments."
        )
    if remaining == 1:
        return (
            f"You have {events_in_window} non-fulfillment{plural} in the last "
            f"{ROLLING_WINDOW_DAYS} days. One more may trigger an account review."
        )
    return (
        f"You have {events_in_window} non-fulfillment{plural} in the last "
        f"{ROLLING_WINDOW_DAYS} days."
    )


def reminder_48h_time(starts_at: datetime) -> datetime:
    return starts_at - timedelta(hours=REMINDER_LEAD_HOURS)


def should_send_48h_reminder(job: Job, now: datetime) -> bool:
    if job.starts_at is None or job.reminder_48h_sent:
        return False
    if job.status != JobStatus.confirmed:
        return False
    return as_utc(now) >= reminder_48h_time(job.starts_at)


def is_account_suspended(user: User | None, now: datetime) -> bool:
    """Suspended until ``suspension_ends_at``, or indefinitely without one."""
    if user is None or not user.account_suspended:
        return False
    if user.suspension_ends_at is not None:
        return as_utc(now) < user.suspension_ends_at
    return True


class ReliabilityReviewDraft(BaseModel):
    """A reliability review as submitted by a participant of a late-cancelled job."""

    reliability_score: int = Field(..., ge=1, le=5)
    communication_score: int = Field(..., ge=1, le=5)
    text: str = Field(..., min_length=1, max_length=2000)

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Review text must not be blank")
        return v

    @property
    def rating(self) -> float:
        return (self.reliability_score + self.communication_score) / 2
