"""Late-cancellation and reliability-review eligibility.

Two different 24-hour checks live here:

* ``will_be_late_cancellation`` warns *before* cancelling, gated on the job's
  current status (accepted/confirmed) and floored at zero hours.
* ``is_late_cancellation`` judges a cancellation *after* the fact, gated on the
  flag captured at cancellation time, and may see negative hours.

Every time-dependent function takes ``now`` explicitly; a naive ``now`` is read as UTC.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..logging_config import get_logger
from ..models import Job, JobStatus, as_utc
from .identity import is_job_participant

logger = get_logger("tradehub.rules.cancellation")

LATE_CANCELLATION_WINDOW_HOURS = 24

_SECONDS_PER_HOUR = 60 * 60

PROSPECTIVE_LATE_STATUSES = frozenset({JobStatus.accepted, JobStatus.confirmed})


@dataclass(frozen=True)
class CancellationEligibility:
    """Everything the job page needs to render cancellation affordances."""

    hours_until_start: float
    will_be_late_cancellation: bool
    is_late_cancellation: bool
    hours_before_start: float | None
    can_leave_reliability_review: bool


def _parse_start_time(value: str | None) -> tuple[int, int] | None:
    if not value:
        return None
    parts = value.strip().split(":")
    if len(parts) < 2:
        return None
    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        return None
    return hours, minutes


def effective_start(job: Job) -> datetime | None:
    """First scheduled date, with its time of day replaced by ``start_time``.

    A missing or malformed ``start_time`` keeps the date's own time component.
    """
    if not job.dates:
        return None
    start = job.dates[0]
    hhmm = _parse_start_time(job.start_time)
    if hhmm is None:
        if job.start_time:
            logger.warning("Ignoring malformed start_time on job %s", job.id)
        return start
    return start.replace(hour=hhmm[0], minute=hhmm[1], second=0, microsecond=0)


def hours_before_start(job: Job) -> float | None:
    """Hours between cancellation and start. Negative if cancelled after start."""
    start = effective_start(job)
    if start is None or job.cancelled_at is None:
        return None
    return (start - job.cancelled_at).total_seconds() / _SECONDS_PER_HOUR


def is_late_cancellation(job: Job) -> bool:
    if not job.dates or job.cancelled_at is None:
        return False
    if not job.was_accepted_or_confirmed_before_cancellation:
        return False
    hours = hours_before_start(job)
    return hours is not None and hours < LATE_CANCELLATION_WINDOW_HOURS


def can_leave_reliability_review(job: Job, user_id: str | None) -> bool:
    if job.status != JobStatus.cancelled:
        return False
    if not is_late_cancellation(job):
        return False
    return is_job_participant(job, user_id)


def get_hours_until_start(job: Job, now: datetime) -> float:
    """Hours from *now* until start, never negative. Zero when unscheduled."""
    start = effective_start(job)
    if start is None:
        return 0.0
    return max(0.0, (start - as_utc(now)).total_seconds() / _SECONDS_PER_HOUR)


def will_be_late_cancellation(job: Job, now: datetime) -> bool:
    return (
        get_hours_until_start(job, now) < LATE_CANCELLATION_WINDOW_HOURS
        and job.status in PROSPECTIVE_LATE_STATUSES
    )


def cancellation_summary(job: Job, user_id: str | None, now: datetime) -> CancellationEligibility:
    return CancellationEligibility(
        hours_until_start=get_hours_until_start(job, now),
        will_be_late_cancellation=will_be_late_cancellation(job, now),
        is_late_cancellation=is_late_cancellation(job),
        hours_before_start=hours_before_start(job),
        can_leave_reliability_review=can_leave_reliability_review(job, user_id),
    )
