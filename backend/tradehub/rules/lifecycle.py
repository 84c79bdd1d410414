"""Job status transitions and schedule-derived lifecycle checks."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Any

from ..models import Job, JobStatus, as_utc
from .cancellation import effective_start

VALID_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.open: frozenset(
        {JobStatus.accepted, JobStatus.cancelled, JobStatus.closed, JobStatus.pending_approval}
    ),
    JobStatus.pending_approval: frozenset({JobStatus.open, JobStatus.cancelled}),
    JobStatus.accepted: frozenset({JobStatus.confirmed, JobStatus.open, JobStatus.cancelled}),
    JobStatus.confirmed: frozenset({JobStatus.completed, JobStatus.cancelled}),
    JobStatus.completed: frozenset(),
    JobStatus.cancelled: frozenset(),
    JobStatus.closed: frozenset({JobStatus.open}),
}

TERMINAL_STATUSES = frozenset({JobStatus.completed, JobStatus.cancelled})


@dataclass(frozen=True)
class TransitionResult:
    allowed: bool
    reason: str | None = None


def is_past_start_date(job: Job, now: datetime) -> bool:
    start = effective_start(job)
    return start is not None and as_utc(now) > start


def is_past_last_date(job: Job, now: datetime) -> bool:
    """True once the last scheduled day has fully elapsed."""
    if not job.dates:
        return False
    last = job.dates[-1]
    end_of_day = datetime.combine(last.date(), time.max, tzinfo=last.tzinfo)
    return as_utc(now) > end_of_day


def is_job_expired(job: Job, now: datetime) -> bool:
    return is_past_start_date(job, now) and job.status not in TERMINAL_STATUSES


def can_transition(
    current: JobStatus,
    new: JobStatus,
    *,
    has_selected_subcontractor: bool = False,
    is_expired: bool = False,
) -> TransitionResult:
    if new not in VALID_TRANSITIONS[current]:
        return TransitionResult(
            allowed=False,
            reason=f"Cannot transition from {current.value} to {new.value}",
        )
    if new == JobStatus.accepted and not has_selected_subcontractor:
        return TransitionResult(
            allowed=False, reason="Must select a trade business before accepting"
        )
    if new == JobStatus.confirmed and not has_selected_subcontractor:
        return TransitionResult(
            allowed=False, reason="Must have a selected subcontractor to confirm hire"
        )
    if new == JobStatus.open and current == JobStatus.closed and is_expired:
        return TransitionResult(allowed=False, reason="Cannot reopen expired jobs")
    return TransitionResult(allowed=True)


def cancellation_flags(
    job: Job, cancelled_by: str, now: datetime, reason: str | None = None
) -> dict[str, Any]:
    """Columns to write when *job* is cancelled.

    The accepted/confirmed flag is captured here from the pre-cancellation
    status; the retrospective late-cancellation check reads only this flag.
    A blank reason is stored as null.
    """
    return {
        "status": JobStatus.cancelled.value,
        "cancelled_at": as_utc(now).isoformat(),
        "cancelled_by": cancelled_by,
        "cancellation_reason": (reason or "").strip() or None,
        "was_accepted_or_confirmed_before_cancellation": job.status
        in (JobStatus.accepted, JobStatus.confirmed),
    }
