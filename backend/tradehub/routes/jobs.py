"""Job cancellation and reliability review routes.

Endpoints here load the job row, normalize it once and leave every decision to
``tradehub.rules``.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel, Field, ValidationError

from ..auth import CurrentUser
from ..database import Database, atomic_update_job, create_review, get_job, get_reliability_review
from ..logging_config import get_logger
from ..models import Job, JobStatus, job_from_row
from ..rate_limit import limiter
from ..rules.cancellation import (
    can_leave_reliability_review,
    cancellation_summary,
    will_be_late_cancellation,
)
from ..rules.identity import is_job_participant
from ..rules.lifecycle import can_transition, cancellation_flags
from ..rules.reliability import ReliabilityReviewDraft
from ..rules.verification import (
    ActionKind,
    can_perform_action,
    verification_gate_url,
    verification_status_message,
)

logger = get_logger("tradehub.jobs")

router = APIRouter(prefix="/jobs", tags=["jobs"])


# =============================================================================
# Request Models
# =============================================================================


class CancelJobRequest(BaseModel):
    reason: str | None = Field(None, max_length=1000)


# =============================================================================
# Response Models
# =============================================================================


class CancellationSummaryResponse(BaseModel):
    job_id: str
    status: JobStatus
    hours_until_start: float
    will_be_late_cancellation: bool
    is_late_cancellation: bool
    hours_before_start: float | None = None
    can_leave_reliability_review: bool


class CancelJobResponse(CancellationSummaryResponse):
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    was_late_cancellation_warning: bool


class ReliabilityReviewResponse(BaseModel):
    id: str
    job_id: str
    recipient_id: str
    rating: float
    moderation_status: str


# =============================================================================
# Helpers
# =============================================================================


async def _load_job(db, job_id: str) -> Job:
    row = await get_job(db, job_id)
    if not row:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    try:
        return job_from_row(row)
    except ValidationError as e:
        logger.error(f"Malformed job row {job_id}: {e.error_count()} validation errors")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Job record could not be read",
        )


def _summary_fields(job: Job, user_id: str, now: datetime) -> dict:
    summary = cancellation_summary(job, user_id, now)
    return {
        "job_id": job.id,
        "status": job.status,
        "hours_until_start": summary.hours_until_start,
        "will_be_late_cancellation": summary.will_be_late_cancellation,
        "is_late_cancellation": summary.is_late_cancellation,
        "hours_before_start": summary.hours_before_start,
        "can_leave_reliability_review": summary.can_leave_reliability_review,
    }


def _review_recipient(job: Job, author_id: str) -> str | None:
    """The other side of the engagement from *author_id*."""
    if author_id == job.contractor_id:
        return job.confirmed_subcontractor_id or job.selected_subcontractor_id
    return job.contractor_id


# =============================================================================
# Routes
# =============================================================================


@router.get("/{job_id}/cancellation", response_model=CancellationSummaryResponse)
async def get_cancellation(job_id: str, user: CurrentUser, db: Database):
    """Cancellation affordances for the caller on this job."""
    job = await _load_job(db, job_id)
    return CancellationSummaryResponse(**_summary_fields(job, user.id, datetime.now(timezone.utc)))


@router.post("/{job_id}/cancel", response_model=CancelJobResponse)
@limiter.limit("10/minute")
async def cancel_job(
    request: Request,
    job_id: str,
    user: CurrentUser,
    db: Database,
    body: CancelJobRequest | None = None,
):
    """
    Cancel a job.

    Only the owning contractor or an assigned subcontractor can cancel, and
    only with a verified ABN. The accepted/confirmed state at the moment of
    cancellation is recorded for later late-cancellation checks, along with
    the optional reason the caller gives.
    """
    logger.info(f"POST /jobs/{job_id}/cancel | user={user.id}")

    job = await _load_job(db, job_id)

    if not is_job_participant(job, user.id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the job owner or assigned subcontractor can cancel",
        )

    if not can_perform_action(user, ActionKind.cancel):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "message": verification_status_message(user) or "ABN verification required",
                "verification_url": verification_gate_url(f"/jobs/{job_id}"),
            },
        )

    transition = can_transition(job.status, JobStatus.cancelled)
    if not transition.allowed:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=transition.reason)

    now = datetime.now(timezone.utc)
    was_late = will_be_late_cancellation(job, now)
    updated, error = await atomic_update_job(
        db,
        job_id,
        job.status.value,
        cancellation_flags(job, user.id, now, body.reason if body else None),
    )
    if error == "not_found":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    if error == "conflict":
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Job status changed. Please refresh and try again.",
        )

    cancelled = job_from_row(updated)
    logger.info(f"Job cancelled | id={job_id} | by={user.id} | late_warning={was_late}")
    return CancelJobResponse(
        **_summary_fields(cancelled, user.id, now),
        cancelled_at=cancelled.cancelled_at,
        cancellation_reason=cancelled.cancellation_reason,
        was_late_cancellation_warning=was_late,
    )


@router.post(
    "/{job_id}/reliability-reviews",
    response_model=ReliabilityReviewResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit("10/minute")
async def create_reliability_review(
    request: Request,
    job_id: str,
    draft: ReliabilityReviewDraft,
    user: CurrentUser,
    db: Database,
):
    """Leave a reliability review on a late-cancelled job.

    The review is addressed to the other party and held for moderation.
    """
    logger.info(f"POST /jobs/{job_id}/reliability-reviews | user={user.id}")

    job = await _load_job(db, job_id)
    if not can_leave_reliability_review(job, user.id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Reliability reviews are only available on late-cancelled jobs you took part in",
        )

    recipient_id = _review_recipient(job, user.id)
    if not recipient_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="This job has no other party to review",
        )

    if await get_reliability_review(db, job_id, user.id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="You have already left a reliability review for this job",
        )

    created = await create_review(
        db,
        {
            "job_id": job_id,
            "author_id": user.id,
            "recipient_id": recipient_id,
            "rating": draft.rating,
            "reliability_score": draft.reliability_score,
            "communication_score": draft.communication_score,
            "text": draft.text,
            "is_reliability_review": True,
            "moderation_status": "pending",
        },
    )
    if not created:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create review",
        )

    logger.info(f"Reliability review created | job={job_id} | author={user.id} | recipient={recipient_id}")
    return ReliabilityReviewResponse(
        id=created["id"],
        job_id=job_id,
        recipient_id=recipient_id,
        rating=draft.rating,
        moderation_status=created.get("moderation_status", "pending"),
    )
