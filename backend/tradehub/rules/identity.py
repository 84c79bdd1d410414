"""Identity and ownership predicates.

Role strings are never consulted here: admin access comes from the explicit
``is_admin`` flag and ownership from identifier equality.
"""

from __future__ import annotations

from ..models import Job, User


def is_admin(user: User | None) -> bool:
    return user is not None and user.is_admin


def is_logged_in(user: User | None) -> bool:
    return user is not None and bool(user.id)


def owns_job(user: User | None, job: Job | None) -> bool:
    """True iff both ids are present and the job's contractor is the user."""
    if user is None or job is None:
        return False
    if not user.id or not job.contractor_id:
        return False
    return job.contractor_id == user.id


def is_job_participant(job: Job | None, user_id: str | None) -> bool:
    """The owning contractor or the selected/confirmed subcontractor."""
    if job is None or not user_id:
        return False
    return user_id in (
        job.contractor_id,
        job.selected_subcontractor_id,
        job.confirmed_subcontractor_id,
    )
