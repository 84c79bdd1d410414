"""Tests for the ABN verification gate."""

from datetime import datetime, timezone

import pytest
from conftest import make_user

from tradehub.models import Job, VerificationStatus
from tradehub.rules.verification import (
    BROWSE_ACTIONS,
    COMMIT_ACTIONS,
    ActionKind,
    build_verification_update,
    can_create_job,
    can_edit_job,
    can_perform_action,
    is_valid_abn_format,
    is_verified,
    normalize_abn,
    requires_verification_for_action,
    verification_status_message,
)

DECIDED_AT = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestIsVerified:
    @pytest.mark.parametrize("raw", ["VERIFIED", "verified", "Verified", " verified "])
    def test_status_in_any_casing(self, raw):
        assert is_verified(make_user(abn_status=raw))

    def test_camel_case_status_key(self):
        assert is_verified(make_user(abnStatus="verified"))

    def test_timestamp_alone_is_enough(self):
        user = make_user(abn_status="PENDING", abnVerifiedAt="2025-01-01T00:00:00Z")
        assert is_verified(user)

    def test_flag_alone_is_enough(self):
        assert is_verified(make_user(abn_verified=True))

    def test_truthy_string_flag_does_not_count(self):
        assert not is_verified(make_user(abn_verified="yes"))

    def test_none_user(self):
        assert not is_verified(None)

    @pytest.mark.parametrize("raw", [None, "", "PENDING", "REJECTED", "garbage"])
    def test_unverified_statuses(self, raw):
        assert not is_verified(make_user(abn_status=raw))


class TestActionGate:
    def test_browse_and_commit_partition(self):
        assert BROWSE_ACTIONS.isdisjoint(COMMIT_ACTIONS)
        assert BROWSE_ACTIONS | COMMIT_ACTIONS == set(ActionKind)

    @pytest.mark.parametrize("action", ["view", "browse", "search", "message"])
    def test_browse_never_gated(self, action):
        assert not requires_verification_for_action(action)
        assert can_perform_action(make_user(), action)

    @pytest.mark.parametrize(
        "action", ["create", "publish", "apply", "confirm", "accept", "award", "edit", "cancel"]
    )
    def test_commit_requires_verification(self, action):
        assert requires_verification_for_action(action)
        assert not can_perform_action(make_user(), action)
        assert can_perform_action(make_user(abn_status="VERIFIED"), action)

    def test_unknown_action_is_gated(self):
        assert requires_verification_for_action("launch_rocket")
        assert not can_perform_action(make_user(), "launch_rocket")

    def test_action_strings_are_case_insensitive(self):
        assert not requires_verification_for_action("VIEW")

    def test_no_user_can_do_nothing(self):
        assert not can_perform_action(None, ActionKind.view)

    def test_create_job_needs_login_and_verification(self):
        assert can_create_job(make_user(abn_status="VERIFIED"))
        assert not can_create_job(make_user())
        assert not can_create_job(make_user(id=None, abn_status="VERIFIED"))

    def test_edit_job_needs_ownership(self):
        owner = make_user(abn_status="VERIFIED")
        job = Job(id="job-1", contractor_id=owner.id)
        other = Job(id="job-2", contractor_id="someone-else")
        assert can_edit_job(owner, job)
        assert not can_edit_job(owner, other)

    def test_predicates_are_idempotent(self):
        user = make_user(abn_status="pending")
        results = {can_perform_action(user, ActionKind.publish) for _ in range(5)}
        assert results == {False}


class TestStatusMessage:
    def test_verified_has_no_message(self):
        assert verification_status_message(make_user(abn_status="VERIFIED")) is None

    def test_missing_abn(self):
        assert "provide your ABN" in verification_status_message(make_user(abn="  "))

    def test_pending(self):
        msg = verification_status_message(make_user(abn="51824753556", abn_status="PENDING"))
        assert "being verified" in msg

    def test_rejected_with_reason(self):
        user = make_user(
            abn="51824753556", abn_status="REJECTED", abn_rejection_reason="Name mismatch"
        )
        assert verification_status_message(user).endswith("Name mismatch")


class TestAbnFormat:
    def test_normalize_strips_whitespace(self):
        assert normalize_abn(" 51 824 753 556 ") == "51824753556"
        assert normalize_abn(None) == ""

    @pytest.mark.parametrize("raw", ["51824753556", "51 824 753 556"])
    def test_valid(self, raw):
        assert is_valid_abn_format(raw)

    @pytest.mark.parametrize("raw", ["", "1234567890", "518247535567", "5182475355A", None])
    def test_invalid(self, raw):
        assert not is_valid_abn_format(raw)


class TestBuildVerificationUpdate:
    def test_verified_records_reviewer(self):
        update = build_verification_update(
            VerificationStatus.VERIFIED, "admin-1", None, DECIDED_AT
        )
        assert update == {
            "abn_status": "VERIFIED",
            "abn_verified_at": DECIDED_AT.isoformat(),
            "abn_verified_by": "admin-1",
            "abn_rejection_reason": None,
        }

    def test_naive_decision_time_stored_as_utc(self):
        update = build_verification_update(
            VerificationStatus.VERIFIED, "admin-1", None, DECIDED_AT.replace(tzinfo=None)
        )
        assert update["abn_verified_at"] == DECIDED_AT.isoformat()

    def test_rejected_clears_approval(self):
        update = build_verification_update(
            VerificationStatus.REJECTED, "admin-1", "ABN cancelled", DECIDED_AT
        )
        assert update["abn_status"] == "REJECTED"
        assert update["abn_rejection_reason"] == "ABN cancelled"
        assert update["abn_verified_at"] is None
        assert update["abn_verified_by"] is None

    def test_non_terminal_clears_everything(self):
        update = build_verification_update(
            VerificationStatus.PENDING, "admin-1", "ignored", DECIDED_AT
        )
        assert update == {
            "abn_status": "PENDING",
            "abn_rejection_reason": None,
            "abn_verified_at": None,
            "abn_verified_by": None,
        }
