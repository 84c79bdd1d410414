"""Tests for boundary normalization of raw rows."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from tradehub.models import (
    PLAN_CONFIGS,
    Capability,
    Job,
    JobStatus,
    Role,
    SubscriptionPlan,
    SubscriptionStatus,
    VerificationStatus,
    get_plan_config,
    job_from_row,
    parse_role,
    user_from_row,
)


class TestUserNormalization:
    def test_snake_and_camel_rows_are_equal(self):
        snake = user_from_row(
            {
                "id": "u-1",
                "abn_status": "verified",
                "active_plan": "business_pro_20",
                "subscription_status": "active",
                "is_admin": True,
            }
        )
        camel = user_from_row(
            {
                "id": "u-1",
                "abnStatus": "VERIFIED",
                "activePlan": "BUSINESS_PRO_20",
                "subscriptionStatus": "ACTIVE",
                "isAdmin": True,
            }
        )
        assert snake == camel
        assert snake.abn_status == VerificationStatus.VERIFIED
        assert snake.active_plan == SubscriptionPlan.BUSINESS_PRO_20
        assert snake.subscription_status == SubscriptionStatus.ACTIVE

    def test_unknown_values_fall_back(self):
        user = user_from_row(
            {"id": "u-1", "role": "wizard", "abn_status": "???", "active_plan": "gold"}
        )
        assert user.role == Role.unknown
        assert user.abn_status == VerificationStatus.UNVERIFIED
        assert user.active_plan == SubscriptionPlan.NONE
        assert user.subscription_status == SubscriptionStatus.NONE

    def test_null_flags_are_false(self):
        user = user_from_row({"id": "u-1", "is_admin": None, "abn_verified": None})
        assert user.is_admin is False
        assert user.abn_verified is False

    def test_naive_timestamp_read_as_utc(self):
        user = user_from_row({"id": "u-1", "abn_verified_at": "2025-01-01T10:00:00"})
        assert user.abn_verified_at == datetime(2025, 1, 1, 10, 0, tzinfo=timezone.utc)

    def test_empty_timestamp_is_none(self):
        assert user_from_row({"id": "u-1", "suspension_ends_at": ""}).suspension_ends_at is None

    def test_extra_columns_ignored(self):
        assert user_from_row({"id": "u-1", "stripe_customer_id": "cus_1"}).id == "u-1"

    def test_snapshot_is_frozen(self):
        user = user_from_row({"id": "u-1"})
        with pytest.raises(ValidationError):
            user.is_admin = True

    def test_none_row(self):
        assert user_from_row(None) is None

    @pytest.mark.parametrize(
        "raw,expected",
        [("SUBCONTRACTOR", Role.subcontractor), ("builder", Role.unknown), (None, Role.unknown)],
    )
    def test_parse_role(self, raw, expected):
        assert parse_role(raw) == expected


class TestJobNormalization:
    def test_legacy_subcontractor_keys(self):
        job = job_from_row(
            {"id": "j-1", "selected_subcontractor": "s-1", "confirmed_subcontractor": "s-2"}
        )
        assert job.selected_subcontractor_id == "s-1"
        assert job.confirmed_subcontractor_id == "s-2"

    def test_status_casing(self):
        assert job_from_row({"id": "j-1", "status": " Confirmed "}).status == JobStatus.confirmed

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            job_from_row({"id": "j-1", "status": "archived"})

    def test_dates_keep_order_and_become_utc(self):
        job = Job.model_validate({"dates": ["2025-01-11", "2025-01-10T09:30:00"]})
        assert job.dates == [
            datetime(2025, 1, 11, tzinfo=timezone.utc),
            datetime(2025, 1, 10, 9, 30, tzinfo=timezone.utc),
        ]

    def test_null_dates(self):
        assert job_from_row({"id": "j-1", "dates": None}).dates == []


class TestPlanConfigs:
    def test_every_plan_configured(self):
        assert set(PLAN_CONFIGS) == set(SubscriptionPlan)

    def test_prices(self):
        assert get_plan_config(SubscriptionPlan.ALL_ACCESS_PRO_26).price_aud == Decimal("26")
        assert get_plan_config(SubscriptionPlan.NONE).capabilities == frozenset()

    def test_all_access_covers_everything(self):
        assert PLAN_CONFIGS[SubscriptionPlan.ALL_ACCESS_PRO_26].capabilities == set(Capability)
