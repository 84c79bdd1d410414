"""Tests for return-URL sanitization and trade discovery slugs."""

import pytest

from tradehub.trades import (
    TRADE_CATEGORIES,
    create_trade_suburb_slug,
    format_suburb_for_display,
    is_uuid,
    parse_trade_suburb_slug,
)
from tradehub.urls import build_login_url, sanitize_return_url, verification_gate_url


class TestSanitizeReturnUrl:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("/jobs/123", "/jobs/123"),
            ("/jobs?tab=open#top", "/jobs?tab=open#top"),
            ("  /profile ", "/profile"),
        ],
    )
    def test_same_site_paths_pass(self, url, expected):
        assert sanitize_return_url(url) == expected

    @pytest.mark.parametrize(
        "url",
        [
            None,
            "",
            "https://evil.com",
            "//evil.com",
            "/%2F%2Fevil.com",
            "%2F%2Fevil.com",
            "/login@evil.com",
            "/\\evil.com",
            "javascript:alert(1)",
            "/redirect?to=javascript:alert(1)",
            "/x?next=data:text/html,hi",
            "relative/path",
            "/preview/webcontainer-api.io",
        ],
    )
    def test_unsafe_urls_fall_back(self, url):
        assert sanitize_return_url(url) == "/dashboard"

    def test_custom_fallback(self):
        assert sanitize_return_url("//evil.com", fallback="/") == "/"

    def test_login_url(self):
        assert build_login_url(None) == "/login"
        assert build_login_url("/jobs/1") == "/login?returnUrl=%2Fjobs%2F1"

    def test_verification_gate_url(self):
        assert verification_gate_url("/jobs/new") == "/verify-business?returnUrl=%2Fjobs%2Fnew"
        assert verification_gate_url("//evil.com") == "/verify-business?returnUrl=%2Fdashboard"


class TestTradeSlugs:
    def test_create(self):
        assert create_trade_suburb_slug("Painting & Decorating", "Surry Hills") == (
            "painting-decorating-surry-hills"
        )

    def test_parse_round_trip(self):
        assert parse_trade_suburb_slug("plumbing-bondi-beach") == {
            "trade": "Plumbing",
            "suburb": "Bondi Beach",
        }

    def test_multi_word_trade(self):
        assert parse_trade_suburb_slug("hvac-air-conditioning-parramatta") == {
            "trade": "HVAC / Air Conditioning",
            "suburb": "Parramatta",
        }

    @pytest.mark.parametrize("slug", ["plumbing", "astrology-bondi", ""])
    def test_unparseable(self, slug):
        assert parse_trade_suburb_slug(slug) is None

    def test_every_trade_round_trips(self):
        for trade in TRADE_CATEGORIES:
            parsed = parse_trade_suburb_slug(create_trade_suburb_slug(trade, "Newtown"))
            assert parsed == {"trade": trade, "suburb": "Newtown"}

    def test_display_suburb(self):
        assert format_suburb_for_display("st kilda east") == "St Kilda East"

    def test_is_uuid(self):
        assert is_uuid("123e4567-e89b-12d3-a456-426614174000")
        assert not is_uuid("plumbing-bondi")
