"""
tests/test_attribution.py - Unit tests for UTM source classification,
source-detail strings, and insurance bucketing.
"""

import pytest

from leadflow.db.models import InsuranceStatus, LeadSource
from leadflow.services.attribution import (
    build_source_detail,
    classify_source,
    map_insurance_status,
)


# ── classify_source ───────────────────────────────────────────────────────────

class TestClassifySource:
    @pytest.mark.parametrize("utm_source,utm_medium,expected", [
        ("FB", None, LeadSource.FACEBOOK),
        ("facebook", "cpc", LeadSource.FACEBOOK),
        (None, "Facebook", LeadSource.FACEBOOK),
        ("ig", None, LeadSource.INSTAGRAM),
        (None, "instagram", LeadSource.INSTAGRAM),
        ("Google", None, LeadSource.GOOGLE),
        ("adwords", "display", LeadSource.GOOGLE),
        ("newsletter", "PPC", LeadSource.GOOGLE),
        ("referral", None, LeadSource.REFERRAL),
        (None, "referral", LeadSource.REFERRAL),
        ("tiktok", "social", LeadSource.WEBSITE),
        (None, None, LeadSource.WEBSITE),
        ("", "  ", LeadSource.WEBSITE),
    ])
    def test_classification(self, utm_source, utm_medium, expected):
        assert classify_source(utm_source, utm_medium) == expected

    def test_facebook_wins_over_later_rules(self):
        # medium "cpc" would match google, but the facebook source is checked first
        assert classify_source("fb", "cpc") == LeadSource.FACEBOOK

    def test_instagram_source_wins_over_referral_medium(self):
        assert classify_source("instagram", "referral") == LeadSource.INSTAGRAM

    def test_always_returns_a_known_source(self):
        for src in [None, "", "x", "fb", "ig", "google", "referral"]:
            for med in [None, "", "y", "facebook", "instagram", "cpc", "referral"]:
                assert classify_source(src, med) in set(LeadSource)


# ── build_source_detail ───────────────────────────────────────────────────────

class TestBuildSourceDetail:
    def test_joins_present_utm_fields(self):
        detail = build_source_detail("fb", "cpc", "spring-promo", "Whitening")
        assert detail == "source:fb, medium:cpc, campaign:spring-promo"

    def test_skips_missing_fields(self):
        assert build_source_detail(None, "email", None, "Whitening") == "medium:email"

    def test_falls_back_to_landing_page_name(self):
        assert build_source_detail(None, None, None, "Whitening") == "Landing page: Whitening"


# ── map_insurance_status ──────────────────────────────────────────────────────

class TestMapInsuranceStatus:
    @pytest.mark.parametrize("answer,expected", [
        (None, None),
        ("", None),
        ("Yes", InsuranceStatus.HAS_INSURANCE),
        ("No", InsuranceStatus.NO_INSURANCE),
        ("no insurance", InsuranceStatus.NO_INSURANCE),
        ("Not sure", InsuranceStatus.UNKNOWN),
        ("Medicaid", InsuranceStatus.UNKNOWN),
    ])
    def test_mapping(self, answer, expected):
        assert map_insurance_status(answer) == expected
