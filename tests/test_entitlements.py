"""Tests for the entitlements resolver."""

from datetime import datetime, timedelta, timezone

import pytest

from entitlements import (
    FREE_FEATURES,
    PRO_FEATURES,
    can_access,
    get_feature_limits,
    get_plan_info,
    is_pro,
    require_access,
)
from services.exceptions import SubscriptionRequiredError
from services.models import Plan, SubscriptionProfile

NOW = datetime(2026, 10, 19, tzinfo=timezone.utc)


def _profile(**kwargs):
    return SubscriptionProfile(**{"plan": Plan.PRO, "sub_status": "active", **kwargs})


class TestIsPro:

    def test_missing_profile_is_free(self):
        assert not is_pro(None)

    def test_free_plan(self, free_profile):
        assert not is_pro(free_profile)

    def test_active_pro(self):
        assert is_pro(_profile(current_period_end=NOW + timedelta(days=10)), now=NOW)

    def test_pro_without_period_end(self):
        assert is_pro(_profile(current_period_end=None), now=NOW)

    @pytest.mark.parametrize("status", ["canceled", "past_due"])
    def test_inactive_status(self, status):
        assert not is_pro(_profile(sub_status=status), now=NOW)

    def test_expired_period(self):
        assert not is_pro(_profile(current_period_end=NOW - timedelta(seconds=1)), now=NOW)

    def test_naive_period_end_treated_as_utc(self):
        naive = datetime(2026, 10, 20)
        assert is_pro(_profile(current_period_end=naive), now=NOW)

    def test_trialing_counts(self):
        assert is_pro(_profile(sub_status="trialing"), now=NOW)


class TestCanAccess:

    @pytest.mark.parametrize("feature", sorted(FREE_FEATURES))
    def test_free_features_for_everyone(self, feature):
        assert can_access(feature, None)

    @pytest.mark.parametrize("feature", sorted(PRO_FEATURES))
    def test_pro_features(self, feature, pro_profile, free_profile):
        assert can_access(feature, pro_profile)
        assert not can_access(feature, free_profile)
        assert not can_access(feature, None)

    def test_unknown_feature_denied(self, pro_profile):
        assert not can_access("time_travel", pro_profile)

    def test_require_access(self, pro_profile):
        require_access("export_formats", pro_profile)
        with pytest.raises(SubscriptionRequiredError) as exc_info:
            require_access("export_formats", None)
        assert exc_info.value.feature == "export_formats"


class TestLimitsAndPlanInfo:

    def test_free_limits(self):
        limits = get_feature_limits(None)
        assert limits.max_resumes == 1
        assert limits.max_toolkits == 3
        assert not limits.has_interview_toolkit

    def test_pro_limits_unlimited(self, pro_profile):
        limits = get_feature_limits(pro_profile)
        assert limits.max_resumes is None
        assert limits.max_toolkits is None
        assert limits.has_advanced_exports

    def test_plan_info(self, pro_profile):
        assert get_plan_info(None).needs_upgrade
        info = get_plan_info(pro_profile)
        assert info.plan_name == "Pro"
        assert info.is_active
        assert not info.needs_upgrade
