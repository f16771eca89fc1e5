"""Entitlements: access decisions derived from a subscription profile.

Pure functions. A missing profile is treated as a free user, and unknown
feature keys are denied.
"""

from datetime import datetime, timezone

from services.exceptions import SubscriptionRequiredError
from services.models import FeatureLimits, Plan, PlanInfo, SubscriptionProfile

FREE_FEATURES = frozenset({"basic_resume", "ai_optimization", "ats_check"})

PRO_FEATURES = frozenset(
    {
        "unlimited_resumes",
        "version_history",
        "interview_toolkit",
        "export_formats",
        "priority_support",
    }
)

INACTIVE_STATUSES = frozenset({"canceled", "past_due"})


def _as_utc(moment: datetime) -> datetime:
    # Naive timestamps from the backend are UTC.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def is_pro(profile: SubscriptionProfile | None, now: datetime | None = None) -> bool:
    """Whether a profile has an active Pro subscription.

    Requires plan "pro", a status other than canceled/past_due, and a
    current period that has not ended (or no period end at all).
    """
    if profile is None or profile.plan != Plan.PRO:
        return False
    if profile.sub_status in INACTIVE_STATUSES:
        return False
    if profile.current_period_end is None:
        return True

    now = _as_utc(now or datetime.now(timezone.utc))
    return _as_utc(profile.current_period_end) > now


def can_access(feature: str, profile: SubscriptionProfile | None) -> bool:
    """Whether the profile may use a feature."""
    if feature in FREE_FEATURES:
        return True
    if feature in PRO_FEATURES:
        return is_pro(profile)
    return False


def require_access(feature: str, profile: SubscriptionProfile | None) -> None:
    """Raise unless the profile may use a feature.

    Raises:
        SubscriptionRequiredError: If access is denied.
    """
    if not can_access(feature, profile):
        raise SubscriptionRequiredError(feature)


def get_feature_limits(profile: SubscriptionProfile | None) -> FeatureLimits:
    pro = is_pro(profile)
    return FeatureLimits(
        max_resumes=None if pro else 1,
        max_toolkits=None if pro else 3,
        has_version_history=pro,
        has_interview_toolkit=pro,
        has_advanced_exports=pro,
        has_priority_support=pro,
    )


def get_plan_info(profile: SubscriptionProfile | None) -> PlanInfo:
    pro = is_pro(profile)
    return PlanInfo(
        plan_name="Pro" if pro else "Free",
        display_name="Resume Builder Pro" if pro else "Free Plan",
        billing="$20/month" if pro else "Free",
        is_active=pro,
        needs_upgrade=not pro,
    )
