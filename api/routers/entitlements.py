"""Plan and feature-access endpoints.

Without a bearer token the caller is treated as a free user.
"""

from fastapi import APIRouter, Depends

from api.auth import get_current_profile, verify_api_key
from entitlements import can_access, get_feature_limits, get_plan_info, is_pro
from services.models import EntitlementResponse, FeatureLimits, PlanInfo, SubscriptionProfile

router = APIRouter(dependencies=[Depends(verify_api_key)])


@router.get("/plan", response_model=PlanInfo)
async def get_plan(profile: SubscriptionProfile | None = Depends(get_current_profile)):
    return get_plan_info(profile)


@router.get("/limits", response_model=FeatureLimits)
async def get_limits(profile: SubscriptionProfile | None = Depends(get_current_profile)):
    return get_feature_limits(profile)


@router.get("/entitlements/{feature}", response_model=EntitlementResponse)
async def check_entitlement(
    feature: str,
    profile: SubscriptionProfile | None = Depends(get_current_profile),
):
    """Whether the caller may use a feature."""
    return EntitlementResponse(
        feature=feature,
        allowed=can_access(feature, profile),
        is_pro=is_pro(profile),
    )
