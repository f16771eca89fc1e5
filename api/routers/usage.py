"""Monthly usage endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from api.auth import verify_api_key
from api.dependencies import get_config, get_usage_tracker
from config_loader import get_usage_limits
from services.models import UsageFeature, UsageFeatureResponse, UsageStats
from stores import UsageTracker

router = APIRouter(dependencies=[Depends(verify_api_key)])


@router.get("/usage", response_model=UsageStats)
async def get_usage(tracker: UsageTracker = Depends(get_usage_tracker)):
    """This month's counts for every tracked feature."""
    return tracker.get_all_usage_stats()


@router.get("/usage/{feature}", response_model=UsageFeatureResponse)
async def get_feature_usage(
    feature: str,
    tracker: UsageTracker = Depends(get_usage_tracker),
    config: dict = Depends(get_config),
):
    """This month's count for one feature against its free-tier limit."""
    try:
        feature = UsageFeature(feature).value
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown feature: {feature}")

    limit = get_usage_limits(config).get(feature)
    used = tracker.get_current_usage(feature)
    if limit is None:
        return UsageFeatureResponse(feature=feature, used=used)
    return UsageFeatureResponse(
        feature=feature,
        used=used,
        limit=limit,
        remaining=tracker.get_remaining(feature, limit),
        reached=tracker.has_reached_limit(feature, limit),
    )


@router.post("/usage/reset", response_model=UsageStats)
async def reset_usage(tracker: UsageTracker = Depends(get_usage_tracker)):
    """Clear this month's counters."""
    tracker.reset_monthly_usage()
    return tracker.get_all_usage_stats()
