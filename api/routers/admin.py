"""Admin endpoints. The backend decides who is an admin."""

from fastapi import APIRouter, Depends, HTTPException, Query

from api.auth import verify_api_key
from api.dependencies import get_admin_service
from services import AdminService
from services.models import AdminAnalyticsResponse, AdminToolkit, AdminUser

router = APIRouter(prefix="/admin", dependencies=[Depends(verify_api_key)])


def require_admin(svc: AdminService = Depends(get_admin_service)) -> AdminService:
    if not svc.is_admin():
        raise HTTPException(status_code=403, detail="Admin access required")
    return svc


@router.get("/me")
async def admin_me(svc: AdminService = Depends(get_admin_service)):
    return {"is_admin": svc.is_admin()}


@router.get("/analytics", response_model=AdminAnalyticsResponse)
async def analytics(
    days: int = Query(30, ge=1, le=365),
    svc: AdminService = Depends(require_admin),
):
    """Totals and per-day series for the last N days."""
    return svc.get_analytics_summary(days=days)


@router.get("/users", response_model=list[AdminUser])
async def users(
    search: str = Query("", description="Match on email"),
    plan: str = Query("", description="Filter by plan (free/pro)"),
    limit: int = Query(25, ge=1, le=100),
    offset: int = Query(0, ge=0),
    svc: AdminService = Depends(require_admin),
):
    return svc.get_users_list(search=search, plan_filter=plan, limit=limit, offset=offset)


@router.get("/toolkits", response_model=list[AdminToolkit])
async def toolkits(
    search: str = Query(""),
    limit: int = Query(25, ge=1, le=100),
    offset: int = Query(0, ge=0),
    svc: AdminService = Depends(require_admin),
):
    return svc.get_toolkits_list(search=search, limit=limit, offset=offset)
