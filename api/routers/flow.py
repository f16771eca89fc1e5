"""Post-auth routing endpoints."""

from fastapi import APIRouter, Depends, Request

from api.auth import verify_api_key
from api.dependencies import get_return_to_store
from flow_router import (
    FlowContext,
    ReturnToStore,
    get_authenticated_landing,
    next_after_pricing,
    next_after_sign_in,
    next_after_sign_up,
    next_from_dashboard,
)
from services.models import AuthContextRequest, FlowResponse

router = APIRouter(prefix="/flow", dependencies=[Depends(verify_api_key)])


def _context(body: AuthContextRequest, pending: ReturnToStore) -> FlowContext:
    """Build a flow context, using a captured returnTo when none is sent."""
    stored = pending.consume()
    return FlowContext(
        return_to=body.return_to or stored,
        has_profile=body.has_profile,
        has_plan=body.has_plan,
        plan=body.plan,
        onboarding_status=body.onboarding_status,
        is_new_user=body.is_new_user,
    )


@router.post("/return-to", response_model=FlowResponse | None)
async def capture_return_to(
    request: Request,
    pending: ReturnToStore = Depends(get_return_to_store),
):
    """Remember a safe ?returnTo= for after sign-in."""
    target = pending.capture(request.url.query)
    return FlowResponse(route=target) if target else None


@router.post("/sign-in", response_model=FlowResponse)
async def after_sign_in(
    body: AuthContextRequest,
    pending: ReturnToStore = Depends(get_return_to_store),
):
    return FlowResponse(route=next_after_sign_in(_context(body, pending)))


@router.post("/sign-up", response_model=FlowResponse)
async def after_sign_up(
    body: AuthContextRequest,
    pending: ReturnToStore = Depends(get_return_to_store),
):
    return FlowResponse(route=next_after_sign_up(_context(body, pending)))


@router.post("/pricing", response_model=FlowResponse)
async def after_pricing():
    return FlowResponse(route=next_after_pricing())


@router.post("/dashboard", response_model=FlowResponse)
async def from_dashboard():
    return FlowResponse(route=next_from_dashboard())


@router.post("/landing", response_model=FlowResponse)
async def authenticated_landing(body: AuthContextRequest):
    """Where an already-authenticated user lands."""
    ctx = FlowContext(
        return_to=body.return_to,
        has_profile=body.has_profile,
        has_plan=body.has_plan,
        plan=body.plan,
        onboarding_status=body.onboarding_status,
        is_new_user=body.is_new_user,
    )
    return FlowResponse(route=get_authenticated_landing(ctx))
