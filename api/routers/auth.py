"""Session and onboarding endpoints."""

from fastapi import APIRouter, Depends

from api.auth import verify_api_key
from api.dependencies import get_auth_store, get_onboarding_store
from services.exceptions import AuthenticationError
from services.models import OnboardingResponse, SignInRequest
from stores import AuthStore, OnboardingStore
from stores.auth_store import AuthState

router = APIRouter(prefix="/auth", dependencies=[Depends(verify_api_key)])


def _user_id(auth: AuthStore) -> str:
    user_id = auth.state.user_id
    if not auth.is_authenticated or not user_id:
        raise AuthenticationError()
    return user_id


@router.get("", response_model=AuthState)
async def get_session(auth: AuthStore = Depends(get_auth_store)):
    """Current session state (loading, authenticated, unauthenticated or error)."""
    return auth.state


@router.post("/refresh", response_model=AuthState)
async def refresh_session(auth: AuthStore = Depends(get_auth_store)):
    """Retry the session check."""
    return auth.refresh()


@router.post("/sign-in", response_model=AuthState)
async def sign_in(body: SignInRequest, auth: AuthStore = Depends(get_auth_store)):
    return auth.sign_in(body.email, body.password)


@router.post("/sign-out", response_model=AuthState)
async def sign_out(auth: AuthStore = Depends(get_auth_store)):
    return auth.sign_out()


@router.get("/onboarding", response_model=OnboardingResponse)
async def get_onboarding(
    auth: AuthStore = Depends(get_auth_store),
    onboarding: OnboardingStore = Depends(get_onboarding_store),
):
    user_id = _user_id(auth)
    return OnboardingResponse(user_id=user_id, completed=onboarding.is_completed(user_id))


@router.post("/onboarding/complete", response_model=OnboardingResponse)
async def complete_onboarding(
    auth: AuthStore = Depends(get_auth_store),
    onboarding: OnboardingStore = Depends(get_onboarding_store),
):
    user_id = _user_id(auth)
    onboarding.complete(user_id)
    return OnboardingResponse(user_id=user_id, completed=True)


@router.post("/onboarding/reset", response_model=OnboardingResponse)
async def reset_onboarding(
    auth: AuthStore = Depends(get_auth_store),
    onboarding: OnboardingStore = Depends(get_onboarding_store),
):
    user_id = _user_id(auth)
    onboarding.reset(user_id)
    return OnboardingResponse(user_id=user_id, completed=False)
