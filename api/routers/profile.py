"""Profile preference endpoints."""

from fastapi import APIRouter, Depends

from api.auth import verify_api_key
from api.dependencies import get_profile_store
from services.models import ProfilePreferences, ProfileUpdateRequest
from stores import ProfileStore

router = APIRouter(dependencies=[Depends(verify_api_key)])


@router.get("/profile", response_model=ProfilePreferences)
async def get_profile(store: ProfileStore = Depends(get_profile_store)):
    """Display name, job title, north star and headline."""
    return store.profile


@router.patch("/profile", response_model=ProfilePreferences)
async def update_profile(
    body: ProfileUpdateRequest,
    store: ProfileStore = Depends(get_profile_store),
):
    return store.update_profile(body.model_dump(exclude_none=True))


@router.post("/profile/reset", response_model=ProfilePreferences)
async def reset_profile(store: ProfileStore = Depends(get_profile_store)):
    return store.reset_profile()
