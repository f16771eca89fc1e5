"""Generation settings endpoints."""

from fastapi import APIRouter, Depends

from api.auth import verify_api_key
from api.dependencies import get_settings_store
from services.models import Settings, SettingsUpdateRequest
from stores import SettingsStore

router = APIRouter(dependencies=[Depends(verify_api_key)])


@router.get("/settings", response_model=Settings)
async def get_settings(store: SettingsStore = Depends(get_settings_store)):
    """Current mode, voice, format and toggles."""
    return store.settings


@router.patch("/settings", response_model=Settings)
async def update_settings(
    body: SettingsUpdateRequest,
    store: SettingsStore = Depends(get_settings_store),
):
    """Merge a partial settings update."""
    return store.update_settings(body.model_dump(exclude_none=True))


@router.post("/settings/reset", response_model=Settings)
async def reset_settings(store: SettingsStore = Depends(get_settings_store)):
    """Restore the default settings."""
    return store.reset_settings()
