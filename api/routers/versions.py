"""Saved résumés and version history."""

from fastapi import APIRouter, Depends

from api.auth import get_current_profile, verify_api_key
from api.dependencies import get_app_data_store, get_version_service
from flow_router import safe_step
from services import VersionService
from services.models import (
    CreateResumeRequest,
    ResumeRecord,
    ResumeVersion,
    SaveDraftRequest,
    StepResponse,
    SubscriptionProfile,
)
from stores import AppDataStore

router = APIRouter(prefix="/resumes", dependencies=[Depends(verify_api_key)])


@router.get("", response_model=list[ResumeRecord])
async def list_resumes(
    svc: VersionService = Depends(get_version_service),
    profile: SubscriptionProfile | None = Depends(get_current_profile),
):
    return svc.list_resumes(profile)


@router.post("", response_model=ResumeRecord, status_code=201)
async def create_resume(
    body: CreateResumeRequest,
    svc: VersionService = Depends(get_version_service),
    profile: SubscriptionProfile | None = Depends(get_current_profile),
):
    """Create an empty résumé. Free plans are limited to one."""
    return svc.create_resume(profile, body.title)


@router.post("/drafts", response_model=ResumeVersion, status_code=201)
async def save_draft(
    body: SaveDraftRequest,
    store: AppDataStore = Depends(get_app_data_store),
    svc: VersionService = Depends(get_version_service),
    profile: SubscriptionProfile | None = Depends(get_current_profile),
):
    """Save the builder's current inputs, outputs and settings as a version."""
    return svc.save_draft(
        profile,
        store.inputs,
        store.outputs,
        store.settings,
        title=body.title,
        resume_id=body.resume_id,
    )


@router.get("/{resume_id}/versions", response_model=list[ResumeVersion])
async def list_versions(
    resume_id: str,
    svc: VersionService = Depends(get_version_service),
    profile: SubscriptionProfile | None = Depends(get_current_profile),
):
    """Saved versions, newest first (Pro)."""
    return svc.list_versions(profile, resume_id)


@router.post("/versions/{version_id}/restore", response_model=StepResponse)
async def restore_version(
    version_id: str,
    store: AppDataStore = Depends(get_app_data_store),
    svc: VersionService = Depends(get_version_service),
    profile: SubscriptionProfile | None = Depends(get_current_profile),
):
    """Load a saved version into the builder (Pro)."""
    version = svc.restore_version(profile, version_id)
    first_incomplete = store.load_toolkit(version.to_toolkit_record())
    return StepResponse(step=first_incomplete or safe_step(None), first_incomplete=first_incomplete)
