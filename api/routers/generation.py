"""Generation endpoints - start a run and poll its progress."""

import logging

from fastapi import APIRouter, Depends

from api.auth import get_current_profile, verify_api_key
from api.dependencies import get_app_data_store, get_config, get_task_manager, get_usage_tracker
from config_loader import get_usage_limits
from entitlements import is_pro
from services.exceptions import GenerationInProgressError, UsageLimitError, ValidationError
from services.models import (
    GenerationStateResponse,
    SubscriptionProfile,
    TaskCreatedResponse,
    TaskStatus,
    UsageFeature,
)
from services.task_manager import TaskManager
from stores import AppDataStore, UsageTracker

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(verify_api_key)])


@router.post("/generate", response_model=TaskCreatedResponse, status_code=202)
async def generate(
    store: AppDataStore = Depends(get_app_data_store),
    tracker: UsageTracker = Depends(get_usage_tracker),
    tm: TaskManager = Depends(get_task_manager),
    profile: SubscriptionProfile | None = Depends(get_current_profile),
    config: dict = Depends(get_config),
):
    """Start a résumé generation (async - poll /generation or /tasks/{task_id})."""
    if store.status.loading:
        raise GenerationInProgressError()
    if not store.is_ready_to_generate():
        raise ValidationError(
            f"Resume and job description must each be at least {store.min_input_chars} characters",
            field="inputs",
        )

    feature = UsageFeature.RESUME_GENERATIONS
    if not is_pro(profile):
        limit = get_usage_limits(config).get(feature.value)
        if limit is not None and tracker.has_reached_limit(feature, limit):
            raise UsageLimitError(feature.value, limit)
    token = store.begin_generation()
    count = tracker.increment_usage(feature)
    logger.info("Generation requested (%d this month)", count)

    task_id = await tm.submit(store.generate_resume, token)
    return TaskCreatedResponse(task_id=task_id, status=TaskStatus.RUNNING)


@router.get("/generation", response_model=GenerationStateResponse)
async def get_generation_state(store: AppDataStore = Depends(get_app_data_store)):
    """Loading flag, last generation time and per-phase progress."""
    return GenerationStateResponse(
        status=store.status,
        generation_progress=store.generation_progress,
    )
