"""Builder endpoints - inputs, outputs, reset and saved-toolkit loading."""

from fastapi import APIRouter, Depends, Query

from api.auth import verify_api_key
from api.dependencies import get_app_data_store
from flow_router import first_incomplete_step, safe_step
from services.models import (
    Inputs,
    InputsUpdateRequest,
    OutputsResponse,
    StepResponse,
    ToolkitRecord,
)
from stores import AppDataStore
from stores.app_data import get_word_count

router = APIRouter(dependencies=[Depends(verify_api_key)])


@router.get("/inputs", response_model=Inputs)
async def get_inputs(store: AppDataStore = Depends(get_app_data_store)):
    return store.inputs


@router.patch("/inputs", response_model=Inputs)
async def update_inputs(
    body: InputsUpdateRequest,
    store: AppDataStore = Depends(get_app_data_store),
):
    """Merge a partial update of the résumé, job description and company fields."""
    return store.update_inputs(body.model_dump(exclude_none=True))


@router.get("/outputs", response_model=OutputsResponse)
async def get_outputs(store: AppDataStore = Depends(get_app_data_store)):
    """Generated documents plus the resolved current résumé."""
    resume = store.generated_resume
    return OutputsResponse(
        outputs=store.outputs,
        generated_resume=resume,
        word_count=get_word_count(resume),
    )


@router.post("/reset", status_code=204)
async def reset_builder(store: AppDataStore = Depends(get_app_data_store)):
    """Clear inputs, outputs and progress. Settings are kept."""
    store.reset()


@router.get("/step", response_model=StepResponse)
async def get_step(
    step: str | None = Query(None, description="Requested wizard step"),
    store: AppDataStore = Depends(get_app_data_store),
):
    """Validate a ?step= value and report the first step still missing output."""
    return StepResponse(step=safe_step(step), first_incomplete=first_incomplete_step(store.outputs))


@router.post("/toolkits/load", response_model=StepResponse)
async def load_toolkit(
    record: ToolkitRecord,
    store: AppDataStore = Depends(get_app_data_store),
):
    """Restore a saved toolkit and point at the first incomplete step."""
    first_incomplete = store.load_toolkit(record)
    return StepResponse(step=first_incomplete or safe_step(None), first_incomplete=first_incomplete)
