"""Document export endpoints."""

from fastapi import APIRouter, Depends

from api.auth import get_current_profile, verify_api_key
from api.dependencies import get_app_data_store, get_export_service
from services import ExportService
from services.models import ExportFormat, ExportRequest, ExportResponse, SubscriptionProfile
from stores import AppDataStore

router = APIRouter(dependencies=[Depends(verify_api_key)])


@router.post("/export", response_model=ExportResponse)
async def export_document(
    body: ExportRequest,
    store: AppDataStore = Depends(get_app_data_store),
    svc: ExportService = Depends(get_export_service),
    profile: SubscriptionProfile | None = Depends(get_current_profile),
):
    """Write a generated document to the export directory.

    Text formats also return the exported content. DOCX needs a Pro plan.
    """
    outputs = store.outputs
    settings = store.settings
    header_settings = {"Mode": settings.mode.value, "Voice": settings.voice.value}
    generated_at = store.status.last_generated

    path = svc.export(
        outputs,
        body.document,
        body.format,
        profile=profile,
        settings=header_settings,
        generated_at=generated_at,
    )

    content = None
    if body.format != ExportFormat.DOCX:
        content = svc.render(
            outputs, body.document, body.format, settings=header_settings, generated_at=generated_at
        )
    return ExportResponse(document=body.document, format=body.format, path=str(path), content=content)
