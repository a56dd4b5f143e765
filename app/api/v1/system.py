"""System information endpoints."""

from typing import get_args

from fastapi import APIRouter, Depends

from app.api.v1.auth import get_current_user
from app.core.config import get_settings
from app.schemas.analysis import ExportFormat
from app.schemas.issues import BULK_UPDATE_MAX_IDS
from app.schemas.system import SystemLimitsResponse
from app.services.issues import DEFAULT_LIST_LIMIT, MAX_LIST_LIMIT

router = APIRouter()


@router.get(
    "/limits",
    response_model=SystemLimitsResponse,
    dependencies=[Depends(get_current_user)],
)
def get_limits() -> SystemLimitsResponse:
    """Content, export, bulk and paging limits plus the reasoning model and deadline."""
    settings = get_settings()
    return SystemLimitsResponse(
        max_content_bytes=settings.ANALYSIS_MAX_CONTENT_BYTES,
        export_formats=list(get_args(ExportFormat)),
        bulk_update_max_ids=BULK_UPDATE_MAX_IDS,
        issue_list_default_limit=DEFAULT_LIST_LIMIT,
        issue_list_max_limit=MAX_LIST_LIMIT,
        reasoning_model=settings.OLLAMA_MODEL,
        reasoning_timeout_seconds=settings.OLLAMA_REQUEST_TIMEOUT_SEC,
    )
