"""Analysis endpoints: run the pipeline for a project, read back a session, export it."""

import logging
from datetime import UTC, datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.core.config import get_settings
from app.core.database import get_db
from app.models import AnalysisSession, SecurityIssue
from app.schemas.analysis import (
    AnalysisExportResponse,
    AnalysisResultResponse,
    AnalysisSessionResponse,
    ExportFormat,
    SecurityIssueResponse,
    StartAnalysisRequest,
)
from app.schemas.auth import CurrentUser
from app.services.analysis import run_analysis
from app.services.analysis_store import get_session_with_issues
from app.services.ownership import NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter()


def _result_response(
    session_row: AnalysisSession,
    issues: list[SecurityIssue],
) -> AnalysisResultResponse:
    session_data = AnalysisSessionResponse.model_validate(session_row).model_dump()
    return AnalysisResultResponse(
        **session_data,
        security_issues=[SecurityIssueResponse.model_validate(i) for i in issues],
    )


@router.post("/analyze", response_model=AnalysisResultResponse, status_code=status.HTTP_201_CREATED)
async def start_analysis(
    body: StartAnalysisRequest,
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> AnalysisResultResponse:
    """
    Analyze a project's source code and return the completed session with its issues.

    The reasoning service (local LLM) is called once with a bounded timeout. If it is
    unreachable, times out, or answers with nothing usable, the analysis still
    completes with zero issues and a score of 10. Returns 404 when the project does
    not exist or belongs to another principal.
    """
    settings = get_settings()
    try:
        session_row, issues = await run_analysis(db, user.id, str(body.project_id), settings)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Analysis persistence failed", extra={"project_id": str(body.project_id)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error performing analysis",
        ) from e
    return _result_response(session_row, issues)


@router.get("/{session_id}", response_model=AnalysisResultResponse)
def get_analysis(
    session_id: UUID,
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> AnalysisResultResponse:
    """Return a stored analysis session and its issues exactly as persisted."""
    try:
        session_row, _project, issues = get_session_with_issues(db, user.id, str(session_id))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
    return _result_response(session_row, issues)


@router.get("/{session_id}/export", response_model=AnalysisExportResponse)
def export_analysis(
    session_id: UUID,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
    export_format: Annotated[ExportFormat, Query(alias="format")] = "json",
) -> AnalysisExportResponse:
    """
    Export a session, its issues and the project name as one JSON attachment.

    Only format=json is supported; any other value is rejected with 422.
    """
    try:
        session_row, project, issues = get_session_with_issues(db, user.id, str(session_id))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e

    response.headers["Content-Disposition"] = (
        f'attachment; filename="analysis_{session_row.id}.{export_format}"'
    )
    return AnalysisExportResponse(
        analysis_session=AnalysisSessionResponse.model_validate(session_row),
        project_name=project.name,
        security_issues=[SecurityIssueResponse.model_validate(i) for i in issues],
        exported_at=datetime.now(UTC),
    )
