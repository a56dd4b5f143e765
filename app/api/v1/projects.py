"""Project endpoints: register source content for analysis, list, inspect, update, delete, history."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.core.database import get_db
from app.schemas.analysis import AnalysisSessionResponse
from app.schemas.auth import CurrentUser
from app.schemas.project import (
    ProjectCreateRequest,
    ProjectDetailResponse,
    ProjectResponse,
    ProjectsListResponse,
    ProjectUpdateRequest,
)
from app.services.analysis_store import list_project_sessions
from app.services.ownership import NotFoundError, get_owned_project
from app.services.projects import (
    create_project,
    delete_project,
    list_projects,
    update_project,
)

router = APIRouter()


@router.post("", response_model=ProjectDetailResponse, status_code=status.HTTP_201_CREATED)
def post_project(
    body: ProjectCreateRequest,
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ProjectDetailResponse:
    """Create a project owned by the caller. Content is limited to ANALYSIS_MAX_CONTENT_BYTES."""
    project = create_project(
        db,
        user.id,
        name=body.name,
        content=body.content,
        source_url=body.source_url,
    )
    return ProjectDetailResponse.model_validate(project)


@router.get("", response_model=ProjectsListResponse)
def get_projects(
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ProjectsListResponse:
    projects = list_projects(db, user.id)
    return ProjectsListResponse(
        projects=[ProjectResponse.model_validate(p) for p in projects]
    )


@router.get("/{project_id}", response_model=ProjectDetailResponse)
def get_project(
    project_id: UUID,
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ProjectDetailResponse:
    try:
        project = get_owned_project(db, user.id, str(project_id))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
    return ProjectDetailResponse.model_validate(project)


@router.put("/{project_id}", response_model=ProjectDetailResponse)
def put_project(
    project_id: UUID,
    body: ProjectUpdateRequest,
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ProjectDetailResponse:
    """Update name, content, source_url and/or status. Stored analyses are not touched."""
    try:
        project = update_project(db, user.id, str(project_id), body.changes())
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
    return ProjectDetailResponse.model_validate(project)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_project(
    project_id: UUID,
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> None:
    """Delete a project and, by cascade, all of its analysis sessions and issues."""
    try:
        delete_project(db, user.id, str(project_id))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e


@router.get("/{project_id}/history", response_model=list[AnalysisSessionResponse])
def get_project_history(
    project_id: UUID,
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> list[AnalysisSessionResponse]:
    """Analysis sessions of the project, newest first, without their issues."""
    try:
        sessions = list_project_sessions(db, user.id, str(project_id))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
    return [AnalysisSessionResponse.model_validate(s) for s in sessions]
