"""Security issue endpoints: list/filter, statistics, detail, resolve and false-positive toggles, bulk update."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.core.database import get_db
from app.schemas.analysis import SecurityIssueResponse
from app.schemas.auth import CurrentUser
from app.schemas.findings import SeverityLevel
from app.schemas.issues import (
    IssueBulkUpdateRequest,
    IssueBulkUpdateResponse,
    IssueStatsResponse,
    SecurityIssueWithContext,
)
from app.services.issues import (
    DEFAULT_LIST_LIMIT,
    MAX_LIST_LIMIT,
    bulk_update_issues,
    issue_stats,
    list_issues,
    mark_false_positive,
    resolve_issue,
)
from app.services.ownership import NotFoundError, get_owned_issue

router = APIRouter()


def _not_found(e: NotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.get("", response_model=list[SecurityIssueWithContext])
def get_issues(
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
    severity: SeverityLevel | None = None,
    resolved: bool | None = None,
    false_positive: bool | None = None,
    issue_type: Annotated[str | None, Query(alias="type", max_length=255)] = None,
    category: Annotated[str | None, Query(max_length=255)] = None,
    project_id: UUID | None = None,
    analysis_session_id: UUID | None = None,
    limit: Annotated[int, Query(ge=1, le=MAX_LIST_LIMIT)] = DEFAULT_LIST_LIMIT,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[SecurityIssueWithContext]:
    """List issues across all of the caller's projects, newest first, with optional filters."""
    rows = list_issues(
        db,
        user.id,
        severity=severity,
        resolved=resolved,
        false_positive=false_positive,
        issue_type=issue_type,
        category=category,
        project_id=str(project_id) if project_id else None,
        analysis_session_id=str(analysis_session_id) if analysis_session_id else None,
        limit=limit,
        offset=offset,
    )
    return [
        SecurityIssueWithContext(
            **SecurityIssueResponse.model_validate(issue).model_dump(),
            project_id=pid,
            project_name=pname,
        )
        for issue, pid, pname in rows
    ]


@router.get("/stats", response_model=IssueStatsResponse)
def get_issue_stats(
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> IssueStatsResponse:
    """Totals, severity breakdown, open/resolved/false-positive summary, and top 10 issue types."""
    return issue_stats(db, user.id)


@router.patch("/bulk", response_model=IssueBulkUpdateResponse)
def patch_issues_bulk(
    body: IssueBulkUpdateRequest,
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> IssueBulkUpdateResponse:
    """Set resolved and/or false_positive on up to 100 issues. All ids must be owned by the caller."""
    try:
        issues = bulk_update_issues(
            db,
            user.id,
            [str(i) for i in body.issue_ids],
            resolved=body.resolved,
            false_positive=body.false_positive,
        )
    except NotFoundError as e:
        raise _not_found(e) from e
    return IssueBulkUpdateResponse(
        updated_count=len(issues),
        issues=[SecurityIssueResponse.model_validate(i) for i in issues],
    )


@router.get("/{issue_id}", response_model=SecurityIssueWithContext)
def get_issue(
    issue_id: UUID,
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> SecurityIssueWithContext:
    try:
        issue, session_row, project = get_owned_issue(db, user.id, str(issue_id))
    except NotFoundError as e:
        raise _not_found(e) from e
    return SecurityIssueWithContext(
        **SecurityIssueResponse.model_validate(issue).model_dump(),
        project_id=project.id,
        project_name=project.name,
        session_status=session_row.status,
    )


@router.patch("/{issue_id}/resolve", response_model=SecurityIssueResponse)
def patch_resolve_issue(
    issue_id: UUID,
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> SecurityIssueResponse:
    """Mark an issue resolved. Idempotent: resolving an already resolved issue returns 200."""
    try:
        issue = resolve_issue(db, user.id, str(issue_id))
    except NotFoundError as e:
        raise _not_found(e) from e
    return SecurityIssueResponse.model_validate(issue)


@router.patch("/{issue_id}/false-positive", response_model=SecurityIssueResponse)
def patch_false_positive(
    issue_id: UUID,
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> SecurityIssueResponse:
    """Mark an issue as a false positive. Idempotent."""
    try:
        issue = mark_false_positive(db, user.id, str(issue_id))
    except NotFoundError as e:
        raise _not_found(e) from e
    return SecurityIssueResponse.model_validate(issue)
