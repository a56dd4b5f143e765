"""Pydantic schemas for security issue listing, lookup, bulk update, and statistics."""

from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from app.schemas.analysis import SecurityIssueResponse

BULK_UPDATE_MAX_IDS = 100


class SecurityIssueWithContext(SecurityIssueResponse):
    """Security issue plus the project (and optionally session status) it belongs to."""

    project_id: str | None = None
    project_name: str | None = None
    session_status: str | None = None


class IssueBulkUpdateRequest(BaseModel):
    """Request body for PATCH /api/v1/issues/bulk."""

    issue_ids: list[UUID] = Field(
        ...,
        min_length=1,
        max_length=BULK_UPDATE_MAX_IDS,
        description="Issues to update; all must be owned by the caller.",
    )
    resolved: bool | None = Field(default=None, description="New value for resolved, if set.")
    false_positive: bool | None = Field(
        default=None,
        description="New value for false_positive, if set.",
    )

    @model_validator(mode="after")
    def require_update_field(self) -> "IssueBulkUpdateRequest":
        if self.resolved is None and self.false_positive is None:
            raise ValueError(
                "At least one update field (resolved or false_positive) must be provided"
            )
        return self


class IssueBulkUpdateResponse(BaseModel):
    """Response for PATCH /api/v1/issues/bulk."""

    updated_count: int = Field(..., ge=0)
    issues: list[SecurityIssueResponse] = Field(default_factory=list)


class IssueStatusSummary(BaseModel):
    """Issue counts by triage status; false_positive takes precedence over resolved."""

    open: int = 0
    resolved: int = 0
    false_positive: int = 0


class IssueTypeCount(BaseModel):
    type: str
    count: int


class IssueStatsResponse(BaseModel):
    """Response for GET /api/v1/issues/stats (all issues visible to the caller)."""

    total_issues: int = Field(..., ge=0)
    severity_breakdown: dict[str, int] = Field(default_factory=dict)
    status_summary: IssueStatusSummary
    top_issue_types: list[IssueTypeCount] = Field(
        default_factory=list,
        description="Up to 10 most frequent issue types, most frequent first.",
    )
