"""Pydantic schemas for the analysis endpoints: start request, session/issue responses, export, aggregates."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

AnalysisStatus = Literal["pending", "processing", "completed", "failed"]

# Export formats offered by GET /analysis/{session_id}/export.
ExportFormat = Literal["json"]


class SeverityAggregate(BaseModel):
    """Per-severity counts and the overall 0-10 score for one list of findings."""

    counts: dict[str, int] = Field(
        ...,
        description="Number of findings per severity (critical, high, medium, low).",
    )
    total: int = Field(..., ge=0, description="Sum of all severity counts.")
    overall_score: float = Field(
        ...,
        ge=0,
        le=10,
        description="10 minus weighted severity penalty, clamped to [0, 10]. Higher is better.",
    )


class StartAnalysisRequest(BaseModel):
    """Request body for POST /api/v1/analysis/analyze."""

    project_id: UUID = Field(..., description="Project to analyze (must be owned by the caller).")


class SecurityIssueResponse(BaseModel):
    """Persisted security issue as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    analysis_session_id: str
    severity: str
    type: str
    category: str
    file_path: str
    line_number: int | None = None
    code_snippet: str | None = None
    description: str
    recommendation: str
    confidence_score: float | None = None
    false_positive: bool
    resolved: bool
    created_at: datetime


class AnalysisSessionResponse(BaseModel):
    """Persisted analysis session without its findings."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    status: AnalysisStatus
    overall_score: float | None = None
    total_issues: int
    critical_issues: int
    high_issues: int
    medium_issues: int
    low_issues: int
    processing_time_ms: int | None = None
    model_identifier: str | None = None
    created_at: datetime
    completed_at: datetime | None = None


class AnalysisResultResponse(AnalysisSessionResponse):
    """Analysis session together with the security issues persisted for it."""

    security_issues: list[SecurityIssueResponse] = Field(default_factory=list)


class AnalysisExportResponse(BaseModel):
    """Export payload for GET /api/v1/analysis/{session_id}/export."""

    analysis_session: AnalysisSessionResponse
    project_name: str | None = None
    security_issues: list[SecurityIssueResponse] = Field(default_factory=list)
    exported_at: datetime
