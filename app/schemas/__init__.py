"""Pydantic request/response schemas."""

from app.schemas.analysis import (
    AnalysisExportResponse,
    AnalysisResultResponse,
    AnalysisSessionResponse,
    SecurityIssueResponse,
    SeverityAggregate,
    StartAnalysisRequest,
)
from app.schemas.auth import CurrentUser, LoginRequest, TokenResponse
from app.schemas.findings import FindingCandidate, SeverityLevel
from app.schemas.health import HealthResponse
from app.schemas.issues import (
    IssueBulkUpdateRequest,
    IssueBulkUpdateResponse,
    IssueStatsResponse,
    SecurityIssueWithContext,
)
from app.schemas.project import (
    ProjectCreateRequest,
    ProjectDetailResponse,
    ProjectResponse,
    ProjectsListResponse,
    ProjectUpdateRequest,
)
from app.schemas.system import SystemLimitsResponse

__all__ = [
    "AnalysisExportResponse",
    "AnalysisResultResponse",
    "AnalysisSessionResponse",
    "CurrentUser",
    "FindingCandidate",
    "HealthResponse",
    "IssueBulkUpdateRequest",
    "IssueBulkUpdateResponse",
    "IssueStatsResponse",
    "LoginRequest",
    "ProjectCreateRequest",
    "ProjectDetailResponse",
    "ProjectResponse",
    "ProjectsListResponse",
    "ProjectUpdateRequest",
    "SecurityIssueResponse",
    "SecurityIssueWithContext",
    "SeverityAggregate",
    "SeverityLevel",
    "StartAnalysisRequest",
    "SystemLimitsResponse",
    "TokenResponse",
]
