"""Request/response schemas for the project endpoints."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.core.config import get_settings

ProjectStatus = Literal["active", "archived", "deleted"]


def _check_content_size(v: str) -> str:
    limit = get_settings().ANALYSIS_MAX_CONTENT_BYTES
    if len(v.encode("utf-8")) > limit:
        raise ValueError(f"content must not exceed {limit} bytes")
    return v


class ProjectCreateRequest(BaseModel):
    """Source content to register for analysis."""

    name: str = Field(..., min_length=1, max_length=255, description="Project name")
    content: str = Field(..., min_length=1, description="Raw source code to analyze")
    source_url: str = Field(
        default="",
        max_length=2048,
        description="Where the content came from (repository URL or local path label)",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must be non-empty")
        return v.strip()

    @field_validator("content")
    @classmethod
    def validate_content_size(cls, v: str) -> str:
        return _check_content_size(v)


class ProjectUpdateRequest(BaseModel):
    """Partial update; omitted (or null) fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    content: str | None = Field(default=None, min_length=1)
    source_url: str | None = Field(default=None, max_length=2048)
    status: ProjectStatus | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        if not v.strip():
            raise ValueError("name must be non-empty")
        return v.strip()

    @field_validator("content")
    @classmethod
    def validate_content_size(cls, v: str | None) -> str | None:
        return v if v is None else _check_content_size(v)

    @model_validator(mode="after")
    def require_a_change(self) -> "ProjectUpdateRequest":
        if not self.changes():
            raise ValueError("at least one of name, content, source_url or status is required")
        return self

    def changes(self) -> dict[str, object]:
        return self.model_dump(exclude_none=True)


class ProjectResponse(BaseModel):
    """Project metadata (content omitted)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    source_url: str
    status: str
    last_analyzed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ProjectDetailResponse(ProjectResponse):
    """Project metadata including the stored source content."""

    content: str


class ProjectsListResponse(BaseModel):
    projects: list[ProjectResponse]
