"""Pydantic schemas for the system limits endpoint."""

from pydantic import BaseModel, Field


class SystemLimitsResponse(BaseModel):
    """Limits a client must respect, read from the running configuration."""

    max_content_bytes: int = Field(description="Largest accepted project content, in UTF-8 bytes")
    export_formats: list[str] = Field(description="Formats offered by the analysis export endpoint")
    bulk_update_max_ids: int = Field(description="Most issue ids accepted by one bulk update")
    issue_list_default_limit: int
    issue_list_max_limit: int
    reasoning_model: str = Field(description="Model name sent to the reasoning service")
    reasoning_timeout_seconds: float = Field(description="Deadline for one reasoning request")
