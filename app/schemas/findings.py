"""Severity taxonomy and the schema each finding reported by the reasoning service must satisfy."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Reusable severity levels for validation and type safety across schemas.
SeverityLevel = Literal["critical", "high", "medium", "low"]

# Highest first; also the order used for counts in responses.
SEVERITY_ORDER: tuple[SeverityLevel, ...] = ("critical", "high", "medium", "low")

SEVERITY_VALUES: frozenset[str] = frozenset(SEVERITY_ORDER)

# Score penalty per finding of each severity (see app.services.scoring).
SEVERITY_WEIGHTS: dict[str, float] = {
    "critical": 3.0,
    "high": 2.0,
    "medium": 1.0,
    "low": 0.5,
}

# Finding types the reasoning service is instructed to restrict itself to.
SUPPORTED_FINDING_TYPES: tuple[str, ...] = (
    "SQL Injection",
    "XSS",
    "Path Traversal",
    "Command Injection",
    "Insecure Deserialization",
    "Broken Authentication",
    "Broken Access Control",
    "Security Misconfiguration",
    "Insecure Direct Object Reference",
    "CSRF",
)

# Example groupings offered to the model for the category field (free text when stored).
EXAMPLE_FINDING_CATEGORIES: tuple[str, ...] = (
    "Input Validation",
    "Authentication",
    "Authorization",
    "Configuration",
    "Data Protection",
)

DESCRIPTION_MIN_LENGTH = 10
RECOMMENDATION_MIN_LENGTH = 10
CODE_SNIPPET_MAX_LENGTH = 2_000
TYPE_MAX_LENGTH = 255
CATEGORY_MAX_LENGTH = 255
FILE_PATH_MAX_LENGTH = 2048


def _validate_severity(value: Any) -> str:
    """Ensure severity is one of the allowed values (case-insensitive)."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError("severity must be a non-empty string")
    normalized = value.strip().lower()
    if normalized not in SEVERITY_VALUES:
        raise ValueError(
            f"severity must be one of {sorted(SEVERITY_VALUES)}, got {value!r}"
        )
    return normalized


class FindingCandidate(BaseModel):
    """
    One vulnerability as reported by the reasoning service, after validation.

    Field aliases match the camelCase keys the model is asked to emit; unknown keys
    are ignored. file_path may be empty here; the orchestrator fills a fallback.
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    severity: SeverityLevel = Field(
        ...,
        description="Severity level: critical, high, medium, or low.",
    )
    type: str = Field(
        ...,
        min_length=1,
        max_length=TYPE_MAX_LENGTH,
        description="Vulnerability type (e.g. SQL Injection).",
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=CATEGORY_MAX_LENGTH,
        description="Grouping of the vulnerability (e.g. Input Validation).",
    )
    file_path: str = Field(
        default="",
        alias="filePath",
        max_length=FILE_PATH_MAX_LENGTH,
        description="Path of the affected file; empty when the service did not say.",
    )
    line_number: int | None = Field(
        default=None,
        alias="lineNumber",
        description="1-based line of the vulnerable code, when known.",
    )
    code_snippet: str | None = Field(
        default=None,
        alias="codeSnippet",
        description="Short excerpt of the vulnerable code.",
    )
    description: str = Field(
        ...,
        min_length=DESCRIPTION_MIN_LENGTH,
        description="What is wrong and why it is exploitable.",
    )
    recommendation: str = Field(
        ...,
        min_length=RECOMMENDATION_MIN_LENGTH,
        description="How to fix the issue.",
    )
    confidence_score: float | None = Field(
        default=None,
        alias="confidenceScore",
        ge=0,
        le=1,
        description="Model confidence in range 0.0-1.0.",
    )

    @field_validator("severity", mode="before")
    @classmethod
    def normalize_severity(cls, v: Any) -> str:
        return _validate_severity(v)

    @field_validator("file_path", mode="before")
    @classmethod
    def blank_file_path(cls, v: Any) -> Any:
        return "" if v is None else v

    # Models often emit 0, -1 or "N/A" when the line is unknown; treat those as unknown.
    @field_validator("line_number", mode="before")
    @classmethod
    def coerce_line_number(cls, v: Any) -> int | None:
        if isinstance(v, bool):
            return None
        if isinstance(v, float) and v.is_integer():
            v = int(v)
        if isinstance(v, str) and v.strip().isdigit():
            v = int(v.strip())
        if isinstance(v, int) and v > 0:
            return v
        return None

    @field_validator("code_snippet")
    @classmethod
    def truncate_code_snippet(cls, v: str | None) -> str | None:
        if not v:
            return None
        return v[:CODE_SNIPPET_MAX_LENGTH]
