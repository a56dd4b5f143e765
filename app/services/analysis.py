"""Analysis orchestrator: ownership check, reasoning call, extraction, scoring, persistence.

A failed reasoning call is absorbed and recorded as an analysis with zero findings, so
the caller always gets a completed session. Cancellation of the reasoning call is not
absorbed: nothing is written in that case.
"""

import logging
import time
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from app.models import AnalysisSession, SecurityIssue
from app.models.base import utcnow
from app.schemas.findings import FindingCandidate
from app.services.analysis_store import persist_analysis
from app.services.extractor import extract_findings
from app.services.ownership import get_owned_project
from app.services.reasoning import ReasoningServiceError, assess
from app.services.scoring import aggregate

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE_SCORE = 0.8
FALLBACK_FILE_NAME = "main.js"


def fallback_file_path(project_name: str) -> str:
    return f"{project_name}/{FALLBACK_FILE_NAME}"


def apply_finding_defaults(
    findings: list[FindingCandidate],
    project_name: str,
) -> list[FindingCandidate]:
    """Fill a synthesized file path when blank and the default confidence when absent."""
    out: list[FindingCandidate] = []
    for f in findings:
        updates: dict[str, object] = {}
        if not f.file_path:
            updates["file_path"] = fallback_file_path(project_name)
        if f.confidence_score is None:
            updates["confidence_score"] = DEFAULT_CONFIDENCE_SCORE
        out.append(f.model_copy(update=updates) if updates else f)
    return out


async def _raw_assessment(content: str, project_name: str, project_id: str, settings: "Settings") -> str:
    """Call the reasoning service; a ReasoningServiceError degrades to an empty answer."""
    try:
        return await assess(content, project_name, settings)
    except ReasoningServiceError as e:
        logger.warning(
            "Reasoning service degraded; analysis continues with zero findings",
            extra={"project_id": project_id, "reason": e.message},
        )
        return ""


async def run_analysis(
    db: Session,
    principal_id: int,
    project_id: str,
    settings: "Settings",
) -> tuple[AnalysisSession, list[SecurityIssue]]:
    """
    Run the full pipeline for one project owned by principal_id.

    Raises ownership.NotFoundError when the project is absent or owned by someone else.
    Returns the completed session and the issues persisted for it.
    """
    project = get_owned_project(db, principal_id, project_id)
    content = project.content
    started_at = utcnow()
    start = time.perf_counter()

    raw_text = await _raw_assessment(content, project.name, project.id, settings)
    findings = extract_findings(raw_text) if raw_text else []
    findings = apply_finding_defaults(findings, project.name)
    summary = aggregate(findings)

    processing_time_ms = int((time.perf_counter() - start) * 1000)
    session_row, issues = persist_analysis(
        db,
        project,
        findings,
        summary,
        started_at=started_at,
        processing_time_ms=processing_time_ms,
        model_identifier=settings.OLLAMA_MODEL,
    )
    logger.info(
        "Analysis completed",
        extra={
            "session_id": session_row.id,
            "project_id": project.id,
            "total_issues": session_row.total_issues,
            "overall_score": session_row.overall_score,
            "processing_time_ms": processing_time_ms,
        },
    )
    return session_row, issues
