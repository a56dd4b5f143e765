"""Persistence of analysis sessions and their security issues, plus ownership-scoped reads."""

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import AnalysisSession, Project, SecurityIssue
from app.models.base import utcnow
from app.schemas.analysis import SeverityAggregate
from app.schemas.findings import FindingCandidate
from app.services.ownership import get_owned_project, get_owned_session
from app.services.scoring import aggregate

logger = logging.getLogger(__name__)

STATUS_COMPLETED = "completed"


def _issue_row(session_id: str, finding: FindingCandidate, position: int) -> SecurityIssue:
    return SecurityIssue(
        analysis_session_id=session_id,
        position=position,
        severity=finding.severity,
        type=finding.type,
        category=finding.category,
        file_path=finding.file_path,
        line_number=finding.line_number,
        code_snippet=finding.code_snippet,
        description=finding.description,
        recommendation=finding.recommendation,
        confidence_score=finding.confidence_score,
        false_positive=False,
        resolved=False,
    )


def _apply_summary(session_row: AnalysisSession, summary: SeverityAggregate) -> None:
    session_row.overall_score = summary.overall_score
    session_row.total_issues = summary.total
    session_row.critical_issues = summary.counts["critical"]
    session_row.high_issues = summary.counts["high"]
    session_row.medium_issues = summary.counts["medium"]
    session_row.low_issues = summary.counts["low"]


def persist_analysis(
    db: Session,
    project: Project,
    findings: list[FindingCandidate],
    summary: SeverityAggregate,
    *,
    started_at: datetime,
    processing_time_ms: int,
    model_identifier: str | None,
) -> tuple[AnalysisSession, list[SecurityIssue]]:
    """
    Write one completed session and one issue row per finding in a single transaction.

    Each issue insert runs in its own SAVEPOINT: a failing insert is logged and skipped
    without rolling back the session or the other issues. When any are skipped the
    session counts and score are recomputed from the issues actually stored, before
    commit, so the committed session always matches its findings. The project's
    last_analyzed_at/updated_at are bumped in the same transaction.
    """
    completed_at = utcnow()
    session_row = AnalysisSession(
        project_id=project.id,
        status=STATUS_COMPLETED,
        processing_time_ms=max(0, processing_time_ms),
        model_identifier=model_identifier,
        created_at=started_at,
        completed_at=completed_at,
    )
    _apply_summary(session_row, summary)
    db.add(session_row)
    db.flush()

    stored: list[SecurityIssue] = []
    for index, finding in enumerate(findings):
        try:
            with db.begin_nested():
                row = _issue_row(session_row.id, finding, index)
                db.add(row)
        except SQLAlchemyError as e:
            logger.warning(
                "Skipped security issue that could not be stored",
                extra={
                    "session_id": session_row.id,
                    "index": index,
                    "error_type": type(e).__name__,
                },
            )
            continue
        stored.append(row)

    if len(stored) != len(findings):
        _apply_summary(session_row, aggregate(stored))
        logger.info(
            "Session counts recomputed from stored issues",
            extra={
                "session_id": session_row.id,
                "extracted": len(findings),
                "stored": len(stored),
            },
        )

    project.last_analyzed_at = completed_at
    project.updated_at = completed_at
    db.commit()
    return session_row, stored


def list_session_issues(db: Session, session_id: str) -> list[SecurityIssue]:
    """Issues of one session in the order they were extracted."""
    return (
        db.query(SecurityIssue)
        .filter(SecurityIssue.analysis_session_id == session_id)
        .order_by(SecurityIssue.position, SecurityIssue.id)
        .all()
    )


def get_session_with_issues(
    db: Session,
    principal_id: int,
    session_id: str,
) -> tuple[AnalysisSession, Project, list[SecurityIssue]]:
    """Read back a stored session and its issues. Nothing is recomputed."""
    session_row, project = get_owned_session(db, principal_id, session_id)
    return session_row, project, list_session_issues(db, session_row.id)


def list_project_sessions(
    db: Session,
    principal_id: int,
    project_id: str,
) -> list[AnalysisSession]:
    """Analysis history of an owned project, newest first."""
    project = get_owned_project(db, principal_id, project_id)
    return (
        db.query(AnalysisSession)
        .filter(AnalysisSession.project_id == project.id)
        .order_by(AnalysisSession.created_at.desc(), AnalysisSession.id)
        .all()
    )
