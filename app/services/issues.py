"""Security issue triage: flag toggles, filtered listing, bulk update, and per-principal statistics.

Only resolved and false_positive are ever changed after an issue is created.
"""

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from app.models import AnalysisSession, Project, SecurityIssue
from app.schemas.findings import SEVERITY_ORDER
from app.schemas.issues import IssueStatsResponse, IssueStatusSummary, IssueTypeCount
from app.services.ownership import NotFoundError, get_owned_issue

DEFAULT_LIST_LIMIT = 50
MAX_LIST_LIMIT = 100
TOP_ISSUE_TYPES_LIMIT = 10


def _owned_issues_query(db: Session, principal_id: int, *entities: object) -> Query:
    """Query over issues joined to session and project, restricted to principal_id."""
    return (
        db.query(*entities)
        .select_from(SecurityIssue)
        .join(AnalysisSession, SecurityIssue.analysis_session_id == AnalysisSession.id)
        .join(Project, AnalysisSession.project_id == Project.id)
        .filter(Project.owner_id == principal_id)
    )


def set_issue_flags(
    db: Session,
    principal_id: int,
    issue_id: str,
    *,
    resolved: bool | None = None,
    false_positive: bool | None = None,
) -> SecurityIssue:
    """Set resolved and/or false_positive on one owned issue. Setting an unchanged value is a no-op."""
    issue, _session, _project = get_owned_issue(db, principal_id, issue_id)
    if resolved is not None:
        issue.resolved = resolved
    if false_positive is not None:
        issue.false_positive = false_positive
    db.commit()
    db.refresh(issue)
    return issue


def resolve_issue(db: Session, principal_id: int, issue_id: str) -> SecurityIssue:
    return set_issue_flags(db, principal_id, issue_id, resolved=True)


def mark_false_positive(db: Session, principal_id: int, issue_id: str) -> SecurityIssue:
    return set_issue_flags(db, principal_id, issue_id, false_positive=True)


def list_issues(
    db: Session,
    principal_id: int,
    *,
    severity: str | None = None,
    resolved: bool | None = None,
    false_positive: bool | None = None,
    issue_type: str | None = None,
    category: str | None = None,
    project_id: str | None = None,
    analysis_session_id: str | None = None,
    limit: int = DEFAULT_LIST_LIMIT,
    offset: int = 0,
) -> list[tuple[SecurityIssue, str, str]]:
    """Return (issue, project_id, project_name) rows visible to principal_id, filtered."""
    query = _owned_issues_query(db, principal_id, SecurityIssue, Project.id, Project.name)
    if severity:
        query = query.filter(SecurityIssue.severity == severity)
    if resolved is not None:
        query = query.filter(SecurityIssue.resolved == resolved)
    if false_positive is not None:
        query = query.filter(SecurityIssue.false_positive == false_positive)
    if issue_type:
        query = query.filter(SecurityIssue.type == issue_type)
    if category:
        query = query.filter(SecurityIssue.category == category)
    if project_id:
        query = query.filter(Project.id == project_id)
    if analysis_session_id:
        query = query.filter(SecurityIssue.analysis_session_id == analysis_session_id)
    rows = (
        query.order_by(SecurityIssue.created_at.desc(), SecurityIssue.id)
        .limit(limit)
        .offset(offset)
        .all()
    )
    return [(row[0], row[1], row[2]) for row in rows]


def bulk_update_issues(
    db: Session,
    principal_id: int,
    issue_ids: list[str],
    *,
    resolved: bool | None = None,
    false_positive: bool | None = None,
) -> list[SecurityIssue]:
    """
    Update flags on several owned issues at once.

    If any id is absent or not owned, nothing is updated and NotFoundError lists them.
    """
    wanted = list(dict.fromkeys(issue_ids))
    issues = (
        _owned_issues_query(db, principal_id, SecurityIssue)
        .filter(SecurityIssue.id.in_(wanted))
        .all()
    )
    owned_ids = {issue.id for issue in issues}
    missing = [issue_id for issue_id in wanted if issue_id not in owned_ids]
    if missing:
        raise NotFoundError(f"Some issues ({', '.join(missing)})")

    for issue in issues:
        if resolved is not None:
            issue.resolved = resolved
        if false_positive is not None:
            issue.false_positive = false_positive
    db.commit()
    for issue in issues:
        db.refresh(issue)
    return issues


def issue_stats(db: Session, principal_id: int) -> IssueStatsResponse:
    """Totals, severity breakdown, triage status summary, and the most common issue types."""
    count = func.count(SecurityIssue.id)

    total = _owned_issues_query(db, principal_id, count).scalar() or 0

    severity_rows = (
        _owned_issues_query(db, principal_id, SecurityIssue.severity, count)
        .group_by(SecurityIssue.severity)
        .all()
    )
    by_severity = {sev: n for sev, n in severity_rows}
    severity_breakdown = {level: by_severity.pop(level, 0) for level in SEVERITY_ORDER}
    severity_breakdown.update(by_severity)

    status_rows = (
        _owned_issues_query(
            db, principal_id, SecurityIssue.resolved, SecurityIssue.false_positive, count
        )
        .group_by(SecurityIssue.resolved, SecurityIssue.false_positive)
        .all()
    )
    summary = IssueStatusSummary()
    for is_resolved, is_false_positive, n in status_rows:
        if is_false_positive:
            summary.false_positive += n
        elif is_resolved:
            summary.resolved += n
        else:
            summary.open += n

    type_rows = (
        _owned_issues_query(db, principal_id, SecurityIssue.type, count)
        .group_by(SecurityIssue.type)
        .order_by(count.desc(), SecurityIssue.type)
        .limit(TOP_ISSUE_TYPES_LIMIT)
        .all()
    )

    return IssueStatsResponse(
        total_issues=total,
        severity_breakdown=severity_breakdown,
        status_summary=summary,
        top_issue_types=[IssueTypeCount(type=t, count=n) for t, n in type_rows],
    )
