"""Ownership-scoped lookups along the chain issue -> session -> project -> principal.

Every lookup filters on the owning principal in the same query, so a row that does not
exist and a row owned by someone else are indistinguishable to the caller.
"""

from sqlalchemy.orm import Session

from app.models import AnalysisSession, Project, SecurityIssue


class NotFoundError(Exception):
    """Raised when a resource does not exist or is not owned by the caller."""

    def __init__(self, resource: str) -> None:
        self.resource = resource
        self.message = f"{resource} not found"
        super().__init__(self.message)


def get_owned_project(db: Session, principal_id: int, project_id: str) -> Project:
    project = (
        db.query(Project)
        .filter(Project.id == project_id, Project.owner_id == principal_id)
        .first()
    )
    if project is None:
        raise NotFoundError("Project")
    return project


def get_owned_session(
    db: Session,
    principal_id: int,
    session_id: str,
) -> tuple[AnalysisSession, Project]:
    """Return (session, project) for a session whose project belongs to principal_id."""
    row = (
        db.query(AnalysisSession, Project)
        .join(Project, AnalysisSession.project_id == Project.id)
        .filter(AnalysisSession.id == session_id, Project.owner_id == principal_id)
        .first()
    )
    if row is None:
        raise NotFoundError("Analysis session")
    return row[0], row[1]


def get_owned_issue(
    db: Session,
    principal_id: int,
    issue_id: str,
) -> tuple[SecurityIssue, AnalysisSession, Project]:
    """Return (issue, session, project) for an issue reachable by principal_id."""
    row = (
        db.query(SecurityIssue, AnalysisSession, Project)
        .join(AnalysisSession, SecurityIssue.analysis_session_id == AnalysisSession.id)
        .join(Project, AnalysisSession.project_id == Project.id)
        .filter(SecurityIssue.id == issue_id, Project.owner_id == principal_id)
        .first()
    )
    if row is None:
        raise NotFoundError("Issue")
    return row[0], row[1], row[2]
