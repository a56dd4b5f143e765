"""Project lifecycle: create, list, update, delete (cascading to sessions and issues)."""

import logging
from typing import Any

from sqlalchemy.orm import Session

from app.models import Project
from app.models.base import utcnow
from app.services.ownership import get_owned_project

logger = logging.getLogger(__name__)


def create_project(
    db: Session,
    principal_id: int,
    name: str,
    content: str,
    source_url: str = "",
) -> Project:
    project = Project(
        owner_id=principal_id,
        name=name,
        content=content,
        source_url=source_url,
        status="active",
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


def list_projects(db: Session, principal_id: int) -> list[Project]:
    return (
        db.query(Project)
        .filter(Project.owner_id == principal_id)
        .order_by(Project.created_at.desc(), Project.id)
        .all()
    )


def delete_project(db: Session, principal_id: int, project_id: str) -> None:
    """Delete an owned project; its analysis sessions and security issues go with it."""
    project = get_owned_project(db, principal_id, project_id)
    session_count = len(project.analysis_sessions)
    db.delete(project)
    db.commit()
    logger.info(
        "Project deleted",
        extra={"project_id": project_id, "sessions_deleted": session_count},
    )


def update_project(
    db: Session,
    principal_id: int,
    project_id: str,
    changes: dict[str, Any],
) -> Project:
    """Apply the given field changes to an owned project and bump updated_at."""
    project = get_owned_project(db, principal_id, project_id)
    for field, value in changes.items():
        setattr(project, field, value)
    project.updated_at = utcnow()
    db.commit()
    db.refresh(project)
    logger.info(
        "Project updated",
        extra={"project_id": project_id, "fields": sorted(changes)},
    )
    return project
