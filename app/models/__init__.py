"""SQLAlchemy ORM models."""

from app.models.analysis_session import AnalysisSession
from app.models.base import Base
from app.models.project import Project
from app.models.security_issue import SecurityIssue
from app.models.user import User

__all__ = ["AnalysisSession", "Base", "Project", "SecurityIssue", "User"]
