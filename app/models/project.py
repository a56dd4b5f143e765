"""ORM model for projects: source content submitted for analysis, owned by one user."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from app.models.base import Base, new_uuid, utcnow


class Project(Base):
    """
    A unit of source code to analyze. Deleting a project cascades to its
    analysis sessions and, through them, to their security issues.
    """

    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=new_uuid)
    owner_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    source_url = Column(String(2048), nullable=False, default="")
    content = Column(Text, nullable=False)
    status = Column(String(32), nullable=False, default="active")
    last_analyzed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    owner = relationship("User", back_populates="projects")
    analysis_sessions = relationship(
        "AnalysisSession",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="AnalysisSession.created_at",
    )
