"""ORM model for one run of the analysis pipeline against one project."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import relationship

from app.models.base import Base, new_uuid, utcnow


class AnalysisSession(Base):
    """
    Persisted analysis session with per-severity counts and overall score.

    total_issues always equals critical + high + medium + low; the pipeline
    writes the row once, already completed.
    """

    __tablename__ = "analysis_sessions"
    __table_args__ = (
        CheckConstraint(
            "total_issues = critical_issues + high_issues + medium_issues + low_issues",
            name="ck_analysis_sessions_total_matches_counts",
        ),
        CheckConstraint(
            "overall_score IS NULL OR (overall_score >= 0 AND overall_score <= 10)",
            name="ck_analysis_sessions_score_range",
        ),
    )

    id = Column(String(36), primary_key=True, default=new_uuid)
    project_id = Column(
        String(36),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status = Column(String(32), nullable=False, default="pending")
    overall_score = Column(Float, nullable=True)
    total_issues = Column(Integer, nullable=False, default=0)
    critical_issues = Column(Integer, nullable=False, default=0)
    high_issues = Column(Integer, nullable=False, default=0)
    medium_issues = Column(Integer, nullable=False, default=0)
    low_issues = Column(Integer, nullable=False, default=0)
    processing_time_ms = Column(Integer, nullable=True)
    model_identifier = Column(String(255), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    completed_at = Column(DateTime(timezone=True), nullable=True)

    project = relationship("Project", back_populates="analysis_sessions")
    security_issues = relationship(
        "SecurityIssue",
        back_populates="analysis_session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SecurityIssue.created_at",
    )
