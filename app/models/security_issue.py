"""ORM model for a single validated vulnerability reported by an analysis session."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    false,
    func,
)
from sqlalchemy.orm import relationship

from app.models.base import Base, new_uuid, utcnow


class SecurityIssue(Base):
    """
    One finding. Severity, type and category are plain text; validation happens
    before insert. position is the finding's index in its session's extracted list.
    After creation only resolved and false_positive change.
    """

    __tablename__ = "security_issues"

    id = Column(String(36), primary_key=True, default=new_uuid)
    analysis_session_id = Column(
        String(36),
        ForeignKey("analysis_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = Column(Integer, nullable=False, default=0, server_default="0")
    severity = Column(String(32), nullable=False, index=True)
    type = Column(String(255), nullable=False)
    category = Column(String(255), nullable=False)
    file_path = Column(String(2048), nullable=False)
    line_number = Column(Integer, nullable=True)
    code_snippet = Column(Text, nullable=True)
    description = Column(Text, nullable=False)
    recommendation = Column(Text, nullable=False)
    confidence_score = Column(Float, nullable=True)
    false_positive = Column(Boolean, nullable=False, default=False, server_default=false())
    resolved = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    analysis_session = relationship("AnalysisSession", back_populates="security_issues")
