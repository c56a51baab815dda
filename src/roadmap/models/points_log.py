"""Points ledger model capturing balance movements."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..utils.datetime import utcnow


class LedgerEntry(Base):
    """Immutable, signed point movement for a student."""

    __tablename__ = "points_log"
    __table_args__ = (
        Index("ix_points_log_student_id_id", "student_id", "id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="RESTRICT"), nullable=False)
    related_goal_id = Column(Integer, ForeignKey("goals.id", ondelete="SET NULL"))
    amount = Column(Integer, nullable=False)
    reason = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    student = relationship("Student", back_populates="ledger_entries")
    goal = relationship("Goal", back_populates="ledger_entries")
