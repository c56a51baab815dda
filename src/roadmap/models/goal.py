"""Goal model tracked per student."""

from sqlalchemy import Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..utils.datetime import utcnow


class Goal(Base):
    """A student goal that awards points when completed."""

    __tablename__ = "goals"
    __table_args__ = (
        CheckConstraint(
            "(is_completed AND completed_at IS NOT NULL) OR (NOT is_completed AND completed_at IS NULL)",
            name="goals_completed_at_matches_flag",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="RESTRICT"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    target_date = Column(Date)
    is_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    student = relationship("Student", back_populates="goals")
    ledger_entries = relationship("LedgerEntry", back_populates="goal")
