"""Student domain model."""

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..utils.datetime import utcnow


class Student(Base):
    """A learner whose goals earn points.

    ``points`` caches the sum of the student's ``points_log`` amounts. Only
    the ledger write path and the reconciliation job change it.
    """

    __tablename__ = "students"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    points = Column(Integer, nullable=False, default=0, server_default="0")
    created_at = Column(DateTime, default=utcnow, nullable=False)

    goals = relationship("Goal", back_populates="student", order_by="Goal.id")
    ledger_entries = relationship("LedgerEntry", back_populates="student", order_by="LedgerEntry.id")
