"""Pydantic schemas for goal endpoints."""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .points import LedgerEntryRead


class GoalCreate(BaseModel):
    """Request body for creating a goal."""

    student_id: int
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    target_date: Optional[date] = None


class GoalComplete(BaseModel):
    """Optional completion timestamp; defaults to now."""

    completed_at: Optional[datetime] = None


class GoalRead(BaseModel):
    """Goal response payload."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    title: str
    description: Optional[str]
    target_date: Optional[date]
    is_completed: bool
    completed_at: Optional[datetime]
    created_at: datetime


class GoalTransition(BaseModel):
    """Goal after a completion or reopen, with the ledger entries it produced."""

    goal: GoalRead
    entries: List[LedgerEntryRead]
    points_delta: int
