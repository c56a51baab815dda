"""Leaderboard response schemas."""

from pydantic import BaseModel, Field


class LeaderboardStudent(BaseModel):
    """Ranked leaderboard entry."""

    rank: int = Field(..., ge=1)
    student_id: int
    name: str
    balance: int
    transaction_count: int = Field(..., ge=0)
