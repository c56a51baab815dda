"""Pydantic schemas for points ledger endpoints."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class LedgerEntryRead(BaseModel):
    """One immutable ledger entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    related_goal_id: Optional[int]
    amount: int
    reason: str
    created_at: datetime


class BalanceRead(BaseModel):
    """Aggregated balance for a student."""

    model_config = ConfigDict(from_attributes=True)

    student_id: int
    total_earned: int
    total_spent: int
    current_balance: int
    transaction_count: int
    last_transaction_at: Optional[datetime] = None
    breakdown: Dict[str, int]


class LedgerHistory(BaseModel):
    """A page of ledger entries in append order."""

    student_id: int
    entries: List[LedgerEntryRead]
    total_count: int


class PointsChange(BaseModel):
    """Request body for manual awards, redemptions and penalties."""

    student_id: int
    points: int = Field(..., description="Positive number of points to move.")
    reason: Optional[str] = Field(None, max_length=255)


class PointsReceipt(BaseModel):
    """Response returned after a manual points operation."""

    entry: LedgerEntryRead
    balance: BalanceRead


class BulkAward(BaseModel):
    """Request body for awarding several students at once."""

    awards: List[PointsChange] = Field(..., min_length=1, max_length=500)


class BulkAwardFailure(BaseModel):
    request: PointsChange
    error: str


class BulkAwardReceipt(BaseModel):
    """Entries written by a bulk award and the requests it rejected."""

    successful: List[LedgerEntryRead]
    failed: List[BulkAwardFailure]
    total_processed: int


class LedgerStatsRead(BaseModel):
    """Ledger activity across all students."""

    model_config = ConfigDict(from_attributes=True)

    active_students: int
    total_transactions: int
    total_points_awarded: int
    total_points_spent: int
    net_points_balance: int
    breakdown: Dict[str, int]
