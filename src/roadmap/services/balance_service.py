"""Balance aggregation over a student's ledger."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from sqlalchemy.orm import Session

from ..models import LedgerEntry
from . import ledger_service
from .points_rules import (
    REASON_COMPLETED,
    REASON_COMPLETED_ON_TIME,
    REASON_REOPENED,
    REASON_REOPENED_ON_TIME,
)

REASON_REDEEMED = "Points redeemed"
REASON_PENALTY = "Penalty"
REASON_AWARDED = "Points awarded"


class EntryCategory(str, enum.Enum):
    """Breakdown buckets for ledger entries."""

    EARNED = "earned"
    BONUS = "bonus"
    REDEEMED = "redeemed"
    PENALTY = "penalty"


KNOWN_REASONS: Dict[str, EntryCategory] = {
    REASON_COMPLETED: EntryCategory.EARNED,
    REASON_COMPLETED_ON_TIME: EntryCategory.BONUS,
    REASON_AWARDED: EntryCategory.EARNED,
    REASON_REDEEMED: EntryCategory.REDEEMED,
    REASON_PENALTY: EntryCategory.PENALTY,
    REASON_REOPENED: EntryCategory.PENALTY,
    REASON_REOPENED_ON_TIME: EntryCategory.PENALTY,
}


_CREDIT_CATEGORIES = frozenset({EntryCategory.EARNED, EntryCategory.BONUS})


def categorize(amount: int, reason: Optional[str]) -> EntryCategory:
    """Map an entry to its breakdown bucket.

    The sign decides first: non-negative entries land in ``earned`` or
    ``bonus``, negative ones in ``redeemed`` or ``penalty``. A known reason
    picks the bucket only when it agrees with the sign; otherwise a
    non-negative entry is ``bonus`` when the reason mentions a bonus, and a
    negative entry is ``penalty`` when the reason mentions a penalty.
    """

    credit = amount >= 0
    known = KNOWN_REASONS.get(reason or "")
    if known is not None and (known in _CREDIT_CATEGORIES) == credit:
        return known
    text = (reason or "").lower()
    if credit:
        return EntryCategory.BONUS if "bonus" in text else EntryCategory.EARNED
    return EntryCategory.PENALTY if "penalty" in text else EntryCategory.REDEEMED


@dataclass
class StudentBalance:
    student_id: int
    total_earned: int = 0
    total_spent: int = 0
    current_balance: int = 0
    transaction_count: int = 0
    last_transaction_at: Optional[datetime] = None
    breakdown: Dict[str, int] = field(
        default_factory=lambda: {category.value: 0 for category in EntryCategory}
    )

    def add(self, entry: LedgerEntry) -> None:
        if entry.amount > 0:
            self.total_earned += entry.amount
        else:
            self.total_spent += -entry.amount
        self.current_balance += entry.amount
        self.transaction_count += 1
        self.breakdown[categorize(entry.amount, entry.reason).value] += abs(entry.amount)
        if self.last_transaction_at is None or entry.created_at >= self.last_transaction_at:
            self.last_transaction_at = entry.created_at


def _empty_breakdown() -> Dict[str, int]:
    return {category.value: 0 for category in EntryCategory}


def get_balance(
    session: Session,
    student_id: int,
    *,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> StudentBalance:
    """Fold the student's ledger into totals and a category breakdown.

    With a date range only entries created inside it are folded, so the
    result describes activity in that window rather than the running balance.
    """

    ledger_service.ensure_student(session, student_id)
    balance = StudentBalance(student_id=student_id)
    entries = ledger_service.list_by_student(
        session, student_id, start_date=start_date, end_date=end_date
    )
    for entry in entries:
        balance.add(entry)
    return balance


@dataclass
class LedgerStats:
    """Ledger activity across all students."""

    active_students: int = 0
    total_transactions: int = 0
    total_points_awarded: int = 0
    total_points_spent: int = 0
    breakdown: Dict[str, int] = field(default_factory=_empty_breakdown)

    @property
    def net_points_balance(self) -> int:
        return self.total_points_awarded - self.total_points_spent


def get_stats(
    session: Session,
    *,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> LedgerStats:
    """Aggregate every entry, optionally within a ``created_at`` range.

    Awarded and spent totals are the ``earned + bonus`` and
    ``redeemed + penalty`` buckets, so the net always equals the sum of
    the folded amounts.
    """

    stats = LedgerStats()
    students = set()
    for entry in ledger_service.list_all(session, start_date=start_date, end_date=end_date):
        category = categorize(entry.amount, entry.reason)
        stats.breakdown[category.value] += abs(entry.amount)
        if category in _CREDIT_CATEGORIES:
            stats.total_points_awarded += abs(entry.amount)
        else:
            stats.total_points_spent += abs(entry.amount)
        stats.total_transactions += 1
        students.add(entry.student_id)
    stats.active_students = len(students)
    return stats
