"""Leaderboard aggregation services."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from ..models import LedgerEntry, Student
from ..utils.datetime import as_utc_naive


def get_leaderboard(
    session: Session,
    *,
    limit: int = 10,
    offset: int = 0,
    use_cache: bool = False,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> Sequence[tuple]:
    """Return ``(student, balance, transaction_count)`` rows ranked by balance.

    Ties are broken by ascending student id so pages stay stable. The
    balance is summed from the ledger unless ``use_cache`` selects the
    cached ``Student.points`` column instead. A ``start_date``/``end_date``
    range ranks by points moved inside that window; the cache only holds
    lifetime totals, so a range always sums the ledger.
    """

    limit = max(1, min(limit, 100))
    offset = max(0, offset)
    ranged = start_date is not None or end_date is not None

    join_on = [LedgerEntry.student_id == Student.id]
    if start_date is not None:
        join_on.append(LedgerEntry.created_at >= as_utc_naive(start_date))
    if end_date is not None:
        join_on.append(LedgerEntry.created_at <= as_utc_naive(end_date))

    transaction_count = func.count(LedgerEntry.id).label("transaction_count")
    if use_cache and not ranged:
        balance = Student.points.label("balance")
    else:
        balance = func.coalesce(func.sum(LedgerEntry.amount), 0).label("balance")

    stmt = (
        select(Student, balance, transaction_count)
        .outerjoin(LedgerEntry, and_(*join_on))
        .group_by(Student.id)
        .order_by(balance.desc(), Student.id.asc())
        .offset(offset)
        .limit(limit)
    )

    return session.execute(stmt).all()
