"""Append-only points ledger with a transactionally maintained balance cache."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from ..models import Goal, LedgerEntry, Student
from ..utils.datetime import as_utc_naive, utcnow
from .points_rules import PointsAward

logger = logging.getLogger(__name__)


class PointsRuleViolation(Exception):
    """Raised when a points operation breaks a business rule."""

    def __init__(self, detail: str, status_code: int = 400) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


class ReferentialError(PointsRuleViolation):
    """Raised when a ledger write references a missing student or goal."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail, status_code=404)


class InvalidAmountError(PointsRuleViolation):
    """Raised when a requested point amount is not acceptable."""


class InsufficientBalanceError(PointsRuleViolation):
    """Raised when a deduction exceeds the available balance."""


class EntryNotFound(PointsRuleViolation):
    def __init__(self, detail: str) -> None:
        super().__init__(detail, status_code=404)


def lock_student(session: Session, student_id: int) -> Student:
    stmt = select(Student).where(Student.id == student_id).with_for_update()
    student = session.execute(stmt).scalar_one_or_none()
    if student is None:
        raise ReferentialError(f"Student {student_id} not found")
    return student


def _ensure_goal(session: Session, goal_id: int, student_id: int) -> Goal:
    goal = session.get(Goal, goal_id)
    if goal is None:
        raise ReferentialError(f"Goal {goal_id} not found")
    if goal.student_id != student_id:
        raise ReferentialError(f"Goal {goal_id} does not belong to student {student_id}")
    return goal


def ensure_student(session: Session, student_id: int) -> Student:
    student = session.get(Student, student_id)
    if student is None:
        raise ReferentialError(f"Student {student_id} not found")
    return student


def append(
    session: Session,
    *,
    student_id: int,
    amount: int,
    reason: str,
    related_goal_id: Optional[int] = None,
    created_at: Optional[datetime] = None,
) -> LedgerEntry:
    """Insert one ledger entry and add ``amount`` to the student's cached points.

    Both writes happen in the caller's transaction. References are checked
    before anything is written.
    """

    student = lock_student(session, student_id)
    if related_goal_id is not None:
        _ensure_goal(session, related_goal_id, student.id)

    entry = LedgerEntry(
        student_id=student.id,
        related_goal_id=related_goal_id,
        amount=amount,
        reason=reason,
        created_at=as_utc_naive(created_at) if created_at else utcnow(),
    )
    session.add(entry)
    session.flush()

    # Increment in SQL so concurrent appends cannot overwrite each other.
    session.execute(
        update(Student)
        .where(Student.id == student.id)
        .values(points=Student.points + amount)
        .execution_options(synchronize_session="fetch")
    )

    logger.info(
        "ledger entry %s appended for student %s: %+d (%s)",
        entry.id,
        student.id,
        amount,
        reason,
    )
    return entry


def append_many(
    session: Session,
    *,
    student_id: int,
    awards: Iterable[PointsAward],
    related_goal_id: Optional[int] = None,
    created_at: Optional[datetime] = None,
) -> List[LedgerEntry]:
    """Append several awards in order, sharing the goal reference and timestamp."""

    return [
        append(
            session,
            student_id=student_id,
            amount=award.amount,
            reason=award.reason,
            related_goal_id=related_goal_id,
            created_at=created_at,
        )
        for award in awards
    ]


def _in_range(stmt, start_date: Optional[datetime], end_date: Optional[datetime]):
    if start_date is not None:
        stmt = stmt.where(LedgerEntry.created_at >= as_utc_naive(start_date))
    if end_date is not None:
        stmt = stmt.where(LedgerEntry.created_at <= as_utc_naive(end_date))
    return stmt


def list_by_student(
    session: Session,
    student_id: int,
    *,
    limit: Optional[int] = None,
    offset: int = 0,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> Sequence[LedgerEntry]:
    """Return a student's entries in append order.

    ``start_date`` and ``end_date`` bound ``created_at`` inclusively.
    """

    stmt = select(LedgerEntry).where(LedgerEntry.student_id == student_id)
    stmt = _in_range(stmt, start_date, end_date).order_by(LedgerEntry.id.asc()).offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    return session.execute(stmt).scalars().all()


def list_all(
    session: Session,
    *,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> Sequence[LedgerEntry]:
    """Return every entry in append order, optionally bounded by ``created_at``."""

    stmt = _in_range(select(LedgerEntry), start_date, end_date).order_by(LedgerEntry.id.asc())
    return session.execute(stmt).scalars().all()


def get_entry(session: Session, entry_id: int) -> LedgerEntry:
    entry = session.get(LedgerEntry, entry_id)
    if entry is None:
        raise EntryNotFound(f"Ledger entry {entry_id} not found")
    return entry


def count_by_student(session: Session, student_id: int) -> int:
    stmt = select(func.count(LedgerEntry.id)).where(LedgerEntry.student_id == student_id)
    return session.execute(stmt).scalar_one()


def ledger_sum(session: Session, student_id: int) -> int:
    stmt = select(func.coalesce(func.sum(LedgerEntry.amount), 0)).where(LedgerEntry.student_id == student_id)
    return int(session.execute(stmt).scalar_one())
