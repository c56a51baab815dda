"""Reconciliation of cached student points against the ledger."""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..models import LedgerEntry, Student
from . import ledger_service

logger = logging.getLogger(__name__)


def reconcile_points(session: Session, *, repair: bool = True) -> dict[str, int]:
    """Compare each ``Student.points`` with its ledger sum, optionally fixing drift.

    Returns summary statistics useful for logging/testing.
    """

    summary = {
        "students_checked": 0,
        "students_drifted": 0,
        "students_repaired": 0,
    }

    ledger_total = func.coalesce(func.sum(LedgerEntry.amount), 0).label("ledger_total")
    stmt = (
        select(Student.id, Student.points, ledger_total)
        .outerjoin(LedgerEntry, LedgerEntry.student_id == Student.id)
        .group_by(Student.id, Student.points)
        .order_by(Student.id.asc())
    )

    for student_id, cached, total in session.execute(stmt).all():
        summary["students_checked"] += 1
        total = int(total)
        if cached == total:
            continue

        summary["students_drifted"] += 1
        logger.warning("student %s cached points %s differ from ledger sum %s", student_id, cached, total)
        if repair:
            student = session.execute(
                select(Student).where(Student.id == student_id).with_for_update()
            ).scalar_one()
            # Re-read under the lock; an append may have committed since the scan.
            student.points = ledger_service.ledger_sum(session, student_id)
            summary["students_repaired"] += 1

    session.flush()
    return summary
