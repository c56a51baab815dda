"""Goal lifecycle: creation, completion and reopening."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.config import PointsConfig
from ..models import Goal, LedgerEntry
from ..utils.datetime import as_utc_naive, utcnow
from . import ledger_service
from .ledger_service import ReferentialError
from .points_rules import GoalCompletedEvent, evaluate_completion, evaluate_reopen

logger = logging.getLogger(__name__)


class GoalRuleViolation(Exception):
    """Raised when a goal transition is not allowed."""

    def __init__(self, detail: str, status_code: int = 400) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


def _lock_goal(session: Session, goal_id: int) -> Goal:
    stmt = select(Goal).where(Goal.id == goal_id).with_for_update()
    goal = session.execute(stmt).scalar_one_or_none()
    if goal is None:
        raise GoalRuleViolation(f"Goal {goal_id} not found", status_code=404)
    return goal


def _event_for(goal: Goal, completed_at: datetime) -> GoalCompletedEvent:
    return GoalCompletedEvent(
        student_id=goal.student_id,
        goal_id=goal.id,
        completed_at=completed_at,
        target_date=goal.target_date,
    )


def create_goal(
    session: Session,
    *,
    student_id: int,
    title: str,
    description: Optional[str] = None,
    target_date: Optional[date] = None,
) -> Goal:
    """Create an open goal for an existing student."""

    try:
        ledger_service.ensure_student(session, student_id)
    except ReferentialError as exc:
        raise GoalRuleViolation(exc.detail, status_code=404) from exc

    goal = Goal(
        student_id=student_id,
        title=title,
        description=description,
        target_date=target_date,
        is_completed=False,
    )
    session.add(goal)
    session.flush()
    session.refresh(goal)
    return goal


def get_goal(session: Session, goal_id: int) -> Goal:
    goal = session.get(Goal, goal_id)
    if goal is None:
        raise GoalRuleViolation(f"Goal {goal_id} not found", status_code=404)
    return goal


def list_goals(
    session: Session,
    *,
    student_id: Optional[int] = None,
    completed: Optional[bool] = None,
    limit: int = 50,
    offset: int = 0,
) -> Sequence[Goal]:
    """Retrieve goals with optional student and completion filters."""

    stmt = select(Goal).order_by(Goal.id.asc()).offset(offset).limit(limit)
    if student_id is not None:
        stmt = stmt.where(Goal.student_id == student_id)
    if completed is not None:
        stmt = stmt.where(Goal.is_completed == completed)
    return session.execute(stmt).scalars().all()


def complete_goal(
    session: Session,
    goal_id: int,
    *,
    config: PointsConfig,
    completed_at: Optional[datetime] = None,
) -> Tuple[Goal, List[LedgerEntry]]:
    """Mark a goal completed and append the points it earns."""

    goal = _lock_goal(session, goal_id)
    if goal.is_completed:
        raise GoalRuleViolation("Goal is already completed.")

    if completed_at is None:
        completed_at = utcnow()
    else:
        completed_at = as_utc_naive(completed_at)
        if completed_at > utcnow():
            raise GoalRuleViolation("Completion time cannot be in the future.")
        if completed_at < goal.created_at:
            raise GoalRuleViolation("Completion time cannot precede the goal's creation.")

    goal.is_completed = True
    goal.completed_at = completed_at
    session.flush()

    awards = evaluate_completion(_event_for(goal, completed_at), config)
    entries = ledger_service.append_many(
        session,
        student_id=goal.student_id,
        awards=awards,
        related_goal_id=goal.id,
        created_at=completed_at,
    )
    logger.info(
        "goal %s completed for student %s, awarded %d points",
        goal.id,
        goal.student_id,
        sum(entry.amount for entry in entries),
    )
    return goal, entries


def reopen_goal(
    session: Session,
    goal_id: int,
    *,
    config: PointsConfig,
) -> Tuple[Goal, List[LedgerEntry]]:
    """Reopen a completed goal, appending any configured deductions.

    With the default configuration no deduction applies and the ledger is
    left as it was.
    """

    goal = _lock_goal(session, goal_id)
    if not goal.is_completed:
        raise GoalRuleViolation("Goal is not completed.")

    deductions = evaluate_reopen(_event_for(goal, goal.completed_at), config)
    entries = ledger_service.append_many(
        session,
        student_id=goal.student_id,
        awards=deductions,
        related_goal_id=goal.id,
    )

    goal.is_completed = False
    goal.completed_at = None
    session.flush()
    logger.info("goal %s reopened for student %s (%d deductions)", goal.id, goal.student_id, len(entries))
    return goal, entries
