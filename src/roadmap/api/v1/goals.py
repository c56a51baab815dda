"""Goal endpoints, including the completion transitions that award points."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ...core.config import PointsConfig, get_points_config
from ...core.database import get_db
from ...schemas import GoalComplete, GoalCreate, GoalRead, GoalTransition, LedgerEntryRead
from ...services import goal_service
from ...services.goal_service import GoalRuleViolation
from ...services.ledger_service import PointsRuleViolation

router = APIRouter(prefix="/goals", tags=["goals"])


def _transition(goal, entries) -> GoalTransition:
    return GoalTransition(
        goal=GoalRead.model_validate(goal),
        entries=[LedgerEntryRead.model_validate(entry) for entry in entries],
        points_delta=sum(entry.amount for entry in entries),
    )


@router.post(
    "",
    response_model=GoalRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a goal",
    responses={404: {"description": "Student not found"}},
)
def create_goal(
    payload: GoalCreate,
    db: Session = Depends(get_db),
) -> GoalRead:
    """Create an open goal.

    Example request body::

        {
            "student_id": 1,
            "title": "Finish algebra worksheet",
            "target_date": "2025-10-15"
        }
    """

    try:
        goal = goal_service.create_goal(
            db,
            student_id=payload.student_id,
            title=payload.title,
            description=payload.description,
            target_date=payload.target_date,
        )
        db.commit()
        db.refresh(goal)
        return goal
    except GoalRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get("", response_model=List[GoalRead], summary="List goals")
def list_goals(
    *,
    student_id: Optional[int] = Query(None, description="Filter by student"),
    completed: Optional[bool] = Query(None, description="Filter by completion state"),
    limit: int = Query(50, ge=1, le=100, description="Maximum items to return"),
    offset: int = Query(0, ge=0, description="Items to skip for pagination"),
    db: Session = Depends(get_db),
) -> List[GoalRead]:
    goals = goal_service.list_goals(
        db,
        student_id=student_id,
        completed=completed,
        limit=limit,
        offset=offset,
    )
    return list(goals)


@router.post(
    "/{goal_id}/complete",
    response_model=GoalTransition,
    summary="Complete a goal and award points",
    responses={
        200: {
            "description": "Goal completed",
            "content": {
                "application/json": {
                    "example": {
                        "goal": {
                            "id": 7,
                            "student_id": 1,
                            "title": "Finish algebra worksheet",
                            "description": None,
                            "target_date": "2025-10-15",
                            "is_completed": True,
                            "completed_at": "2025-10-14T09:30:00",
                            "created_at": "2025-10-01T08:00:00",
                        },
                        "entries": [
                            {"id": 11, "student_id": 1, "related_goal_id": 7, "amount": 2,
                             "reason": "Completed goal", "created_at": "2025-10-14T09:30:00"},
                            {"id": 12, "student_id": 1, "related_goal_id": 7, "amount": 1,
                             "reason": "Completed goal on time", "created_at": "2025-10-14T09:30:00"},
                        ],
                        "points_delta": 3,
                    }
                }
            },
        },
        400: {"description": "Goal already completed"},
        404: {"description": "Goal not found"},
    },
)
def complete_goal(
    goal_id: int,
    payload: Optional[GoalComplete] = Body(None),
    db: Session = Depends(get_db),
    config: PointsConfig = Depends(get_points_config),
) -> GoalTransition:
    try:
        goal, entries = goal_service.complete_goal(
            db,
            goal_id,
            config=config,
            completed_at=payload.completed_at if payload else None,
        )
        db.commit()
        db.refresh(goal)
        return _transition(goal, entries)
    except (GoalRuleViolation, PointsRuleViolation) as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.post(
    "/{goal_id}/reopen",
    response_model=GoalTransition,
    summary="Reopen a completed goal",
    responses={
        400: {"description": "Goal is not completed"},
        404: {"description": "Goal not found"},
    },
)
def reopen_goal(
    goal_id: int,
    db: Session = Depends(get_db),
    config: PointsConfig = Depends(get_points_config),
) -> GoalTransition:
    try:
        goal, entries = goal_service.reopen_goal(db, goal_id, config=config)
        db.commit()
        db.refresh(goal)
        return _transition(goal, entries)
    except (GoalRuleViolation, PointsRuleViolation) as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
