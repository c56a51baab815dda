"""Leaderboard endpoint."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...schemas import LeaderboardStudent
from ...services import leaderboard_service

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.get(
    "",
    response_model=List[LeaderboardStudent],
    summary="Students ranked by points balance",
    responses={
        200: {
            "description": "Leaderboard entries ordered by balance, then student id",
            "content": {
                "application/json": {
                    "example": [
                        {
                            "rank": 1,
                            "student_id": 1,
                            "name": "Amaya Perera",
                            "balance": 5,
                            "transaction_count": 3
                        }
                    ]
                }
            },
        }
    },
)
def get_leaderboard(
    limit: int = Query(10, ge=1, le=100, description="Number of students to return"),
    offset: int = Query(0, ge=0, description="Students to skip for pagination"),
    use_cache: bool = Query(False, description="Rank by cached student points instead of the ledger sum"),
    start_date: Optional[datetime] = Query(None, description="Rank by points moved at or after this time"),
    end_date: Optional[datetime] = Query(None, description="Rank by points moved at or before this time"),
    db: Session = Depends(get_db),
) -> List[LeaderboardStudent]:
    """Return a page of students ranked by points balance."""

    rows = leaderboard_service.get_leaderboard(
        db,
        limit=limit,
        offset=offset,
        use_cache=use_cache,
        start_date=start_date,
        end_date=end_date,
    )
    response: List[LeaderboardStudent] = []
    for position, (student, balance, transaction_count) in enumerate(rows, start=1):
        response.append(
            LeaderboardStudent(
                rank=offset + position,
                student_id=student.id,
                name=student.name,
                balance=int(balance or 0),
                transaction_count=int(transaction_count or 0),
            )
        )
    return response
