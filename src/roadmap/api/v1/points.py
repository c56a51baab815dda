"""Points ledger endpoints: balances, history and manual adjustments."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ...core.config import PointsConfig, get_points_config
from ...core.database import get_db
from ...schemas import (
    BalanceRead,
    BulkAward,
    BulkAwardFailure,
    BulkAwardReceipt,
    LedgerEntryRead,
    LedgerHistory,
    LedgerStatsRead,
    PointsChange,
    PointsReceipt,
)
from ...services import balance_service, ledger_service, points_service
from ...services.balance_service import REASON_AWARDED, REASON_PENALTY, REASON_REDEEMED
from ...services.ledger_service import PointsRuleViolation
from ...services.points_service import AwardRequest

router = APIRouter(prefix="/points", tags=["points"])


def _receipt(entry, balance) -> PointsReceipt:
    return PointsReceipt(
        entry=LedgerEntryRead.model_validate(entry),
        balance=BalanceRead.model_validate(balance),
    )


@router.get(
    "/{student_id}/balance",
    response_model=BalanceRead,
    summary="Current points balance",
    responses={
        200: {
            "description": "Balance computed from the ledger",
            "content": {
                "application/json": {
                    "example": {
                        "student_id": 1,
                        "total_earned": 5,
                        "total_spent": 0,
                        "current_balance": 5,
                        "transaction_count": 3,
                        "last_transaction_at": "2025-10-05T16:00:00",
                        "breakdown": {"earned": 4, "bonus": 1, "redeemed": 0, "penalty": 0},
                    }
                }
            },
        },
        404: {"description": "Student not found"},
    },
)
def get_balance(
    student_id: int,
    *,
    start_date: Optional[datetime] = Query(None, description="Only fold entries created at or after this time"),
    end_date: Optional[datetime] = Query(None, description="Only fold entries created at or before this time"),
    db: Session = Depends(get_db),
) -> BalanceRead:
    try:
        balance = balance_service.get_balance(db, student_id, start_date=start_date, end_date=end_date)
    except PointsRuleViolation as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
    return BalanceRead.model_validate(balance)


@router.get(
    "/{student_id}/history",
    response_model=LedgerHistory,
    summary="Ledger entries in append order",
    responses={404: {"description": "Student not found"}},
)
def get_history(
    student_id: int,
    *,
    limit: int = Query(50, ge=1, le=500, description="Maximum items to return"),
    offset: int = Query(0, ge=0, description="Items to skip for pagination"),
    db: Session = Depends(get_db),
) -> LedgerHistory:
    try:
        ledger_service.ensure_student(db, student_id)
    except PointsRuleViolation as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc

    entries = ledger_service.list_by_student(db, student_id, limit=limit, offset=offset)
    return LedgerHistory(
        student_id=student_id,
        entries=[LedgerEntryRead.model_validate(entry) for entry in entries],
        total_count=ledger_service.count_by_student(db, student_id),
    )


@router.post(
    "/award",
    response_model=PointsReceipt,
    status_code=status.HTTP_201_CREATED,
    summary="Award points",
    responses={400: {"description": "Invalid amount"}, 404: {"description": "Student not found"}},
)
def award_points(
    payload: PointsChange,
    db: Session = Depends(get_db),
    config: PointsConfig = Depends(get_points_config),
) -> PointsReceipt:
    """Credit points outside the goal rules.

    Example request body::

        {"student_id": 1, "points": 4, "reason": "Helped a classmate"}
    """

    try:
        entry, balance = points_service.award_points(
            db,
            student_id=payload.student_id,
            points=payload.points,
            reason=payload.reason or REASON_AWARDED,
            config=config,
        )
        db.commit()
        return _receipt(entry, balance)
    except PointsRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.post(
    "/redeem",
    response_model=PointsReceipt,
    status_code=status.HTTP_201_CREATED,
    summary="Redeem points",
    responses={
        400: {"description": "Invalid amount or insufficient balance"},
        404: {"description": "Student not found"},
    },
)
def redeem_points(
    payload: PointsChange,
    db: Session = Depends(get_db),
    config: PointsConfig = Depends(get_points_config),
) -> PointsReceipt:
    try:
        entry, balance = points_service.redeem_points(
            db,
            student_id=payload.student_id,
            points=payload.points,
            config=config,
            reason=payload.reason or REASON_REDEEMED,
        )
        db.commit()
        return _receipt(entry, balance)
    except PointsRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.post(
    "/penalty",
    response_model=PointsReceipt,
    status_code=status.HTTP_201_CREATED,
    summary="Apply a penalty",
    responses={400: {"description": "Invalid amount"}, 404: {"description": "Student not found"}},
)
def apply_penalty(
    payload: PointsChange,
    db: Session = Depends(get_db),
    config: PointsConfig = Depends(get_points_config),
) -> PointsReceipt:
    try:
        entry, balance = points_service.apply_penalty(
            db,
            student_id=payload.student_id,
            points=payload.points,
            reason=payload.reason or REASON_PENALTY,
            config=config,
        )
        db.commit()
        return _receipt(entry, balance)
    except PointsRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.post(
    "/bulk-award",
    response_model=BulkAwardReceipt,
    status_code=status.HTTP_201_CREATED,
    summary="Award points to several students",
)
def bulk_award(
    payload: BulkAward,
    db: Session = Depends(get_db),
    config: PointsConfig = Depends(get_points_config),
) -> BulkAwardReceipt:
    """Apply each award independently; rejected ones are reported, not raised.

    Example request body::

        {"awards": [{"student_id": 1, "points": 3}, {"student_id": 2, "points": 5, "reason": "Science fair"}]}
    """

    requests = [
        AwardRequest(student_id=item.student_id, points=item.points, reason=item.reason)
        for item in payload.awards
    ]
    result = points_service.bulk_award(db, requests, config=config)
    db.commit()
    return BulkAwardReceipt(
        successful=[LedgerEntryRead.model_validate(entry) for entry in result.successful],
        failed=[
            BulkAwardFailure(
                request=PointsChange(
                    student_id=request.student_id,
                    points=request.points,
                    reason=request.reason,
                ),
                error=error,
            )
            for request, error in result.failed
        ],
        total_processed=result.total_processed,
    )


@router.get("/stats", response_model=LedgerStatsRead, summary="Ledger activity across all students")
def get_stats(
    *,
    start_date: Optional[datetime] = Query(None, description="Only count entries created at or after this time"),
    end_date: Optional[datetime] = Query(None, description="Only count entries created at or before this time"),
    db: Session = Depends(get_db),
) -> LedgerStatsRead:
    stats = balance_service.get_stats(db, start_date=start_date, end_date=end_date)
    return LedgerStatsRead.model_validate(stats)


@router.get(
    "/entries/{entry_id}",
    response_model=LedgerEntryRead,
    summary="A single ledger entry",
    responses={404: {"description": "Entry not found"}},
)
def get_entry(entry_id: int, db: Session = Depends(get_db)) -> LedgerEntryRead:
    try:
        return LedgerEntryRead.model_validate(ledger_service.get_entry(db, entry_id))
    except PointsRuleViolation as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
