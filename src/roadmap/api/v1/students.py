"""Student endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...schemas import StudentCreate, StudentRead
from ...services import student_service
from ...services.student_service import StudentNotFound

router = APIRouter(prefix="/students", tags=["students"])


@router.post(
    "",
    response_model=StudentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register a student",
)
def create_student(
    payload: StudentCreate,
    db: Session = Depends(get_db),
) -> StudentRead:
    """Register a student with an empty points balance.

    Example request body::

        {"name": "Amaya Perera"}
    """

    student = student_service.create_student(db, name=payload.name)
    db.commit()
    db.refresh(student)
    return student


@router.get("", response_model=List[StudentRead], summary="List students")
def list_students(
    *,
    limit: int = Query(50, ge=1, le=100, description="Maximum items to return"),
    offset: int = Query(0, ge=0, description="Items to skip for pagination"),
    db: Session = Depends(get_db),
) -> List[StudentRead]:
    return list(student_service.list_students(db, limit=limit, offset=offset))


@router.get(
    "/{student_id}",
    response_model=StudentRead,
    summary="Fetch a student",
    responses={404: {"description": "Student not found"}},
)
def get_student(student_id: int, db: Session = Depends(get_db)) -> StudentRead:
    try:
        return student_service.get_student(db, student_id)
    except StudentNotFound as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
