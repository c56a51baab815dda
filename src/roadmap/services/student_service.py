"""Student registration and lookup."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import Student


class StudentNotFound(Exception):
    """Raised when a student id does not exist."""

    def __init__(self, student_id: int) -> None:
        self.detail = f"Student {student_id} not found"
        self.status_code = 404
        super().__init__(self.detail)


def create_student(session: Session, *, name: str) -> Student:
    student = Student(name=name, points=0)
    session.add(student)
    session.flush()
    session.refresh(student)
    return student


def get_student(session: Session, student_id: int) -> Student:
    student = session.get(Student, student_id)
    if student is None:
        raise StudentNotFound(student_id)
    return student


def list_students(session: Session, *, limit: int = 50, offset: int = 0) -> Sequence[Student]:
    stmt = select(Student).order_by(Student.id.asc()).offset(offset).limit(limit)
    return session.execute(stmt).scalars().all()
