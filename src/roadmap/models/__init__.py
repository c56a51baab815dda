"""SQLAlchemy models for the Road Map service."""

from .goal import Goal
from .points_log import LedgerEntry
from .student import Student

__all__ = [
    "Goal",
    "LedgerEntry",
    "Student",
]
