"""Pydantic schemas for student endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class StudentCreate(BaseModel):
    """Request body for registering a student."""

    name: str = Field(..., min_length=1, max_length=255)


class StudentRead(BaseModel):
    """Student response payload."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    points: int
    created_at: datetime
