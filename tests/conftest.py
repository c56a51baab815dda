"""Shared fixtures: an in-memory SQLite database and a wired FastAPI client."""

import os
from datetime import datetime

os.environ.setdefault("ROADMAP_DATABASE_URL", "sqlite://")
os.environ.setdefault("ROADMAP_SCHEDULER_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from roadmap.core.config import PointsConfig, get_points_config
from roadmap.core.database import Base, get_db
from roadmap.main import app
from roadmap.models import Student
from roadmap.services import goal_service, ledger_service, student_service


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    yield factory
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def config():
    return PointsConfig()


@pytest.fixture
def client(session_factory, config):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_points_config] = lambda: config
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_student(session):
    def _make(name="Student"):
        return student_service.create_student(session, name=name)

    return _make


@pytest.fixture
def make_goal(session):
    def _make(student, title="Goal", target_date=None, created_at=datetime(2025, 1, 1)):
        goal = goal_service.create_goal(
            session,
            student_id=student.id,
            title=title,
            target_date=target_date,
        )
        goal.created_at = created_at
        session.flush()
        return goal

    return _make


def cached_points(session, student_id):
    """Read Student.points straight from the database."""
    return session.execute(select(Student.points).where(Student.id == student_id)).scalar_one()


def assert_cache_matches_ledger(session, student_id):
    assert cached_points(session, student_id) == ledger_service.ledger_sum(session, student_id)
