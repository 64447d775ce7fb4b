"""Pytest fixtures and configuration for focalplan tests."""

import os

# Keep the app's own engine off the local database file
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

import pytest
from datetime import datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from focalplan.database.database import Base
from focalplan.database import models  # noqa: F401  (registers tables)
from focalplan.database.repository import TaskRepository, TodoRepository
from focalplan.models.task import TaskRecord
from focalplan.models.todo import TodoRecord
from focalplan.notifications import LoggingReminderScheduler


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

# Monday 2024-01-01 10:00, the reference "now" for most tests
FIXED_NOW = datetime(2024, 1, 1, 10, 0)


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def today():
    return FIXED_NOW.date()


@pytest.fixture(scope="function")
def db_session():
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    """
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def reminder_scheduler():
    return LoggingReminderScheduler()


@pytest.fixture
def task_repository(db_session: Session, reminder_scheduler):
    """Create a TaskRepository instance for testing."""
    return TaskRepository(db_session, reminder_scheduler)


@pytest.fixture
def todo_repository(db_session: Session, reminder_scheduler):
    """Create a TodoRepository instance for testing."""
    return TodoRepository(db_session, reminder_scheduler)


@pytest.fixture
def sample_task_base():
    """Base task data for creating test tasks.

    Returns a dict with default task attributes that can be overridden.
    """
    return {
        "title": "Test Task",
        "start_time": datetime(2024, 1, 1, 9, 0),
        "duration_seconds": 3600,
        "energy_level": 2,
        "created_at": FIXED_NOW - timedelta(days=1),
        "updated_at": FIXED_NOW - timedelta(days=1),
    }


@pytest.fixture
def sample_todo_base():
    """Base todo data for creating test todos."""
    return {
        "title": "Test Todo",
        "priority": "medium",
        "energy_level": 2,
        "created_at": FIXED_NOW - timedelta(days=1),
        "updated_at": FIXED_NOW - timedelta(days=1),
    }


@pytest.fixture
def make_task(sample_task_base):
    """Factory for TaskRecords built from sample_task_base."""
    def _make(**overrides):
        return TaskRecord(**{**sample_task_base, **overrides})
    return _make


@pytest.fixture
def make_todo(sample_todo_base):
    """Factory for TodoRecords built from sample_todo_base."""
    def _make(**overrides):
        return TodoRecord(**{**sample_todo_base, **overrides})
    return _make


@pytest.fixture
def test_client(db_session: Session, reminder_scheduler):
    """Create a FastAPI test client with overridden database, clock and reminders."""
    from focalplan.api.app import app, get_now, get_reminder_scheduler
    from focalplan.database.database import get_db

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # The db_session fixture closes the session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_now] = lambda: FIXED_NOW
    app.dependency_overrides[get_reminder_scheduler] = lambda: reminder_scheduler

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
