"""Pytest fixtures and configuration for perftrack tests."""

import pytest
from datetime import date, datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
import uuid

from perftrack.database.database import Base, get_db
from perftrack.database import models  # noqa: F401  (registers tables)
from perftrack.database.models import ProjectDB, TeamDB, UserDB
from perftrack.database.repository import TaskRepository
from perftrack.models.scoring_rules import ScoringRules
from perftrack.models.task import Task, TaskStatus, Difficulty, TaskPriority
from perftrack.models.task_factory import TaskSpec
from perftrack.models.user import User, UserRole
from perftrack.services.reporting import ReportingService
from perftrack.services.task_lifecycle import TaskLifecycleService


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

PM_ID = "pm-1"
OWNER_ID = "owner-1"
DEV_A = "dev-A"
DEV_B = "dev-B"
TEAM_ID = "team-1"
PROJECT_ID = "proj-1"


class FrozenClock:
    """Callable clock for services; tests move it forward explicitly."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, moment: datetime) -> None:
        self.now = moment

    def advance(self, days: int = 0, hours: int = 0) -> None:
        self.now = self.now + timedelta(days=days, hours=hours)


def seed_directory(session: Session) -> None:
    """Create a team, a project and one user per role of interest."""
    now = datetime(2024, 10, 1, 9, 0)
    session.add(TeamDB(id=TEAM_ID, name="Platform", description="", manager_id=PM_ID, created_at=now, updated_at=now))
    session.flush()
    users = [
        (OWNER_ID, "owner@example.com", "Olivia Owner", UserRole.OWNER.value, None),
        (PM_ID, "pm@example.com", "Pat Manager", UserRole.PM.value, TEAM_ID),
        (DEV_A, "dev.a@example.com", "Alex Developer", UserRole.DEVELOPER.value, TEAM_ID),
        (DEV_B, "dev.b@example.com", "Blake Developer", UserRole.DEVELOPER.value, TEAM_ID),
    ]
    for user_id, email, name, role, team_id in users:
        session.add(
            UserDB(
                id=user_id,
                email=email,
                name=name,
                role=role,
                team_id=team_id,
                monthly_score=0.0,
                monthly_target=50.0,
                created_at=now,
                updated_at=now,
            )
        )
    session.add(
        ProjectDB(
            id=PROJECT_ID,
            name="Customer Portal Redesign",
            description="Portal overhaul",
            team_id=TEAM_ID,
            status="in_progress",
            tasks_count=0,
            completed_tasks_count=0,
            created_at=now,
            updated_at=now,
        )
    )
    session.commit()


@pytest.fixture(scope="function")
def db_engine():
    """In-memory SQLite engine shared by every session of one test."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Create a database session seeded with a team, a project and users."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSessionLocal()
    seed_directory(session)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def task_repository(db_session: Session):
    """Create a TaskRepository instance for testing."""
    return TaskRepository(db_session)


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 11, 1, 9, 0))


@pytest.fixture
def rules():
    return ScoringRules(penalty_per_day=1, minimum_floor_percent=20, default_monthly_target=50)


@pytest.fixture
def lifecycle_service(db_session, rules, clock):
    return TaskLifecycleService(db_session, rules=rules, clock=clock)


@pytest.fixture
def reporting_service(db_session, clock):
    return ReportingService(db_session, clock=clock)


@pytest.fixture
def task_spec():
    """Creation spec for an unassigned 5-point task due 2024-11-10."""
    return TaskSpec(
        project_id=PROJECT_ID,
        title="Implement login page",
        description="OAuth and password login",
        story_points=5,
        due_date=date(2024, 11, 10),
        tags=["frontend", "auth"],
    )


def make_user(user_id: str, role: UserRole, target: float = 50.0) -> User:
    now = datetime(2024, 10, 1, 9, 0)
    return User(
        id=user_id,
        email=f"{user_id}@example.com",
        name=user_id,
        role=role,
        monthly_target=target,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def pm_user():
    return make_user(PM_ID, UserRole.PM)


@pytest.fixture
def dev_a():
    return make_user(DEV_A, UserRole.DEVELOPER)


@pytest.fixture
def dev_b():
    return make_user(DEV_B, UserRole.DEVELOPER)


@pytest.fixture
def sample_task_base():
    """Base task data for creating test tasks.

    Returns a dict with default task attributes that can be overridden.
    """
    now = datetime(2024, 11, 1, 9, 0)
    return {
        "id": str(uuid.uuid4()),
        "project_id": PROJECT_ID,
        "team_id": TEAM_ID,
        "created_by": PM_ID,
        "assignee_id": None,
        "title": "Test Task",
        "description": "Test description",
        "status": TaskStatus.AVAILABLE,
        "story_points": 5,
        "difficulty": Difficulty.MEDIUM,
        "priority": TaskPriority.MEDIUM,
        "base_score": 10,
        "due_date": date(2024, 11, 10),
        "tags": [],
        "created_at": now,
        "updated_at": now,
    }


@pytest.fixture
def sample_task(sample_task_base):
    """An available, unassigned task worth 10 points."""
    return Task(**sample_task_base)


@pytest.fixture
def review_task(sample_task_base):
    """A task assigned to dev-A and waiting for review."""
    return Task(**{
        **sample_task_base,
        "status": TaskStatus.REVIEW,
        "assignee_id": DEV_A,
        "assigned_at": datetime(2024, 11, 2, 9, 0),
    })


@pytest.fixture
def test_client(db_session: Session):
    """Create a FastAPI test client with overridden database dependency."""
    from perftrack.api.app import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
