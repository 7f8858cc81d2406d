"""SQLAlchemy database models for perftrack."""

from datetime import datetime
import uuid
from typing import Union, TypeVar, Type
from sqlalchemy import Column, String, Integer, Float, Date, DateTime, JSON, ForeignKey, Index

from perftrack.database.database import Base
from perftrack.models.task import TaskStatus, Difficulty, TaskPriority
from perftrack.models.user import UserRole
from perftrack.models.project import ProjectStatus

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T]) -> str:
    """Convert enum to string value (handles both enum and string).

    Args:
        enum_obj: Enum instance or string value

    Returns:
        String value of the enum, or the string itself if already a string
    """
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


def value_to_enum(value: str, enum_class: Type[T], default: T) -> T:
    """Convert string to enum with fallback to default.

    Args:
        value: String value to convert
        enum_class: Enum class to convert to
        default: Default enum value if conversion fails

    Returns:
        Enum instance, or default if conversion fails
    """
    if not value:
        return default
    try:
        return enum_class(value.lower())
    except (ValueError, AttributeError):
        return default


class TeamDB(Base):
    """Database model for Team."""

    __tablename__ = "teams"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    manager_id = Column(String, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from perftrack.models.project import Team
        return Team(
            id=self.id,
            name=self.name,
            description=self.description or "",
            manager_id=self.manager_id,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, team):
        """Create database model from Pydantic model."""
        return cls(
            id=team.id,
            name=team.name,
            description=team.description,
            manager_id=team.manager_id,
            created_at=team.created_at,
            updated_at=team.updated_at,
        )


class UserDB(Base):
    """Database model for User."""

    __tablename__ = "users"

    id = Column(String, primary_key=True)

    # User profile
    email = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=True)
    role = Column(String, nullable=False, default=UserRole.DEVELOPER.value)
    team_id = Column(String, ForeignKey("teams.id", ondelete="SET NULL"), nullable=True, index=True)

    # Scoring (monthly_score is a cache of the active period)
    monthly_score = Column(Float, nullable=False, default=0.0)
    monthly_target = Column(Float, nullable=False, default=50.0)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from perftrack.models.user import User
        return User(
            id=self.id,
            email=self.email,
            name=self.name,
            role=value_to_enum(self.role, UserRole, UserRole.DEVELOPER),
            team_id=self.team_id,
            monthly_score=self.monthly_score or 0.0,
            monthly_target=self.monthly_target,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, user):
        """Create database model from Pydantic model."""
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            role=enum_to_value(user.role),
            team_id=user.team_id,
            monthly_score=user.monthly_score,
            monthly_target=user.monthly_target,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class ProjectDB(Base):
    """Database model for Project."""

    __tablename__ = "projects"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    team_id = Column(String, ForeignKey("teams.id", ondelete="SET NULL"), nullable=True, index=True)
    status = Column(String, nullable=False, default=ProjectStatus.PLANNING.value)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)

    # Counter caches, kept in step with task writes
    tasks_count = Column(Integer, nullable=False, default=0)
    completed_tasks_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from perftrack.models.project import Project
        return Project(
            id=self.id,
            name=self.name,
            description=self.description or "",
            team_id=self.team_id,
            status=value_to_enum(self.status, ProjectStatus, ProjectStatus.PLANNING),
            start_date=self.start_date,
            end_date=self.end_date,
            tasks_count=self.tasks_count,
            completed_tasks_count=self.completed_tasks_count,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, project):
        """Create database model from Pydantic model."""
        return cls(
            id=project.id,
            name=project.name,
            description=project.description,
            team_id=project.team_id,
            status=enum_to_value(project.status),
            start_date=project.start_date,
            end_date=project.end_date,
            tasks_count=project.tasks_count,
            completed_tasks_count=project.completed_tasks_count,
            created_at=project.created_at,
            updated_at=project.updated_at,
        )


class TaskDB(Base):
    """Database model for Task."""

    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_assignee_completed", "assignee_id", "completed_at"),
    )

    # Primary key
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # Ownership
    project_id = Column(String, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    team_id = Column(String, nullable=True, index=True)
    created_by = Column(String, ForeignKey("users.id"), nullable=False)
    assignee_id = Column(String, ForeignKey("users.id"), nullable=True, index=True)

    # Basic fields
    title = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    status = Column(String, nullable=False, default=TaskStatus.AVAILABLE.value, index=True)
    blocked_from = Column(String, nullable=True)
    story_points = Column(Integer, nullable=False)
    difficulty = Column(String, nullable=False, default=Difficulty.MEDIUM.value)
    priority = Column(String, nullable=False, default=TaskPriority.MEDIUM.value)
    base_score = Column(Integer, nullable=False)
    due_date = Column(Date, nullable=False, index=True)

    # Tags (stored as JSON array)
    tags = Column(JSON, nullable=False, default=list)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    assigned_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)

    # Scoring (set on completion only)
    final_score = Column(Float, nullable=True)
    delay_penalty = Column(Float, nullable=True)
    days_late = Column(Integer, nullable=True)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from perftrack.models.task import Task
        return Task(
            id=self.id,
            project_id=self.project_id,
            team_id=self.team_id,
            created_by=self.created_by,
            assignee_id=self.assignee_id,
            title=self.title,
            description=self.description or "",
            status=value_to_enum(self.status, TaskStatus, TaskStatus.AVAILABLE),
            blocked_from=value_to_enum(self.blocked_from, TaskStatus, None),
            story_points=self.story_points,
            difficulty=value_to_enum(self.difficulty, Difficulty, Difficulty.MEDIUM),
            priority=value_to_enum(self.priority, TaskPriority, TaskPriority.MEDIUM),
            base_score=self.base_score,
            due_date=self.due_date,
            tags=self.tags or [],
            created_at=self.created_at,
            updated_at=self.updated_at,
            assigned_at=self.assigned_at,
            completed_at=self.completed_at,
            final_score=self.final_score,
            delay_penalty=self.delay_penalty,
            days_late=self.days_late,
        )

    @staticmethod
    def values_from_pydantic(task) -> dict:
        """Column values for a Pydantic task (used for inserts and conditional updates)."""
        return {
            "id": task.id,
            "project_id": task.project_id,
            "team_id": task.team_id,
            "created_by": task.created_by,
            "assignee_id": task.assignee_id,
            "title": task.title,
            "description": task.description,
            "status": enum_to_value(task.status),
            "blocked_from": enum_to_value(task.blocked_from) if task.blocked_from else None,
            "story_points": task.story_points,
            "difficulty": enum_to_value(task.difficulty),
            "priority": enum_to_value(task.priority),
            "base_score": task.base_score,
            "due_date": task.due_date,
            "tags": list(task.tags),
            "created_at": task.created_at,
            "updated_at": task.updated_at,
            "assigned_at": task.assigned_at,
            "completed_at": task.completed_at,
            "final_score": task.final_score,
            "delay_penalty": task.delay_penalty,
            "days_late": task.days_late,
        }

    @classmethod
    def from_pydantic(cls, task):
        """Create database model from Pydantic model."""
        return cls(**cls.values_from_pydantic(task))
