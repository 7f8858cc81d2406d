"""Project and team data models for perftrack."""

from datetime import date, datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class ProjectStatus(str, Enum):
    """Project status enumeration."""
    PLANNING = "planning"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"


class Project(BaseModel):
    """Project model.

    ``tasks_count`` and ``completed_tasks_count`` are caches maintained alongside
    task writes; ``progress`` is derived from them.
    """

    id: str = Field(..., description="Unique project identifier")
    name: str = Field(..., description="Project name")
    description: str = Field("", description="Project description")
    team_id: Optional[str] = Field(None, description="Owning team, if any")
    status: ProjectStatus = Field(ProjectStatus.PLANNING, description="Project status")
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    tasks_count: int = Field(0, ge=0, description="Cached number of tasks")
    completed_tasks_count: int = Field(0, ge=0, description="Cached number of completed tasks")
    created_at: datetime = Field(..., description="Project creation timestamp")
    updated_at: datetime = Field(..., description="Project last update timestamp")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @property
    def progress(self) -> float:
        if self.tasks_count == 0:
            return 0.0
        return self.completed_tasks_count / self.tasks_count * 100


class Team(BaseModel):
    """Team model. Total score is derived from member scores, never stored."""

    id: str = Field(..., description="Unique team identifier")
    name: str = Field(..., description="Team name")
    description: str = Field("", description="Team description")
    manager_id: Optional[str] = Field(None, description="Team manager user ID")
    created_at: datetime = Field(..., description="Team creation timestamp")
    updated_at: datetime = Field(..., description="Team last update timestamp")
