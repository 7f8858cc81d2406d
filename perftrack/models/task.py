"""Task data model for perftrack."""

from datetime import date, datetime
from typing import List, Optional
from enum import Enum
from pydantic import BaseModel, Field


class TaskStatus(str, Enum):
    """Task status enumeration (lifecycle order, plus the blocked side-state)."""
    AVAILABLE = "available"
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    COMPLETED = "completed"
    BLOCKED = "blocked"


class Difficulty(str, Enum):
    """Task difficulty enumeration."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class TaskPriority(str, Enum):
    """Task priority enumeration."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Task(BaseModel):
    """Canonical Task model."""

    id: str = Field(..., description="Unique task identifier (UUID v4)")
    project_id: str = Field(..., description="Project this task belongs to")
    team_id: Optional[str] = Field(None, description="Team of the owning project, if any")
    created_by: str = Field(..., description="User ID of the PM who created the task")
    assignee_id: Optional[str] = Field(None, description="Developer currently assigned (null while available)")
    title: str = Field(..., description="Task title")
    description: str = Field("", description="Task description")
    status: TaskStatus = Field(TaskStatus.AVAILABLE, description="Task status")
    blocked_from: Optional[TaskStatus] = Field(
        None, description="Status the task returns to when unblocked (set only while blocked)"
    )
    story_points: int = Field(..., description="Relative size estimate (1, 2, 3, 5, 8 or 13)")
    difficulty: Difficulty = Field(Difficulty.MEDIUM, description="Task difficulty")
    priority: TaskPriority = Field(TaskPriority.MEDIUM, description="Task priority")
    base_score: int = Field(..., ge=0, description="Points before any deadline penalty")
    due_date: date = Field(..., description="Due date (date-only)")
    tags: List[str] = Field(default_factory=list, description="Sorted unique tags")
    created_at: datetime = Field(..., description="Task creation timestamp")
    updated_at: datetime = Field(..., description="Task last update timestamp")
    assigned_at: Optional[datetime] = Field(None, description="When the current assignee took the task")
    completed_at: Optional[datetime] = Field(None, description="When the task was approved")

    # Populated only on completion
    final_score: Optional[float] = Field(None, ge=0.0, description="Score after penalty and floor")
    delay_penalty: Optional[float] = Field(None, le=0.0, description="Deadline penalty (zero or negative)")
    days_late: Optional[int] = Field(None, ge=0, description="Whole days completed after the due date")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED
