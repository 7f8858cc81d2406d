"""Task creation factory for perftrack.

This module centralizes task creation and validation so every task starts
from the same defaults and the same base score rule.
"""

import uuid
from datetime import date, datetime
from typing import Dict, Any, List, Optional

from pydantic import BaseModel, Field

from perftrack.errors import InvalidSpecError
from perftrack.models.task import Task, TaskStatus, Difficulty, TaskPriority
from perftrack.models.constants import (
    ALLOWED_STORY_POINTS,
    BASE_SCORE_PER_STORY_POINT,
    DEFAULT_DIFFICULTY,
    DEFAULT_PRIORITY,
)


class TaskSpec(BaseModel):
    """Input for task creation."""

    project_id: str
    title: str
    description: str = ""
    story_points: int
    due_date: date
    difficulty: Optional[Difficulty] = None
    priority: Optional[TaskPriority] = None
    tags: List[str] = Field(default_factory=list)
    assignee_id: Optional[str] = Field(None, description="Pre-assign to a developer (task starts in todo)")
    base_score: Optional[int] = Field(None, description="Must equal story_points * 2 when given")


def compute_base_score(story_points: int) -> int:
    """Base score is always story points times two."""
    return story_points * BASE_SCORE_PER_STORY_POINT


def normalize_tags(tags: List[str]) -> List[str]:
    """Strip, drop empties, deduplicate and sort tags."""
    return sorted({tag.strip() for tag in tags if tag and tag.strip()})


def validate_task_spec(spec: TaskSpec, today: date) -> None:
    """Reject specs with missing or out-of-range fields.

    Raises:
        InvalidSpecError: on the first problem found
    """
    if not spec.title or not spec.title.strip():
        raise InvalidSpecError("Task title is required")
    if spec.story_points not in ALLOWED_STORY_POINTS:
        raise InvalidSpecError(
            f"Story points must be one of {list(ALLOWED_STORY_POINTS)}, got {spec.story_points}"
        )
    if spec.due_date < today:
        raise InvalidSpecError(f"Due date {spec.due_date.isoformat()} is in the past")
    expected = compute_base_score(spec.story_points)
    if spec.base_score is not None and spec.base_score != expected:
        raise InvalidSpecError(
            f"Base score must be story_points * {BASE_SCORE_PER_STORY_POINT} ({expected}), got {spec.base_score}"
        )


def create_task_defaults() -> Dict[str, Any]:
    """Get default task values as a dictionary."""
    return {
        "status": TaskStatus.AVAILABLE,
        "difficulty": DEFAULT_DIFFICULTY,
        "priority": DEFAULT_PRIORITY,
        "assignee_id": None,
        "assigned_at": None,
    }


def create_task_base(
    spec: TaskSpec,
    created_by: str,
    team_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Task:
    """Create a validated task from a creation spec.

    A task with an assignee starts in ``todo`` with ``assigned_at`` set;
    otherwise it starts ``available`` with no assignee.

    Args:
        spec: Creation input
        created_by: ID of the creating PM
        team_id: Team of the owning project
        now: Creation timestamp (defaults to utcnow)

    Returns:
        Task object with defaults applied

    Raises:
        InvalidSpecError: if the input fails validation
    """
    now = now or datetime.utcnow()
    validate_task_spec(spec, now.date())
    defaults = create_task_defaults()

    status = defaults["status"]
    assigned_at = defaults["assigned_at"]
    if spec.assignee_id:
        status = TaskStatus.TODO
        assigned_at = now

    return Task(
        id=str(uuid.uuid4()),
        project_id=spec.project_id,
        team_id=team_id,
        created_by=created_by,
        assignee_id=spec.assignee_id or defaults["assignee_id"],
        title=spec.title.strip(),
        description=spec.description,
        status=status,
        story_points=spec.story_points,
        difficulty=spec.difficulty if spec.difficulty is not None else defaults["difficulty"],
        priority=spec.priority if spec.priority is not None else defaults["priority"],
        base_score=compute_base_score(spec.story_points),
        due_date=spec.due_date,
        tags=normalize_tags(spec.tags),
        created_at=now,
        updated_at=now,
        assigned_at=assigned_at,
    )
