"""Read-only report projections returned by aggregation queries."""

from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class ScoreTask(BaseModel):
    """Score breakdown of one completed task."""

    task_id: str
    task_title: str
    base_score: int
    delay_penalty: float
    final_score: float
    completed_date: date
    due_date: date
    days_late: int


class ScoreReport(BaseModel):
    """Completed tasks for a user and month, with totals against target."""

    user_id: str
    user_name: Optional[str] = None
    month: str = Field(..., description="Reporting month as YYYY-MM")
    total_score: float
    target_score: float
    productivity: float
    tasks: List[ScoreTask] = Field(default_factory=list)


class DashboardStats(BaseModel):
    """Headline numbers for the dashboard (one user, or everyone)."""

    monthly_score: float = 0.0
    target_score: float = 0.0
    completed_tasks: int = 0
    pending_tasks: int = 0
    average_score: float = 0.0
    productivity: float = 0.0


class ProjectProgress(BaseModel):
    """Project counters recomputed from the task set."""

    project_id: str
    tasks_count: int
    completed_tasks_count: int
    progress: float


class MemberScore(BaseModel):
    user_id: str
    name: Optional[str] = None
    monthly_score: float
    monthly_target: float
    productivity: float


class TeamSummary(BaseModel):
    """Team rollup for a month."""

    team_id: str
    name: str
    month: str
    total_score: float
    members: List[MemberScore] = Field(default_factory=list)
    generated_at: datetime
