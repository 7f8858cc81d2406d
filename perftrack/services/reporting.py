"""Reporting service: read-only aggregation over a snapshot of the task set."""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from perftrack.database.project_repository import ProjectRepository, TeamRepository
from perftrack.database.repository import TaskRepository
from perftrack.database.user_repository import UserRepository
from perftrack.engine import aggregation
from perftrack.errors import NotFoundError
from perftrack.models.report import DashboardStats, ProjectProgress, ScoreReport, TeamSummary
from perftrack.models.task import Task
from perftrack.models.user import User

logger = logging.getLogger(__name__)


class ReportingService:
    """Score reports, dashboard stats and rollups."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = datetime.utcnow):
        self.db = db
        self.clock = clock
        self.tasks = TaskRepository(db)
        self.users = UserRepository(db)
        self.projects = ProjectRepository(db)
        self.teams = TeamRepository(db)

    def _month(self, month: Optional[str]) -> str:
        if month is None:
            return aggregation.month_of(self.clock())
        aggregation.parse_month(month)
        return month

    def _require_user(self, user_id: str) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def get_score_report(self, user_id: str, month: Optional[str] = None) -> ScoreReport:
        user = self._require_user(user_id)
        month = self._month(month)
        return aggregation.build_score_report(self.tasks.get_all(assignee_id=user.id), user, month)

    def get_dashboard_stats(self, user_id: Optional[str] = None, month: Optional[str] = None) -> DashboardStats:
        """Stats for one user, or across all users when ``user_id`` is None."""
        month = self._month(month)
        if user_id is not None:
            user = self._require_user(user_id)
            return aggregation.build_dashboard_stats(self.tasks.get_all(assignee_id=user.id), month, user=user)
        return aggregation.build_dashboard_stats(self.tasks.get_all(), month, users=self.users.get_all())

    def get_project_progress(self, project_id: str) -> ProjectProgress:
        if self.projects.get(project_id) is None:
            raise NotFoundError("Project", project_id)
        return aggregation.build_project_progress(self.tasks.get_for_project(project_id), project_id)

    def get_team_summary(self, team_id: str, month: Optional[str] = None) -> TeamSummary:
        team = self.teams.get(team_id)
        if team is None:
            raise NotFoundError("Team", team_id)
        month = self._month(month)
        members = self.users.get_team_members(team_id)
        return aggregation.build_team_summary(team, members, self.tasks.get_all(), month, self.clock())

    def get_upcoming_tasks(self, user_id: Optional[str] = None) -> List[Task]:
        if user_id is not None:
            self._require_user(user_id)
        return aggregation.upcoming_tasks(self.tasks.get_all(assignee_id=user_id), user_id)

    def refresh_monthly_scores(self, month: Optional[str] = None) -> Dict[str, float]:
        """Recompute every user's monthly score cache from the task set.

        Used at period rollover, or to repair the cache.
        """
        month = self._month(month)
        tasks = self.tasks.get_all()
        scores = {user.id: aggregation.monthly_score(tasks, user.id, month) for user in self.users.get_all()}
        self.users.set_monthly_scores(scores)
        logger.info(f"Refreshed monthly scores for {len(scores)} users ({month})")
        return scores
