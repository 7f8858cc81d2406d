"""Data models for perftrack."""

from perftrack.models.task import Task, TaskStatus, Difficulty, TaskPriority
from perftrack.models.user import User, UserRole, MANAGER_ROLES
from perftrack.models.project import Project, ProjectStatus, Team
from perftrack.models.report import ScoreReport, ScoreTask, DashboardStats, ProjectProgress, TeamSummary, MemberScore
from perftrack.models.scoring_rules import ScoringRules, load_scoring_rules

__all__ = [
    "Task",
    "TaskStatus",
    "Difficulty",
    "TaskPriority",
    "User",
    "UserRole",
    "MANAGER_ROLES",
    "Project",
    "ProjectStatus",
    "Team",
    "ScoreReport",
    "ScoreTask",
    "DashboardStats",
    "ProjectProgress",
    "TeamSummary",
    "MemberScore",
    "ScoringRules",
    "load_scoring_rules",
]
