"""Lifecycle and scoring engine for perftrack."""

from perftrack.engine.scoring import compute_score, days_late, score_floor, ScoreBreakdown
from perftrack.engine.lifecycle import claim, start, submit, approve, reject, block, unblock, REQUIRED_STATUS
from perftrack.engine.aggregation import (
    monthly_score,
    productivity,
    team_total_score,
    project_progress,
    build_score_report,
    build_dashboard_stats,
    upcoming_tasks,
)

__all__ = [
    "compute_score",
    "days_late",
    "score_floor",
    "ScoreBreakdown",
    "claim",
    "start",
    "submit",
    "approve",
    "reject",
    "block",
    "unblock",
    "REQUIRED_STATUS",
    "monthly_score",
    "productivity",
    "team_total_score",
    "project_progress",
    "build_score_report",
    "build_dashboard_stats",
    "upcoming_tasks",
]
