"""Aggregation queries over scored tasks.

All functions are pure: they take a snapshot of tasks (and users) and return
numbers or report records. Every dashboard, report and rollup goes through
these so that filtering rules live in one place.
"""

from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from perftrack.errors import InvalidSpecError, InvalidTargetError
from perftrack.models.constants import MONTH_FORMAT, UPCOMING_TASKS_LIMIT
from perftrack.models.project import Team
from perftrack.models.report import (
    DashboardStats,
    MemberScore,
    ProjectProgress,
    ScoreReport,
    ScoreTask,
    TeamSummary,
)
from perftrack.models.task import Task, TaskStatus
from perftrack.models.user import User


def parse_month(month: str) -> Tuple[int, int]:
    """Parse a ``YYYY-MM`` month string into (year, month).

    Raises:
        InvalidSpecError: if the string is not a valid month
    """
    try:
        parsed = datetime.strptime(month, MONTH_FORMAT)
    except (TypeError, ValueError):
        raise InvalidSpecError(f"Month must be formatted as YYYY-MM, got {month!r}")
    return parsed.year, parsed.month


def month_of(moment: datetime) -> str:
    return moment.strftime(MONTH_FORMAT)


def completed_in_month(tasks: Iterable[Task], user_id: Optional[str], month: str) -> List[Task]:
    """Completed tasks whose completion falls in ``month``, oldest first.

    ``user_id=None`` includes every assignee.
    """
    year, mon = parse_month(month)
    selected = [
        task for task in tasks
        if task.status == TaskStatus.COMPLETED
        and task.completed_at is not None
        and task.completed_at.year == year
        and task.completed_at.month == mon
        and (user_id is None or task.assignee_id == user_id)
    ]
    return sorted(selected, key=lambda t: (t.completed_at, t.id))


def monthly_score(tasks: Iterable[Task], user_id: Optional[str], month: str) -> float:
    """Sum of final scores for a user's tasks completed in ``month``."""
    return sum(task.final_score or 0.0 for task in completed_in_month(tasks, user_id, month))


def productivity(score: float, target: float) -> float:
    """Score as a percentage of target.

    Raises:
        InvalidTargetError: if target is zero or negative
    """
    if target <= 0:
        raise InvalidTargetError(f"Monthly target must be positive, got {target}")
    return score / target * 100


def average_score(tasks: Sequence[Task]) -> float:
    if not tasks:
        return 0.0
    return sum(task.final_score or 0.0 for task in tasks) / len(tasks)


def pending_tasks(tasks: Iterable[Task], user_id: Optional[str] = None) -> List[Task]:
    """Tasks not yet completed; restricted to one assignee when ``user_id`` is given."""
    return [
        task for task in tasks
        if task.status != TaskStatus.COMPLETED
        and (user_id is None or task.assignee_id == user_id)
    ]


def team_total_score(tasks: Iterable[Task], member_ids: Iterable[str], month: str) -> float:
    """Sum of monthly scores over the team's current members."""
    members = set(member_ids)
    completed = completed_in_month(tasks, None, month)
    return sum(task.final_score or 0.0 for task in completed if task.assignee_id in members)


def project_counters(tasks: Iterable[Task], project_id: str) -> Tuple[int, int]:
    """(tasks_count, completed_tasks_count) recomputed from the task set."""
    total = 0
    completed = 0
    for task in tasks:
        if task.project_id != project_id:
            continue
        total += 1
        if task.status == TaskStatus.COMPLETED:
            completed += 1
    return total, completed


def project_progress(tasks: Iterable[Task], project_id: str) -> float:
    """Completed share of a project's tasks as a percentage (0 for an empty project)."""
    total, completed = project_counters(tasks, project_id)
    if total == 0:
        return 0.0
    return completed / total * 100


def build_project_progress(tasks: Iterable[Task], project_id: str) -> ProjectProgress:
    total, completed = project_counters(tasks, project_id)
    return ProjectProgress(
        project_id=project_id,
        tasks_count=total,
        completed_tasks_count=completed,
        progress=completed / total * 100 if total else 0.0,
    )


def build_score_report(tasks: Iterable[Task], user: User, month: str) -> ScoreReport:
    """Score report for one user and month."""
    completed = completed_in_month(tasks, user.id, month)
    total = sum(task.final_score or 0.0 for task in completed)
    return ScoreReport(
        user_id=user.id,
        user_name=user.name,
        month=month,
        total_score=total,
        target_score=user.monthly_target,
        productivity=productivity(total, user.monthly_target),
        tasks=[
            ScoreTask(
                task_id=task.id,
                task_title=task.title,
                base_score=task.base_score,
                delay_penalty=task.delay_penalty or 0.0,
                final_score=task.final_score or 0.0,
                completed_date=task.completed_at.date(),
                due_date=task.due_date,
                days_late=task.days_late or 0,
            )
            for task in completed
        ],
    )


def build_dashboard_stats(
    tasks: Sequence[Task],
    month: str,
    user: Optional[User] = None,
    users: Optional[Sequence[User]] = None,
) -> DashboardStats:
    """Dashboard numbers for one user, or for everyone when ``user`` is None.

    For everyone, the target is the sum of all users' targets; with no users
    at all there is nothing to measure against and productivity is 0.
    """
    user_id = user.id if user else None
    completed = completed_in_month(tasks, user_id, month)
    score = sum(task.final_score or 0.0 for task in completed)

    if user is not None:
        target = user.monthly_target
        pct = productivity(score, target)
    else:
        target = sum(u.monthly_target for u in (users or []))
        pct = productivity(score, target) if users else 0.0

    return DashboardStats(
        monthly_score=score,
        target_score=target,
        completed_tasks=len(completed),
        pending_tasks=len(pending_tasks(tasks, user_id)),
        average_score=average_score(completed),
        productivity=pct,
    )


def upcoming_tasks(
    tasks: Iterable[Task],
    user_id: Optional[str] = None,
    limit: int = UPCOMING_TASKS_LIMIT,
) -> List[Task]:
    """Open tasks ordered by due date, soonest first."""
    pending = pending_tasks(tasks, user_id)
    return sorted(pending, key=lambda t: (t.due_date, t.created_at, t.id))[:limit]


def build_team_summary(
    team: Team,
    members: Sequence[User],
    tasks: Sequence[Task],
    month: str,
    now: datetime,
) -> TeamSummary:
    member_scores = []
    for member in members:
        score = monthly_score(tasks, member.id, month)
        member_scores.append(
            MemberScore(
                user_id=member.id,
                name=member.name,
                monthly_score=score,
                monthly_target=member.monthly_target,
                productivity=productivity(score, member.monthly_target),
            )
        )
    return TeamSummary(
        team_id=team.id,
        name=team.name,
        month=month,
        total_score=team_total_score(tasks, [m.id for m in members], month),
        members=member_scores,
        generated_at=now,
    )
