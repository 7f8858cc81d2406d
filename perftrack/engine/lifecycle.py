"""Task lifecycle state machine for perftrack.

Legal path of a task:

    available -> todo -> in_progress -> review -> completed
                           ^                |
                           +---- reject ----+

``available`` is skipped for pre-assigned tasks. Any assigned, non-terminal
task may be blocked and later unblocked back to the status it left.

Every transition here is a pure function: it takes a Task and returns a new
Task, or raises a typed error. Applying the result atomically is the
repository's job.
"""

from datetime import datetime
from typing import Optional, Tuple

from perftrack.engine.scoring import compute_score
from perftrack.errors import ForbiddenError, InvalidSpecError, InvalidTransitionError, TaskUnavailableError
from perftrack.models.scoring_rules import ScoringRules
from perftrack.models.task import Task, TaskStatus
from perftrack.models.user import User, UserRole, MANAGER_ROLES


# Operation -> statuses it may start from
REQUIRED_STATUS = {
    "claim": (TaskStatus.AVAILABLE.value,),
    "start": (TaskStatus.TODO.value,),
    "submit": (TaskStatus.IN_PROGRESS.value,),
    "approve": (TaskStatus.REVIEW.value,),
    "reject": (TaskStatus.REVIEW.value,),
    "block": (TaskStatus.TODO.value, TaskStatus.IN_PROGRESS.value, TaskStatus.REVIEW.value),
    "unblock": (TaskStatus.BLOCKED.value,),
}


def _status_value(status) -> str:
    return status.value if hasattr(status, "value") else str(status)


def require_status(task: Task, operation: str) -> None:
    """Raise InvalidTransitionError unless the task may undergo ``operation``."""
    required: Tuple[str, ...] = REQUIRED_STATUS[operation]
    current = _status_value(task.status)
    if current not in required:
        raise InvalidTransitionError(task.id, current, operation, required)


def require_manager(actor: User, action: str) -> None:
    """Raise Forbidden unless the actor holds a manager role."""
    if _status_value(actor.role) not in MANAGER_ROLES:
        raise ForbiddenError(f"Role '{_status_value(actor.role)}' may not {action}")


def require_developer(user: User, action: str) -> None:
    """Raise Forbidden unless the user is a developer."""
    if _status_value(user.role) != UserRole.DEVELOPER.value:
        raise ForbiddenError(f"Only developers may {action} (user {user.id} is '{_status_value(user.role)}')")


def require_assignee(task: Task, caller_id: str, operation: str) -> None:
    """Raise Forbidden unless the caller is the task's assignee."""
    if task.assignee_id != caller_id:
        raise ForbiddenError(f"User {caller_id} is not the assignee of task {task.id} and may not {operation} it")


def _advance(task: Task, now: datetime, **updates) -> Task:
    return task.model_copy(update={**updates, "updated_at": now})


def claim(task: Task, user: User, now: datetime) -> Task:
    """Developer takes ownership of an available task."""
    require_developer(user, "claim tasks")
    if _status_value(task.status) not in REQUIRED_STATUS["claim"]:
        raise TaskUnavailableError(task.id, _status_value(task.status))
    return _advance(
        task,
        now,
        status=TaskStatus.TODO.value,
        assignee_id=user.id,
        assigned_at=now,
    )


def start(task: Task, caller_id: str, now: datetime) -> Task:
    """Assignee begins work on a todo task."""
    require_status(task, "start")
    require_assignee(task, caller_id, "start")
    return _advance(task, now, status=TaskStatus.IN_PROGRESS.value)


def submit(task: Task, caller_id: str, now: datetime) -> Task:
    """Assignee hands an in-progress task over for review."""
    require_status(task, "submit")
    require_assignee(task, caller_id, "submit")
    return _advance(task, now, status=TaskStatus.REVIEW.value)


def approve(
    task: Task,
    actor: User,
    rules: ScoringRules,
    now: datetime,
    score: Optional[float] = None,
    penalty: Optional[float] = None,
) -> Task:
    """Complete a task under review and stamp its final score.

    Args:
        task: Task in review
        actor: Approving manager
        rules: Scoring configuration
        now: Completion timestamp
        score: Optional override replacing the raw score (floor still applies)
        penalty: Optional per-day penalty rate replacing the configured rate
    """
    require_manager(actor, "approve tasks")
    require_status(task, "approve")
    if penalty is not None and penalty <= 0:
        raise InvalidSpecError(f"Penalty per day must be positive, got {penalty}")

    breakdown = compute_score(
        task.base_score,
        task.due_date,
        now,
        rules,
        override_score=score,
        penalty_per_day=penalty,
    )
    return _advance(
        task,
        now,
        status=TaskStatus.COMPLETED.value,
        completed_at=now,
        final_score=breakdown.final_score,
        delay_penalty=breakdown.delay_penalty,
        days_late=breakdown.days_late,
    )


def reject(task: Task, actor: User, now: datetime) -> Task:
    """Return a task under review to the assignee for rework."""
    require_manager(actor, "reject tasks")
    require_status(task, "reject")
    return _advance(task, now, status=TaskStatus.IN_PROGRESS.value)


def block(task: Task, actor: User, now: datetime) -> Task:
    """Administrative hold; remembers where the task came from."""
    require_manager(actor, "block tasks")
    require_status(task, "block")
    return _advance(
        task,
        now,
        status=TaskStatus.BLOCKED.value,
        blocked_from=_status_value(task.status),
    )


def unblock(task: Task, actor: User, now: datetime) -> Task:
    require_manager(actor, "unblock tasks")
    require_status(task, "unblock")
    # Unknown origin returns to todo
    previous = _status_value(task.blocked_from) if task.blocked_from else TaskStatus.TODO.value
    return _advance(task, now, status=previous, blocked_from=None)
