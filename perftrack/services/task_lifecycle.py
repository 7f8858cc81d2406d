"""Task lifecycle service: applies pure transitions atomically.

Each operation loads the records it needs, computes the next Task with a pure
transition from ``perftrack.engine.lifecycle``, then writes it with a
compare-and-set on the status it was computed from. Side effects on counter
caches (project task counts, user monthly score) are staged in the same
transaction, so an operation either fully applies or not at all.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from perftrack.database.project_repository import ProjectRepository
from perftrack.database.repository import TaskRepository
from perftrack.database.user_repository import UserRepository
from perftrack.engine import lifecycle
from perftrack.errors import InvalidTransitionError, NotFoundError, TaskUnavailableError
from perftrack.models.scoring_rules import ScoringRules, load_scoring_rules
from perftrack.models.task import Task
from perftrack.models.task_factory import TaskSpec, create_task_base
from perftrack.models.user import User

logger = logging.getLogger(__name__)


class TaskLifecycleService:
    """Create tasks and move them through their lifecycle."""

    def __init__(
        self,
        db: Session,
        rules: Optional[ScoringRules] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.db = db
        self.rules = rules or load_scoring_rules()
        self.clock = clock
        self.tasks = TaskRepository(db)
        self.users = UserRepository(db)
        self.projects = ProjectRepository(db)

    def _require_user(self, user_id: str) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def _require_task(self, task_id: str) -> Task:
        task = self.tasks.get(task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    def get_task(self, task_id: str) -> Task:
        return self._require_task(task_id)

    def list_tasks(
        self,
        status: Optional[str] = None,
        assignee_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> List[Task]:
        return self.tasks.get_all(status=status, assignee_id=assignee_id, project_id=project_id)

    def create_task(self, actor_id: str, spec: TaskSpec) -> Task:
        """Create a task in ``available``, or ``todo`` when pre-assigned.

        Raises:
            NotFoundError: unknown actor, project or assignee
            ForbiddenError: actor is not a manager role, or assignee is not a developer
            InvalidSpecError: invalid title, story points, due date or base score
        """
        actor = self._require_user(actor_id)
        lifecycle.require_manager(actor, "create tasks")
        project = self.projects.get(spec.project_id)
        if project is None:
            raise NotFoundError("Project", spec.project_id)
        if spec.assignee_id:
            assignee = self._require_user(spec.assignee_id)
            lifecycle.require_developer(assignee, "be assigned tasks")

        task = create_task_base(spec, created_by=actor.id, team_id=project.team_id, now=self.clock())
        try:
            self.tasks.add(task)
            self.projects.adjust_counters(project.id, tasks_delta=1)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create task {task.id}: {type(e).__name__}: {str(e)}")
            raise
        logger.info(f"Task {task.id} created in project {project.id} with status '{task.status}'")
        return self._require_task(task.id)

    def _apply(self, before: Task, after: Task, operation: str, side_effects: Callable[[], None] = None) -> Task:
        """Write ``after`` if ``before``'s status is still current, with side effects, atomically."""
        try:
            swapped = self.tasks.compare_and_set(after, before.status)
            if swapped:
                if side_effects is not None:
                    side_effects()
                self.db.commit()
            else:
                self.db.rollback()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to {operation} task {before.id}: {type(e).__name__}: {str(e)}")
            raise

        if not swapped:
            current = self.tasks.get(before.id)
            if current is None:
                raise NotFoundError("Task", before.id)
            if operation == "claim":
                logger.warning(f"Lost claim race on task {before.id} (now '{current.status}')")
                raise TaskUnavailableError(before.id, current.status)
            raise InvalidTransitionError(before.id, current.status, operation, lifecycle.REQUIRED_STATUS[operation])

        logger.info(f"Task {before.id}: {operation} ({before.status} -> {after.status})")
        return self._require_task(before.id)

    def claim_task(self, task_id: str, user_id: str) -> Task:
        """Developer claims an available task; exactly one concurrent claimer wins."""
        user = self._require_user(user_id)
        task = self._require_task(task_id)
        return self._apply(task, lifecycle.claim(task, user, self.clock()), "claim")

    def start_task(self, task_id: str, caller_id: str) -> Task:
        task = self._require_task(task_id)
        return self._apply(task, lifecycle.start(task, caller_id, self.clock()), "start")

    def submit_task(self, task_id: str, caller_id: str) -> Task:
        task = self._require_task(task_id)
        return self._apply(task, lifecycle.submit(task, caller_id, self.clock()), "submit")

    def approve_task(
        self,
        task_id: str,
        actor_id: str,
        score: Optional[float] = None,
        penalty: Optional[float] = None,
    ) -> Task:
        """Complete a task in review, stamp its score and roll it into the caches."""
        actor = self._require_user(actor_id)
        task = self._require_task(task_id)
        completed = lifecycle.approve(task, actor, self.rules, self.clock(), score=score, penalty=penalty)

        def roll_up():
            self.projects.adjust_counters(completed.project_id, completed_delta=1)
            self.users.add_monthly_score(completed.assignee_id, completed.final_score)

        return self._apply(task, completed, "approve", side_effects=roll_up)

    def reject_task(self, task_id: str, actor_id: str) -> Task:
        actor = self._require_user(actor_id)
        task = self._require_task(task_id)
        return self._apply(task, lifecycle.reject(task, actor, self.clock()), "reject")

    def block_task(self, task_id: str, actor_id: str) -> Task:
        actor = self._require_user(actor_id)
        task = self._require_task(task_id)
        return self._apply(task, lifecycle.block(task, actor, self.clock()), "block")

    def unblock_task(self, task_id: str, actor_id: str) -> Task:
        actor = self._require_user(actor_id)
        task = self._require_task(task_id)
        return self._apply(task, lifecycle.unblock(task, actor, self.clock()), "unblock")
