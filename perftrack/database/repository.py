"""Repository layer for task database operations."""

import logging
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import desc, update

from perftrack.models.task import Task
from perftrack.database.models import TaskDB, enum_to_value

logger = logging.getLogger(__name__)

# Columns a transition may never rewrite
_IMMUTABLE_COLUMNS = ("id", "project_id", "created_by", "created_at")


class TaskRepository:
    """Repository for Task database operations.

    Task ids map to Task records. Status changes go through
    ``compare_and_set`` so each transition is applied atomically against the
    status it was computed from.
    """

    def __init__(self, db: Session):
        self.db = db

    def add(self, task: Task) -> None:
        """Stage a new task in the current transaction (caller commits)."""
        self.db.add(TaskDB.from_pydantic(task))
        self.db.flush()

    def create(self, task: Task) -> Task:
        """Create a new task."""
        try:
            self.add(task)
            self.db.commit()
            logger.debug(f"Created task {task.id}: {task.title[:50]}")
            return self.get(task.id)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create task {task.id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, task_id: str) -> Optional[Task]:
        """Get task by ID."""
        task_db = (
            self.db.query(TaskDB)
            .filter(TaskDB.id == task_id)
            .populate_existing()
            .first()
        )
        return task_db.to_pydantic() if task_db else None

    def get_all(
        self,
        status: Optional[str] = None,
        assignee_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> List[Task]:
        """Get tasks, newest first, optionally filtered.

        A single SELECT, so callers folding over the result see one consistent
        snapshot of the task set.
        """
        query = self.db.query(TaskDB).populate_existing()
        if status is not None:
            query = query.filter(TaskDB.status == enum_to_value(status))
        if assignee_id is not None:
            query = query.filter(TaskDB.assignee_id == assignee_id)
        if project_id is not None:
            query = query.filter(TaskDB.project_id == project_id)
        tasks_db = query.order_by(desc(TaskDB.created_at), TaskDB.id).all()
        return [task_db.to_pydantic() for task_db in tasks_db]

    def get_for_project(self, project_id: str) -> List[Task]:
        return self.get_all(project_id=project_id)

    def compare_and_set(self, task: Task, expected_status: str) -> bool:
        """Stage ``task`` only if the stored status still equals ``expected_status``.

        Issued as a single conditional UPDATE, so of two writers racing from
        the same status exactly one sees an affected row. The caller commits
        or rolls back.

        Returns:
            True if the row was updated, False if the status had moved on
            (or the task does not exist)
        """
        values = TaskDB.values_from_pydantic(task)
        for column in _IMMUTABLE_COLUMNS:
            values.pop(column)
        result = self.db.execute(
            update(TaskDB)
            .where(TaskDB.id == task.id, TaskDB.status == enum_to_value(expected_status))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        swapped = result.rowcount == 1
        if not swapped:
            logger.debug(f"Conditional write on task {task.id} missed (expected status '{enum_to_value(expected_status)}')")
        return swapped
