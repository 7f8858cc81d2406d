"""Tests for TaskRepository persistence and conditional writes."""

import pytest
from datetime import datetime, timedelta
import uuid

from perftrack.database.project_repository import ProjectRepository
from perftrack.database.user_repository import UserRepository
from perftrack.engine import lifecycle
from perftrack.models.task import Task, TaskStatus
from perftrack.models.user import UserRole

from conftest import DEV_A, DEV_B, PROJECT_ID, make_user


class TestTaskRepository:
    """Test TaskRepository CRUD operations."""

    def test_create_task(self, task_repository, sample_task):
        """Test creating a task."""
        created = task_repository.create(sample_task)

        assert created.id == sample_task.id
        assert created.title == sample_task.title
        assert created.status == TaskStatus.AVAILABLE
        assert created.due_date == sample_task.due_date

    def test_get_nonexistent_task(self, task_repository):
        """Test retrieving a nonexistent task returns None."""
        assert task_repository.get("nonexistent-id") is None

    def test_round_trip_keeps_score_fields(self, task_repository, sample_task_base):
        task = Task(**{
            **sample_task_base,
            "status": TaskStatus.COMPLETED,
            "assignee_id": DEV_A,
            "completed_at": datetime(2024, 11, 13, 10, 0),
            "final_score": 7.0,
            "delay_penalty": -3.0,
            "days_late": 3,
            "tags": ["api", "backend"],
        })
        task_repository.create(task)

        loaded = task_repository.get(task.id)
        assert loaded.final_score == 7.0
        assert loaded.delay_penalty == -3.0
        assert loaded.days_late == 3
        assert loaded.tags == ["api", "backend"]
        assert loaded.is_completed

    def test_get_all_sorted_by_creation_date(self, task_repository, sample_task_base):
        """Test that get_all() returns tasks sorted by creation date (newest first)."""
        now = datetime(2024, 11, 1, 9, 0)
        task1 = Task(**{**sample_task_base, "id": str(uuid.uuid4()), "created_at": now, "title": "Task 1"})
        task2 = Task(**{**sample_task_base, "id": str(uuid.uuid4()), "created_at": now - timedelta(minutes=1), "title": "Task 2"})
        task3 = Task(**{**sample_task_base, "id": str(uuid.uuid4()), "created_at": now - timedelta(minutes=2), "title": "Task 3"})

        # Create in reverse order
        task_repository.create(task3)
        task_repository.create(task2)
        task_repository.create(task1)

        all_tasks = task_repository.get_all()
        assert [t.title for t in all_tasks] == ["Task 1", "Task 2", "Task 3"]

    def test_get_all_filters(self, task_repository, sample_task_base):
        task_repository.create(Task(**{**sample_task_base, "id": str(uuid.uuid4()), "title": "Open"}))
        task_repository.create(Task(**{
            **sample_task_base,
            "id": str(uuid.uuid4()),
            "title": "Mine",
            "status": TaskStatus.TODO,
            "assignee_id": DEV_A,
        }))

        assert [t.title for t in task_repository.get_all(status=TaskStatus.TODO)] == ["Mine"]
        assert [t.title for t in task_repository.get_all(status="available")] == ["Open"]
        assert [t.title for t in task_repository.get_all(assignee_id=DEV_A)] == ["Mine"]
        assert len(task_repository.get_for_project(PROJECT_ID)) == 2
        assert task_repository.get_for_project("other") == []


class TestCompareAndSet:
    """Conditional writes keyed on the status a transition was computed from."""

    def test_swap_when_status_matches(self, db_session, task_repository, sample_task):
        task_repository.create(sample_task)
        claimed = lifecycle.claim(sample_task, make_user(DEV_A, UserRole.DEVELOPER), datetime(2024, 11, 2))

        assert task_repository.compare_and_set(claimed, TaskStatus.AVAILABLE) is True
        db_session.commit()

        stored = task_repository.get(sample_task.id)
        assert stored.status == TaskStatus.TODO
        assert stored.assignee_id == DEV_A

    def test_stale_write_misses(self, db_session, task_repository, sample_task):
        """Two claims computed from the same snapshot: only the first lands."""
        task_repository.create(sample_task)
        snapshot = task_repository.get(sample_task.id)
        now = datetime(2024, 11, 2)

        first = lifecycle.claim(snapshot, make_user(DEV_A, UserRole.DEVELOPER), now)
        second = lifecycle.claim(snapshot, make_user(DEV_B, UserRole.DEVELOPER), now)

        assert task_repository.compare_and_set(first, snapshot.status) is True
        db_session.commit()
        assert task_repository.compare_and_set(second, snapshot.status) is False
        db_session.rollback()

        assert task_repository.get(sample_task.id).assignee_id == DEV_A

    def test_missing_task_misses(self, task_repository, sample_task):
        assert task_repository.compare_and_set(sample_task, TaskStatus.AVAILABLE) is False

    def test_immutable_columns_are_not_rewritten(self, db_session, task_repository, sample_task):
        task_repository.create(sample_task)
        tampered = sample_task.model_copy(update={
            "status": TaskStatus.TODO,
            "assignee_id": DEV_A,
            "created_at": datetime(2030, 1, 1),
        })

        assert task_repository.compare_and_set(tampered, TaskStatus.AVAILABLE) is True
        db_session.commit()

        assert task_repository.get(sample_task.id).created_at == sample_task.created_at


class TestCounterRepositories:
    def test_adjust_project_counters(self, db_session):
        projects = ProjectRepository(db_session)
        projects.adjust_counters(PROJECT_ID, tasks_delta=2)
        projects.adjust_counters(PROJECT_ID, completed_delta=1)
        db_session.commit()

        project = projects.get(PROJECT_ID)
        assert project.tasks_count == 2
        assert project.completed_tasks_count == 1
        assert project.progress == pytest.approx(50.0)

    def test_add_and_reset_monthly_score(self, db_session):
        users = UserRepository(db_session)
        users.add_monthly_score(DEV_A, 7.0)
        users.add_monthly_score(DEV_A, 3.5)
        db_session.commit()
        assert users.get(DEV_A).monthly_score == 10.5

        users.set_monthly_scores({DEV_A: 0.0})
        assert users.get(DEV_A).monthly_score == 0.0

    def test_team_members(self, db_session):
        members = UserRepository(db_session).get_team_members("team-1")
        assert {m.id for m in members} == {"pm-1", DEV_A, DEV_B}
