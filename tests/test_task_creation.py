"""Tests for the task creation factory."""

import pytest
from datetime import date, datetime

from perftrack.errors import InvalidSpecError
from perftrack.models.task import TaskStatus, Difficulty, TaskPriority
from perftrack.models.task_factory import (
    TaskSpec,
    compute_base_score,
    create_task_base,
    normalize_tags,
)

from conftest import DEV_A, PM_ID, PROJECT_ID, TEAM_ID


NOW = datetime(2024, 11, 1, 9, 0)


class TestCreateTaskBase:
    """Task creation defaults and validation."""

    def test_unassigned_task_starts_available(self, task_spec):
        task = create_task_base(task_spec, created_by=PM_ID, team_id=TEAM_ID, now=NOW)

        assert task.status == TaskStatus.AVAILABLE
        assert task.assignee_id is None
        assert task.assigned_at is None
        assert task.project_id == PROJECT_ID
        assert task.team_id == TEAM_ID
        assert task.created_by == PM_ID
        assert task.created_at == NOW
        assert task.updated_at == NOW
        assert task.final_score is None

    def test_base_score_is_twice_story_points(self, task_spec):
        task = create_task_base(task_spec, created_by=PM_ID, now=NOW)
        assert task.base_score == 10

    def test_pre_assigned_task_starts_todo(self, task_spec):
        spec = task_spec.model_copy(update={"assignee_id": DEV_A})
        task = create_task_base(spec, created_by=PM_ID, now=NOW)

        assert task.status == TaskStatus.TODO
        assert task.assignee_id == DEV_A
        assert task.assigned_at == NOW

    def test_defaults_applied(self, task_spec):
        task = create_task_base(task_spec, created_by=PM_ID, now=NOW)
        assert task.difficulty == Difficulty.MEDIUM
        assert task.priority == TaskPriority.MEDIUM

    def test_explicit_difficulty_and_priority_kept(self, task_spec):
        spec = task_spec.model_copy(update={"difficulty": Difficulty.HARD, "priority": TaskPriority.URGENT})
        task = create_task_base(spec, created_by=PM_ID, now=NOW)
        assert task.difficulty == Difficulty.HARD
        assert task.priority == TaskPriority.URGENT

    def test_ids_are_unique(self, task_spec):
        first = create_task_base(task_spec, created_by=PM_ID, now=NOW)
        second = create_task_base(task_spec, created_by=PM_ID, now=NOW)
        assert first.id != second.id

    def test_tags_are_sorted_and_unique(self, task_spec):
        task = create_task_base(task_spec, created_by=PM_ID, now=NOW)
        assert task.tags == ["auth", "frontend"]

    def test_due_today_is_allowed(self, task_spec):
        spec = task_spec.model_copy(update={"due_date": NOW.date()})
        task = create_task_base(spec, created_by=PM_ID, now=NOW)
        assert task.due_date == NOW.date()


class TestTaskSpecValidation:
    @pytest.mark.parametrize("points", [0, 4, 7, 21, -1])
    def test_story_points_outside_allowed_set(self, task_spec, points):
        spec = task_spec.model_copy(update={"story_points": points})
        with pytest.raises(InvalidSpecError):
            create_task_base(spec, created_by=PM_ID, now=NOW)

    @pytest.mark.parametrize("points", [1, 2, 3, 5, 8, 13])
    def test_allowed_story_points(self, task_spec, points):
        spec = task_spec.model_copy(update={"story_points": points})
        assert create_task_base(spec, created_by=PM_ID, now=NOW).base_score == points * 2

    @pytest.mark.parametrize("title", ["", "   "])
    def test_blank_title(self, task_spec, title):
        spec = task_spec.model_copy(update={"title": title})
        with pytest.raises(InvalidSpecError):
            create_task_base(spec, created_by=PM_ID, now=NOW)

    def test_past_due_date(self, task_spec):
        spec = task_spec.model_copy(update={"due_date": date(2024, 10, 31)})
        with pytest.raises(InvalidSpecError) as exc_info:
            create_task_base(spec, created_by=PM_ID, now=NOW)
        assert "2024-10-31" in exc_info.value.message

    def test_matching_base_score_is_accepted(self, task_spec):
        spec = task_spec.model_copy(update={"base_score": 10})
        assert create_task_base(spec, created_by=PM_ID, now=NOW).base_score == 10

    def test_mismatched_base_score(self, task_spec):
        spec = task_spec.model_copy(update={"base_score": 12})
        with pytest.raises(InvalidSpecError):
            create_task_base(spec, created_by=PM_ID, now=NOW)


def test_compute_base_score():
    assert compute_base_score(13) == 26


def test_normalize_tags_drops_blanks():
    assert normalize_tags([" api ", "", "api", "backend", "  "]) == ["api", "backend"]


def test_task_spec_parses_json_payload():
    spec = TaskSpec(**{
        "project_id": PROJECT_ID,
        "title": "Write docs",
        "story_points": 2,
        "due_date": "2024-11-20",
    })
    assert spec.due_date == date(2024, 11, 20)
    assert spec.tags == []
    assert spec.assignee_id is None
