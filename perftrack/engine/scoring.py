"""Score computation for perftrack.

A task's final score is computed once, at the moment it is approved:

    days_late     = max(0, completed_date - due_date)
    delay_penalty = -(days_late * penalty_per_day)
    raw_score     = base_score + delay_penalty   (or an explicit override)
    floor         = base_score * minimum_floor_percent / 100
    final_score   = max(raw_score, floor)

The floor applies even to override scores, so a single task's downside is bounded.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from perftrack.models.scoring_rules import ScoringRules


@dataclass(frozen=True)
class ScoreBreakdown:
    """Result of scoring one task."""
    days_late: int
    delay_penalty: float
    raw_score: float
    floor: float
    final_score: float


def _as_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def days_late(completed_at: Union[date, datetime], due_date: date) -> int:
    """Whole days between the due date and the completion date (0 if on time or early)."""
    return max(0, (_as_date(completed_at) - due_date).days)


def score_floor(base_score: float, minimum_floor_percent: float) -> float:
    return base_score * minimum_floor_percent / 100


def compute_score(
    base_score: int,
    due_date: date,
    completed_at: Union[date, datetime],
    rules: ScoringRules,
    override_score: Optional[float] = None,
    penalty_per_day: Optional[float] = None,
) -> ScoreBreakdown:
    """Compute the score breakdown for a task completed at ``completed_at``.

    Args:
        base_score: Points before penalty
        due_date: Task due date
        completed_at: Completion timestamp (only the date part counts)
        rules: Configured penalty rate and floor
        override_score: Replaces the raw score before the floor clamp
        penalty_per_day: Replaces the configured penalty rate for this task

    Returns:
        ScoreBreakdown with the stamped values
    """
    rate = penalty_per_day if penalty_per_day is not None else rules.penalty_per_day
    late = days_late(completed_at, due_date)
    # On time is 0.0, never -0.0
    penalty = -(late * rate) if late else 0.0
    raw = float(override_score) if override_score is not None else base_score + penalty
    floor = score_floor(base_score, rules.minimum_floor_percent)
    return ScoreBreakdown(
        days_late=late,
        delay_penalty=penalty,
        raw_score=raw,
        floor=floor,
        final_score=max(raw, floor),
    )
