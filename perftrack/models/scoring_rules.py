"""Scoring rule configuration for perftrack.

Rules are configuration inputs to the scoring engine rather than hardcoded
values. Defaults come from constants and can be overridden via environment.
"""

import os
from pydantic import BaseModel, Field
from dotenv import load_dotenv

from perftrack.models.constants import (
    DEFAULT_PENALTY_PER_DAY,
    DEFAULT_MINIMUM_FLOOR_PERCENT,
    DEFAULT_MONTHLY_TARGET,
)

load_dotenv()


class ScoringRules(BaseModel):
    """Deadline penalty and floor configuration."""

    penalty_per_day: float = Field(DEFAULT_PENALTY_PER_DAY, gt=0.0, description="Points lost per day late")
    minimum_floor_percent: float = Field(
        DEFAULT_MINIMUM_FLOOR_PERCENT,
        ge=0.0,
        le=100.0,
        description="Minimum share of base score a completed task keeps",
    )
    default_monthly_target: float = Field(
        DEFAULT_MONTHLY_TARGET, gt=0.0, description="Monthly target assigned to new users"
    )


def load_scoring_rules() -> ScoringRules:
    """Build scoring rules from the environment, falling back to defaults."""
    return ScoringRules(
        penalty_per_day=float(os.getenv("PENALTY_PER_DAY", str(DEFAULT_PENALTY_PER_DAY))),
        minimum_floor_percent=float(os.getenv("MINIMUM_FLOOR_PERCENT", str(DEFAULT_MINIMUM_FLOOR_PERCENT))),
        default_monthly_target=float(os.getenv("DEFAULT_MONTHLY_TARGET", str(DEFAULT_MONTHLY_TARGET))),
    )
