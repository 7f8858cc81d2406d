"""Constants for perftrack.

This module centralizes all magic numbers and default values used throughout the application.
"""

from perftrack.models.task import Difficulty, TaskPriority


# Task defaults
ALLOWED_STORY_POINTS = (1, 2, 3, 5, 8, 13)
BASE_SCORE_PER_STORY_POINT = 2
DEFAULT_DIFFICULTY = Difficulty.MEDIUM
DEFAULT_PRIORITY = TaskPriority.MEDIUM

# Scoring rules
DEFAULT_PENALTY_PER_DAY = 1.0
DEFAULT_MINIMUM_FLOOR_PERCENT = 20.0
DEFAULT_MONTHLY_TARGET = 50.0

# Dashboard
UPCOMING_TASKS_LIMIT = 5

# Reporting month format (e.g. 2024-11)
MONTH_FORMAT = "%Y-%m"
