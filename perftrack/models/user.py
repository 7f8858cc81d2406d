"""User data model for perftrack."""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class UserRole(str, Enum):
    """Closed set of user roles."""
    OWNER = "owner"
    TEAM_MANAGER = "team_manager"
    PM = "pm"
    DEVELOPER = "developer"


# Roles allowed to create, approve, reject and block tasks (stored as values,
# since models keep enum values rather than members)
MANAGER_ROLES = frozenset({UserRole.OWNER.value, UserRole.TEAM_MANAGER.value, UserRole.PM.value})


class User(BaseModel):
    """User model for perftrack."""

    id: str = Field(..., description="Unique user identifier")
    email: str = Field(..., description="User email address")
    name: Optional[str] = Field(None, description="User display name")
    role: UserRole = Field(UserRole.DEVELOPER, description="User role")
    team_id: Optional[str] = Field(None, description="Team membership, if any")
    monthly_score: float = Field(0.0, ge=0.0, description="Running score for the active month (cache)")
    monthly_target: float = Field(50.0, gt=0.0, description="Denominator for productivity percentage")
    created_at: datetime = Field(..., description="User creation timestamp")
    updated_at: datetime = Field(..., description="User last update timestamp")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
