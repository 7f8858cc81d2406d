"""FastAPI dependencies for caller identification and services."""

from fastapi import Depends, HTTPException, status, Header
from sqlalchemy.orm import Session

from perftrack.database.database import get_db
from perftrack.database.user_repository import UserRepository
from perftrack.models.user import User
from perftrack.services.reporting import ReportingService
from perftrack.services.task_lifecycle import TaskLifecycleService


def get_current_user(
    x_user_id: str = Header(default="", alias="X-User-Id"),
    db: Session = Depends(get_db),
) -> User:
    """Identify the caller from the X-User-Id header.

    This is identification only; authentication happens in front of this service.

    Raises:
        HTTPException: If the header is missing or names an unknown user
    """
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    user = UserRepository(db).get(x_user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


def get_lifecycle_service(db: Session = Depends(get_db)) -> TaskLifecycleService:
    return TaskLifecycleService(db)


def get_reporting_service(db: Session = Depends(get_db)) -> ReportingService:
    return ReportingService(db)
