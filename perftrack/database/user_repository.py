"""Repository for User database operations."""

import logging
from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import update

from perftrack.models.user import User
from perftrack.database.models import UserDB

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        user_db = self.db.query(UserDB).filter(UserDB.id == user_id).populate_existing().first()
        return user_db.to_pydantic() if user_db else None

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        user_db = self.db.query(UserDB).filter(UserDB.email == email).first()
        return user_db.to_pydantic() if user_db else None

    def get_all(self) -> List[User]:
        users_db = self.db.query(UserDB).populate_existing().order_by(UserDB.id).all()
        return [user_db.to_pydantic() for user_db in users_db]

    def get_team_members(self, team_id: str) -> List[User]:
        """Current members of a team."""
        users_db = (
            self.db.query(UserDB)
            .filter(UserDB.team_id == team_id)
            .populate_existing()
            .order_by(UserDB.id)
            .all()
        )
        return [user_db.to_pydantic() for user_db in users_db]

    def create_or_update(self, user: User) -> User:
        """Create or update user (upsert).

        Args:
            user: User object to create or update

        Returns:
            Created or updated User object
        """
        user_db = self.db.query(UserDB).filter(UserDB.id == user.id).first()

        if user_db:
            # Update profile; the score cache is only written by score operations
            user_db.email = user.email
            user_db.name = user.name
            user_db.role = UserDB.from_pydantic(user).role
            user_db.team_id = user.team_id
            user_db.monthly_target = user.monthly_target
            user_db.updated_at = user.updated_at
            try:
                self.db.commit()
                self.db.refresh(user_db)
                logger.debug(f"Updated user {user.id}: {user.email}")
                return user_db.to_pydantic()
            except Exception as e:
                self.db.rollback()
                logger.error(f"Failed to update user {user.id}: {type(e).__name__}: {str(e)}")
                raise
        else:
            try:
                user_db = UserDB.from_pydantic(user)
                self.db.add(user_db)
                self.db.commit()
                self.db.refresh(user_db)
                logger.debug(f"Created user {user.id}: {user.email}")
                return user_db.to_pydantic()
            except Exception as e:
                self.db.rollback()
                logger.error(f"Failed to create user {user.id}: {type(e).__name__}: {str(e)}")
                raise

    def add_monthly_score(self, user_id: str, delta: float) -> None:
        """Stage an increment of the user's monthly score cache (caller commits)."""
        self.db.execute(
            update(UserDB)
            .where(UserDB.id == user_id)
            .values(monthly_score=UserDB.monthly_score + delta)
            .execution_options(synchronize_session=False)
        )

    def set_monthly_scores(self, scores: Dict[str, float]) -> None:
        """Overwrite monthly score caches with recomputed values."""
        try:
            for user_id, score in scores.items():
                self.db.execute(
                    update(UserDB)
                    .where(UserDB.id == user_id)
                    .values(monthly_score=score)
                    .execution_options(synchronize_session=False)
                )
            self.db.commit()
            logger.debug(f"Reset monthly score cache for {len(scores)} users")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to reset monthly scores: {type(e).__name__}: {str(e)}")
            raise
