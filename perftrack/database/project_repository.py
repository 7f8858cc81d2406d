"""Repositories for Project and Team database operations."""

import logging
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import update

from perftrack.models.project import Project, Team
from perftrack.database.models import ProjectDB, TeamDB

logger = logging.getLogger(__name__)


class ProjectRepository:
    """Repository for Project database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, project: Project) -> Project:
        """Create a new project."""
        try:
            project_db = ProjectDB.from_pydantic(project)
            self.db.add(project_db)
            self.db.commit()
            self.db.refresh(project_db)
            logger.debug(f"Created project {project.id}: {project.name[:50]}")
            return project_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create project {project.id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, project_id: str) -> Optional[Project]:
        """Get project by ID."""
        project_db = (
            self.db.query(ProjectDB)
            .filter(ProjectDB.id == project_id)
            .populate_existing()
            .first()
        )
        return project_db.to_pydantic() if project_db else None

    def get_all(self, team_id: Optional[str] = None) -> List[Project]:
        query = self.db.query(ProjectDB).populate_existing()
        if team_id is not None:
            query = query.filter(ProjectDB.team_id == team_id)
        return [project_db.to_pydantic() for project_db in query.order_by(ProjectDB.name).all()]

    def adjust_counters(self, project_id: str, tasks_delta: int = 0, completed_delta: int = 0) -> None:
        """Stage an in-place increment of the counter caches (caller commits)."""
        self.db.execute(
            update(ProjectDB)
            .where(ProjectDB.id == project_id)
            .values(
                tasks_count=ProjectDB.tasks_count + tasks_delta,
                completed_tasks_count=ProjectDB.completed_tasks_count + completed_delta,
            )
            .execution_options(synchronize_session=False)
        )


class TeamRepository:
    """Repository for Team database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, team: Team) -> Team:
        """Create a new team."""
        try:
            team_db = TeamDB.from_pydantic(team)
            self.db.add(team_db)
            self.db.commit()
            self.db.refresh(team_db)
            logger.debug(f"Created team {team.id}: {team.name[:50]}")
            return team_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create team {team.id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, team_id: str) -> Optional[Team]:
        """Get team by ID."""
        team_db = self.db.query(TeamDB).filter(TeamDB.id == team_id).first()
        return team_db.to_pydantic() if team_db else None
