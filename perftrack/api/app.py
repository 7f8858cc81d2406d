"""FastAPI web application for perftrack."""

import uuid
from datetime import date, datetime
from typing import List, Optional
from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from perftrack.api.dependencies import get_current_user, get_lifecycle_service, get_reporting_service
from perftrack.database.database import get_db
from perftrack.database.project_repository import ProjectRepository, TeamRepository
from perftrack.database.user_repository import UserRepository
from perftrack.engine.lifecycle import require_manager
from perftrack.errors import InvalidSpecError, NotFoundError, PerfTrackError
from perftrack.models.project import Project, ProjectStatus, Team
from perftrack.models.report import DashboardStats, ProjectProgress, ScoreReport, TeamSummary
from perftrack.models.scoring_rules import load_scoring_rules
from perftrack.models.task import Task, TaskStatus
from perftrack.models.task_factory import TaskSpec
from perftrack.models.user import User, UserRole
from perftrack.services.reporting import ReportingService
from perftrack.services.task_lifecycle import TaskLifecycleService

# Initialize FastAPI app
app = FastAPI(
    title="perftrack API",
    description="Task lifecycle and performance scoring for engineering teams",
    version="0.1.0"
)


@app.exception_handler(PerfTrackError)
async def perftrack_error_handler(request: Request, exc: PerfTrackError):
    """Map typed core errors to HTTP responses."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Report malformed request bodies and parameters as InvalidSpec."""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', 'invalid')}"
        for error in exc.errors()
    )
    error = InvalidSpecError(f"Invalid request: {problems}")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


# Request models
class UserCreateRequest(BaseModel):
    id: Optional[str] = None
    email: str
    name: Optional[str] = None
    role: UserRole = UserRole.DEVELOPER
    team_id: Optional[str] = None
    monthly_target: Optional[float] = Field(None, gt=0.0, description="Defaults to DEFAULT_MONTHLY_TARGET")


class TeamCreateRequest(BaseModel):
    name: str
    description: str = ""
    manager_id: Optional[str] = None


class ProjectCreateRequest(BaseModel):
    name: str
    description: str = ""
    team_id: Optional[str] = None
    status: ProjectStatus = ProjectStatus.PLANNING
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class ApproveRequest(BaseModel):
    score: Optional[float] = Field(None, description="Override raw score (floor still applies)")
    penalty: Optional[float] = Field(None, description="Override penalty per day for this task")


# Response models
class UserResponse(BaseModel):
    user: User


class TeamResponse(BaseModel):
    team: Team


class ProjectResponse(BaseModel):
    project: Project
    progress: ProjectProgress


class ProjectListResponse(BaseModel):
    projects: List[ProjectResponse]


class TaskResponse(BaseModel):
    task: Task


class TaskListResponse(BaseModel):
    tasks: List[Task]


class RefreshResponse(BaseModel):
    month: Optional[str]
    scores: dict


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


@app.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(request: UserCreateRequest, db: Session = Depends(get_db)):
    """Register a user."""
    repo = UserRepository(db)
    if request.id and repo.get(request.id):
        raise HTTPException(status_code=409, detail=f"User {request.id} already exists")
    if repo.get_by_email(request.email):
        raise HTTPException(status_code=409, detail=f"User with email {request.email} already exists")
    if request.team_id and TeamRepository(db).get(request.team_id) is None:
        raise NotFoundError("Team", request.team_id)
    monthly_target = request.monthly_target
    if monthly_target is None:
        monthly_target = load_scoring_rules().default_monthly_target
    now = datetime.utcnow()
    user = User(
        id=request.id or str(uuid.uuid4()),
        email=request.email,
        name=request.name,
        role=request.role,
        team_id=request.team_id,
        monthly_target=monthly_target,
        created_at=now,
        updated_at=now,
    )
    return UserResponse(user=repo.create_or_update(user))


@app.get("/users/{user_id}", response_model=UserResponse)
def get_user(user_id: str, db: Session = Depends(get_db)):
    user = UserRepository(db).get(user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return UserResponse(user=user)


@app.post("/teams", response_model=TeamResponse, status_code=status.HTTP_201_CREATED)
def create_team(
    request: TeamCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_manager(current_user, "create teams")
    now = datetime.utcnow()
    team = Team(
        id=str(uuid.uuid4()),
        name=request.name,
        description=request.description,
        manager_id=request.manager_id,
        created_at=now,
        updated_at=now,
    )
    return TeamResponse(team=TeamRepository(db).create(team))


@app.get("/teams/{team_id}", response_model=TeamSummary)
def get_team_summary(
    team_id: str,
    month: Optional[str] = None,
    reporting: ReportingService = Depends(get_reporting_service),
):
    """Team rollup: members' monthly scores and the team total."""
    return reporting.get_team_summary(team_id, month)


@app.post("/projects", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
def create_project(
    request: ProjectCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_manager(current_user, "create projects")
    if request.team_id and TeamRepository(db).get(request.team_id) is None:
        raise NotFoundError("Team", request.team_id)
    now = datetime.utcnow()
    project = ProjectRepository(db).create(
        Project(
            id=str(uuid.uuid4()),
            name=request.name,
            description=request.description,
            team_id=request.team_id,
            status=request.status,
            start_date=request.start_date,
            end_date=request.end_date,
            created_at=now,
            updated_at=now,
        )
    )
    return ProjectResponse(
        project=project,
        progress=ProjectProgress(project_id=project.id, tasks_count=0, completed_tasks_count=0, progress=0.0),
    )


@app.get("/projects", response_model=ProjectListResponse)
def list_projects(
    team_id: Optional[str] = None,
    db: Session = Depends(get_db),
    reporting: ReportingService = Depends(get_reporting_service),
):
    """Projects ordered by name, optionally for one team, each with recomputed progress."""
    return ProjectListResponse(projects=[
        ProjectResponse(project=project, progress=reporting.get_project_progress(project.id))
        for project in ProjectRepository(db).get_all(team_id=team_id)
    ])


@app.get("/projects/{project_id}", response_model=ProjectResponse)
def get_project(
    project_id: str,
    db: Session = Depends(get_db),
    reporting: ReportingService = Depends(get_reporting_service),
):
    """Project with its cached counters and progress recomputed from tasks."""
    project = ProjectRepository(db).get(project_id)
    if project is None:
        raise NotFoundError("Project", project_id)
    return ProjectResponse(project=project, progress=reporting.get_project_progress(project_id))


@app.post("/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    spec: TaskSpec,
    current_user: User = Depends(get_current_user),
    service: TaskLifecycleService = Depends(get_lifecycle_service),
):
    """Create a task (available, or todo when pre-assigned)."""
    return TaskResponse(task=service.create_task(current_user.id, spec))


@app.get("/tasks", response_model=TaskListResponse)
def list_tasks(
    status: Optional[TaskStatus] = None,
    assignee_id: Optional[str] = None,
    project_id: Optional[str] = None,
    service: TaskLifecycleService = Depends(get_lifecycle_service),
):
    return TaskListResponse(tasks=service.list_tasks(status=status, assignee_id=assignee_id, project_id=project_id))


@app.get("/tasks/upcoming", response_model=TaskListResponse)
def upcoming_tasks(
    user_id: Optional[str] = None,
    reporting: ReportingService = Depends(get_reporting_service),
):
    """Open tasks due soonest."""
    return TaskListResponse(tasks=reporting.get_upcoming_tasks(user_id))


@app.get("/tasks/{task_id}", response_model=TaskResponse)
def get_task(task_id: str, service: TaskLifecycleService = Depends(get_lifecycle_service)):
    return TaskResponse(task=service.get_task(task_id))


@app.post("/tasks/{task_id}/claim", response_model=TaskResponse)
def claim_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    service: TaskLifecycleService = Depends(get_lifecycle_service),
):
    """Claim an available task for the calling developer."""
    return TaskResponse(task=service.claim_task(task_id, current_user.id))


@app.post("/tasks/{task_id}/start", response_model=TaskResponse)
def start_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    service: TaskLifecycleService = Depends(get_lifecycle_service),
):
    return TaskResponse(task=service.start_task(task_id, current_user.id))


@app.post("/tasks/{task_id}/submit", response_model=TaskResponse)
def submit_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    service: TaskLifecycleService = Depends(get_lifecycle_service),
):
    return TaskResponse(task=service.submit_task(task_id, current_user.id))


@app.post("/tasks/{task_id}/approve", response_model=TaskResponse)
def approve_task(
    task_id: str,
    request: Optional[ApproveRequest] = None,
    current_user: User = Depends(get_current_user),
    service: TaskLifecycleService = Depends(get_lifecycle_service),
):
    """Approve a task in review and stamp its final score."""
    request = request or ApproveRequest()
    return TaskResponse(
        task=service.approve_task(task_id, current_user.id, score=request.score, penalty=request.penalty)
    )


@app.post("/tasks/{task_id}/reject", response_model=TaskResponse)
def reject_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    service: TaskLifecycleService = Depends(get_lifecycle_service),
):
    return TaskResponse(task=service.reject_task(task_id, current_user.id))


@app.post("/tasks/{task_id}/block", response_model=TaskResponse)
def block_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    service: TaskLifecycleService = Depends(get_lifecycle_service),
):
    return TaskResponse(task=service.block_task(task_id, current_user.id))


@app.post("/tasks/{task_id}/unblock", response_model=TaskResponse)
def unblock_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    service: TaskLifecycleService = Depends(get_lifecycle_service),
):
    return TaskResponse(task=service.unblock_task(task_id, current_user.id))


@app.get("/score/report", response_model=ScoreReport)
def score_report(
    user_id: str,
    month: Optional[str] = None,
    reporting: ReportingService = Depends(get_reporting_service),
):
    """Completed tasks and score breakdown for a user and month (YYYY-MM)."""
    return reporting.get_score_report(user_id, month)


@app.post("/score/refresh", response_model=RefreshResponse)
def refresh_scores(
    month: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    reporting: ReportingService = Depends(get_reporting_service),
):
    """Recompute every user's monthly score cache from completed tasks."""
    require_manager(current_user, "refresh scores")
    return RefreshResponse(month=month, scores=reporting.refresh_monthly_scores(month))


@app.get("/dashboard/stats", response_model=DashboardStats)
def dashboard_stats(
    user_id: Optional[str] = None,
    month: Optional[str] = None,
    reporting: ReportingService = Depends(get_reporting_service),
):
    return reporting.get_dashboard_stats(user_id, month)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
