"""
Project API

Each team registers a single project; the team leader creates it.
Evaluations reference projects by id, spreadsheet imports by title.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.core.database import get_db
from app.core.exceptions import ProjectNotFoundError, ResourceConflictError, AuthorizationError
from app.core.logging_config import logger
from app.models.user import User
from app.models.team import Team
from app.models.project import Project, ProjectStatus
from app.modules.auth.dependencies import get_current_user, require_student, require_staff, ensure_team_access
from app.schemas.project import ProjectCreate, ProjectResponse, ProjectListResponse

router = APIRouter()


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    current_user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db)
):
    """Register the caller's team project (team leader only)"""
    if not current_user.team_id:
        raise AuthorizationError("You must be in a team to create a project")

    result = await db.execute(select(Team).where(Team.id == str(current_user.team_id)))
    team = result.scalar_one_or_none()
    if not team or not team.is_leader(current_user.id):
        raise AuthorizationError("Only the team leader can create a project")

    existing = await db.execute(select(Project).where(Project.team_id == str(team.id)))
    if existing.scalar_one_or_none():
        raise ResourceConflictError("Team already has a project")

    project = Project(
        title=project_data.title.strip(),
        description=project_data.description,
        team_id=str(team.id),
        status=ProjectStatus.PROPOSED,
        start_date=project_data.start_date,
        end_date=project_data.end_date,
    )
    db.add(project)
    await db.commit()

    logger.info(f"Created project {project.id} for team {team.id}")

    return ProjectResponse.from_model(await get_project_or_404(str(project.id), db))


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    current_user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    """List all projects (faculty, reviewers, admins)"""
    result = await db.execute(select(Project).order_by(Project.created_at.desc()))
    projects = result.scalars().all()
    return ProjectListResponse(
        projects=[ProjectResponse.from_model(p) for p in projects],
        total=len(projects),
    )


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get a project. Students can only read their own team's project."""
    project = await get_project_or_404(project_id, db)
    ensure_team_access(current_user, project.team_id)
    return ProjectResponse.from_model(project)


async def get_project_or_404(project_id: str, db: AsyncSession) -> Project:
    result = await db.execute(
        select(Project)
        .where(Project.id == project_id)
        .execution_options(populate_existing=True)
    )
    project = result.scalar_one_or_none()
    if not project:
        raise ProjectNotFoundError(project_id)
    return project
