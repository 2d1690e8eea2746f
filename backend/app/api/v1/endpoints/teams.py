"""
Team API

Students form teams (one team per student) and join them with a
shareable team code. Staff can browse every team.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import List

from app.core.database import get_db
from app.core.exceptions import TeamNotFoundError, ResourceConflictError, ValidationError
from app.core.logging_config import logger
from app.models.user import User
from app.models.team import Team
from app.modules.auth.dependencies import get_current_user, require_student, require_staff, ensure_team_access
from app.schemas.team import TeamCreate, TeamJoin, TeamResponse, TeamMemberResponse


router = APIRouter()


# ==================== Helper Functions ====================

async def get_team_or_404(team_id: str, db: AsyncSession) -> Team:
    result = await db.execute(
        select(Team).where(Team.id == team_id).execution_options(populate_existing=True)
    )
    team = result.scalar_one_or_none()
    if not team:
        raise TeamNotFoundError(team_id)
    return team


async def get_team_members(team_id: str, db: AsyncSession) -> List[User]:
    result = await db.execute(
        select(User).where(User.team_id == team_id).order_by(User.created_at)
    )
    return list(result.scalars().all())


async def build_team_response(team: Team, db: AsyncSession) -> TeamResponse:
    members = await get_team_members(str(team.id), db)
    return TeamResponse(
        id=str(team.id),
        name=team.name,
        description=team.description,
        leader_id=str(team.leader_id),
        max_members=team.max_members,
        is_open=bool(team.is_open),
        team_code=team.team_code,
        project_id=str(team.project.id) if team.project else None,
        members=[
            TeamMemberResponse(id=str(m.id), name=m.name, email=m.email, sap_id=m.sap_id)
            for m in members
        ],
        created_at=team.created_at,
    )


# ==================== Team CRUD ====================

@router.post("", response_model=TeamResponse, status_code=status.HTTP_201_CREATED)
async def create_team(
    team_data: TeamCreate,
    current_user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a new team.

    The creator becomes the team leader and first member.
    """
    if current_user.team_id:
        raise ResourceConflictError("You are already a member of a team")

    existing = await db.execute(select(Team).where(Team.name == team_data.name))
    if existing.scalar_one_or_none():
        raise ValidationError("Team name already exists", field="name")

    team = Team(
        name=team_data.name,
        description=team_data.description,
        max_members=team_data.max_members,
        leader_id=str(current_user.id),
    )
    db.add(team)
    await db.flush()

    current_user.team_id = str(team.id)
    await db.commit()

    logger.info(f"Created team {team.id} by user {current_user.id}")

    team = await get_team_or_404(str(team.id), db)
    return await build_team_response(team, db)


@router.post("/join", response_model=TeamResponse)
async def join_team(
    join_data: TeamJoin,
    current_user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db)
):
    """Join a team with its team code"""
    if current_user.team_id:
        raise ResourceConflictError("You are already a member of a team")

    result = await db.execute(select(Team).where(Team.team_code == join_data.team_code.strip()))
    team = result.scalar_one_or_none()
    if not team:
        raise TeamNotFoundError(join_data.team_code)

    if not team.is_open:
        raise ResourceConflictError("Team is not accepting new members")

    member_count = await db.scalar(
        select(func.count()).select_from(User).where(User.team_id == str(team.id))
    )
    if member_count >= team.max_members:
        raise ResourceConflictError("Team is full")

    current_user.team_id = str(team.id)
    await db.commit()

    logger.info(f"User {current_user.id} joined team {team.id}")

    return await build_team_response(team, db)


@router.get("", response_model=List[TeamResponse])
async def list_teams(
    current_user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    """List all teams (faculty, reviewers, admins)"""
    result = await db.execute(select(Team).order_by(Team.created_at.desc()))
    return [await build_team_response(team, db) for team in result.scalars().all()]


@router.get("/{team_id}", response_model=TeamResponse)
async def get_team(
    team_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get team details. Students can only read their own team."""
    ensure_team_access(current_user, team_id)
    team = await get_team_or_404(team_id, db)
    return await build_team_response(team, db)
