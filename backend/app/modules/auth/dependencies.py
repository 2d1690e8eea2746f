from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Callable
import uuid

from app.core.database import get_db
from app.core.exceptions import AuthenticationError, AuthorizationError
from app.core.logging_config import set_user_id
from app.core.security import decode_token
from app.models.user import User, UserRole

security = HTTPBearer()


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user"""

    token = credentials.credentials
    payload = decode_token(token)

    if payload.get("type") != "access":
        raise AuthenticationError("Invalid token type")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token payload")

    # Validate user_id is a valid UUID format
    try:
        uuid.UUID(user_id)
    except ValueError:
        raise AuthenticationError("Invalid user ID format")

    result = await db.execute(
        select(User).where(User.id == user_id)
    )
    user = result.scalar_one_or_none()

    if not user:
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise AuthorizationError("User account is inactive")

    # Rate limiting and log records key on the caller
    request.state.user_id = str(user.id)
    set_user_id(str(user.id))

    return user


def require_roles(*roles: UserRole) -> Callable:
    """
    Dependency factory restricting an endpoint to the given roles.

    Usage:
        @router.put("/{evaluation_id}/faculty-score")
        async def submit(current_user: User = Depends(require_roles(UserRole.FACULTY))):
            ...
    """
    allowed = set(roles)

    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise AuthorizationError(
                f"Access denied. Requires role: {', '.join(r.value for r in roles)}"
            )
        return current_user

    return role_checker


# Common role sets
require_faculty = require_roles(UserRole.FACULTY)
require_reviewer = require_roles(UserRole.REVIEWER)
require_student = require_roles(UserRole.STUDENT)
require_staff = require_roles(UserRole.FACULTY, UserRole.REVIEWER, UserRole.ADMIN)


def ensure_team_access(user: User, team_id: str) -> None:
    """Students may only read their own team's data"""
    if not user.can_access_team(team_id):
        raise AuthorizationError("Access denied. You are not a member of this team")
