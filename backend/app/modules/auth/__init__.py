# Authentication module

from app.modules.auth.dependencies import (
    get_current_user,
    require_roles,
    require_faculty,
    require_reviewer,
    require_student,
    require_staff,
    ensure_team_access,
)

__all__ = [
    "get_current_user",
    "require_roles",
    "require_faculty",
    "require_reviewer",
    "require_student",
    "require_staff",
    "ensure_team_access",
]
