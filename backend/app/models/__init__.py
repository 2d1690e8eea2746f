# Re-export all models for convenient imports
from app.models.user import User, UserRole
from app.models.team import Team
from app.models.project import Project, ProjectStatus
from app.models.evaluation import (
    Evaluation,
    EvaluationStatus,
    EvaluationType,
    RubricItem,
    ScoringRole,
    derive_status,
)

__all__ = [
    # User
    "User",
    "UserRole",
    # Team
    "Team",
    # Project
    "Project",
    "ProjectStatus",
    # Evaluation
    "Evaluation",
    "EvaluationStatus",
    "EvaluationType",
    "RubricItem",
    "ScoringRole",
    "derive_status",
]
