# Pydantic schemas
from app.schemas.evaluation import (
    RubricItemCreate,
    EvaluationCreate,
    ScoreEntry,
    ScoreSubmission,
    ScoreSlotResponse,
    RubricItemResponse,
    EvaluationResponse,
    EvaluationSummary,
    ImportProjectResult,
    SpreadsheetImportResponse,
)
from app.schemas.project import ProjectCreate, ProjectResponse, ProjectListResponse
from app.schemas.team import TeamCreate, TeamJoin, TeamMemberResponse, TeamResponse

__all__ = [
    # Evaluations
    "RubricItemCreate",
    "EvaluationCreate",
    "ScoreEntry",
    "ScoreSubmission",
    "ScoreSlotResponse",
    "RubricItemResponse",
    "EvaluationResponse",
    "EvaluationSummary",
    "ImportProjectResult",
    "SpreadsheetImportResponse",
    # Projects
    "ProjectCreate",
    "ProjectResponse",
    "ProjectListResponse",
    # Teams
    "TeamCreate",
    "TeamJoin",
    "TeamMemberResponse",
    "TeamResponse",
]
