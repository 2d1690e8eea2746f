"""Pydantic schemas for rubric evaluations"""
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime

from app.models.evaluation import Evaluation, RubricItem, EvaluationType, EvaluationStatus, ScoringRole


# ==================== Requests ====================

class RubricItemCreate(BaseModel):
    criterion: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    max_score: float = Field(..., gt=0)
    faculty_max_score: Optional[float] = Field(None, gt=0)
    reviewer_max_score: Optional[float] = Field(None, gt=0)


class EvaluationCreate(BaseModel):
    project_id: str
    evaluation_type: EvaluationType = EvaluationType.milestone
    due_date: Optional[datetime] = None
    rubric_items: List[RubricItemCreate] = Field(..., min_length=1)

    @field_validator("rubric_items")
    @classmethod
    def criteria_unique(cls, items: List[RubricItemCreate]) -> List[RubricItemCreate]:
        names = [item.criterion.strip().lower() for item in items]
        if len(names) != len(set(names)):
            raise ValueError("Rubric criteria must be unique")
        return items


class ScoreEntry(BaseModel):
    item_id: str
    value: float = Field(..., ge=0)
    comments: Optional[str] = Field(None, max_length=2000)


class ScoreSubmission(BaseModel):
    rubric_scores: List[ScoreEntry] = Field(..., min_length=1)
    # Faculty only; ignored on reviewer submissions
    evaluation_type: Optional[EvaluationType] = None


# ==================== Responses ====================

class ScoreSlotResponse(BaseModel):
    value: Optional[float] = None
    submitted_by: Optional[str] = None
    submitted_at: Optional[datetime] = None
    comments: Optional[str] = None
    locked: bool = False


class RubricItemResponse(BaseModel):
    id: str
    criterion: str
    description: str
    max_score: float
    faculty_max_score: float
    reviewer_max_score: float
    faculty_score: ScoreSlotResponse
    reviewer_score: ScoreSlotResponse
    total_score: float

    @classmethod
    def from_model(cls, item: RubricItem) -> "RubricItemResponse":
        return cls(
            id=str(item.id),
            criterion=item.criterion,
            description=item.description or "",
            max_score=item.max_score,
            faculty_max_score=item.ceiling(ScoringRole.faculty),
            reviewer_max_score=item.ceiling(ScoringRole.reviewer),
            faculty_score=ScoreSlotResponse(**item.score_slot(ScoringRole.faculty)),
            reviewer_score=ScoreSlotResponse(**item.score_slot(ScoringRole.reviewer)),
            total_score=item.total_score,
        )


class EvaluationResponse(BaseModel):
    id: str
    project_id: str
    project_title: Optional[str] = None
    team_id: str
    team_name: Optional[str] = None
    evaluation_type: EvaluationType
    status: EvaluationStatus
    due_date: datetime
    faculty_submitted: bool
    reviewer_submitted: bool
    has_prefilled_scores: bool
    rubric_items: List[RubricItemResponse]
    excel_data: List[Dict[str, Any]] = []

    # Computed totals
    faculty_total: float
    reviewer_total: float
    grand_total: float
    max_total: float

    created_by: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_model(cls, evaluation: Evaluation) -> "EvaluationResponse":
        return cls(
            id=str(evaluation.id),
            project_id=str(evaluation.project_id),
            project_title=evaluation.project.title if evaluation.project else None,
            team_id=str(evaluation.team_id),
            team_name=evaluation.team.name if evaluation.team else None,
            evaluation_type=evaluation.evaluation_type,
            status=evaluation.status,
            due_date=evaluation.due_date,
            faculty_submitted=bool(evaluation.faculty_submitted),
            reviewer_submitted=bool(evaluation.reviewer_submitted),
            has_prefilled_scores=bool(evaluation.has_prefilled_scores),
            rubric_items=[RubricItemResponse.from_model(item) for item in evaluation.rubric_items],
            excel_data=evaluation.excel_data or [],
            faculty_total=evaluation.total_score(ScoringRole.faculty),
            reviewer_total=evaluation.total_score(ScoringRole.reviewer),
            grand_total=evaluation.grand_total,
            max_total=evaluation.max_total,
            created_by=str(evaluation.created_by) if evaluation.created_by else None,
            created_at=evaluation.created_at,
            updated_at=evaluation.updated_at,
        )


class EvaluationSummary(BaseModel):
    """List view without rubric details"""
    id: str
    project_id: str
    project_title: Optional[str] = None
    team_id: str
    team_name: Optional[str] = None
    evaluation_type: EvaluationType
    status: EvaluationStatus
    due_date: datetime
    has_prefilled_scores: bool
    grand_total: float
    max_total: float
    created_at: datetime

    @classmethod
    def from_model(cls, evaluation: Evaluation) -> "EvaluationSummary":
        return cls(
            id=str(evaluation.id),
            project_id=str(evaluation.project_id),
            project_title=evaluation.project.title if evaluation.project else None,
            team_id=str(evaluation.team_id),
            team_name=evaluation.team.name if evaluation.team else None,
            evaluation_type=evaluation.evaluation_type,
            status=evaluation.status,
            due_date=evaluation.due_date,
            has_prefilled_scores=bool(evaluation.has_prefilled_scores),
            grand_total=evaluation.grand_total,
            max_total=evaluation.max_total,
            created_at=evaluation.created_at,
        )


class ImportProjectResult(BaseModel):
    project_name: str
    success: bool
    evaluation_id: Optional[str] = None
    has_prefilled_scores: Optional[bool] = None
    error: Optional[str] = None


class SpreadsheetImportResponse(BaseModel):
    project_results: List[ImportProjectResult]
    created_count: int
    failed_count: int
