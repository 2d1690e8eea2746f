"""
Evaluation API

Endpoints for rubric-based project evaluation:
- Direct creation and bulk creation from an .xlsx upload (faculty)
- One-shot score submission per role, as JSON or as a spreadsheet
- Reads for staff and for the team's own students
- Spreadsheet export
"""
from fastapi import APIRouter, Depends, Request, UploadFile, File, Form, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, List
from io import BytesIO
import re

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import InvalidFileTypeError, FileTooLargeError, InvalidSpreadsheetError
from app.core.logging_config import logger
from app.core.rate_limiter import upload_rate_limit
from app.models.user import User
from app.models.evaluation import EvaluationType, EvaluationStatus, ScoringRole
from app.modules.auth.dependencies import (
    get_current_user, require_faculty, require_reviewer, require_staff, ensure_team_access
)
from app.schemas.evaluation import (
    EvaluationCreate,
    EvaluationResponse,
    EvaluationSummary,
    ScoreSubmission,
    SpreadsheetImportResponse,
    ImportProjectResult,
)
from app.services.evaluation_service import EvaluationService

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


async def read_spreadsheet_upload(file: UploadFile) -> bytes:
    """Validate extension and size of an uploaded workbook and return its bytes"""
    filename = file.filename or ""
    extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    allowed = settings.SPREADSHEET_ALLOWED_EXTENSIONS
    if extension not in allowed:
        raise InvalidFileTypeError(extension or "unknown", [f".{ext}" for ext in allowed])

    content = await file.read()
    if len(content) > settings.SPREADSHEET_MAX_UPLOAD_BYTES:
        raise FileTooLargeError(len(content), settings.SPREADSHEET_MAX_UPLOAD_BYTES)
    if not content:
        raise InvalidSpreadsheetError("Uploaded file is empty")
    return content


# ==================== Creation ====================

@router.post("", response_model=EvaluationResponse, status_code=status.HTTP_201_CREATED)
async def create_evaluation(
    data: EvaluationCreate,
    current_user: User = Depends(require_faculty),
    db: AsyncSession = Depends(get_db)
):
    """Create an evaluation with an explicit rubric (faculty only)"""
    service = EvaluationService(db)
    evaluation = await service.create_evaluation(
        project_id=data.project_id,
        evaluation_type=data.evaluation_type,
        rubric_items=[item.model_dump() for item in data.rubric_items],
        created_by=str(current_user.id),
        due_date=data.due_date,
    )
    return EvaluationResponse.from_model(evaluation)


@router.post("/excel-upload", response_model=SpreadsheetImportResponse, status_code=status.HTTP_201_CREATED)
@upload_rate_limit()
async def create_evaluations_from_spreadsheet(
    request: Request,
    file: UploadFile = File(..., description="Workbook with a ProjectName column and one column per criterion"),
    evaluation_type: str = Form("milestone"),
    current_user: User = Depends(require_faculty),
    db: AsyncSession = Depends(get_db)
):
    """
    Create one evaluation per project listed in an .xlsx upload.

    Projects that cannot be found are reported per row instead of failing
    the whole upload.
    """
    content = await read_spreadsheet_upload(file)

    service = EvaluationService(db)
    results = await service.create_evaluations_from_spreadsheet(
        content, evaluation_type, created_by=str(current_user.id)
    )

    project_results = [ImportProjectResult(**result) for result in results]
    created = sum(1 for result in project_results if result.success)

    logger.info(
        f"[Evaluations] {current_user.email} imported {file.filename}: "
        f"{created} created, {len(project_results) - created} failed"
    )

    return SpreadsheetImportResponse(
        project_results=project_results,
        created_count=created,
        failed_count=len(project_results) - created,
    )


# ==================== Reads ====================

@router.get("", response_model=List[EvaluationSummary])
async def list_evaluations(
    evaluation_type: Optional[EvaluationType] = Query(None),
    status_filter: Optional[EvaluationStatus] = Query(None, alias="status"),
    current_user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    """List all evaluations, newest first"""
    evaluations = await EvaluationService(db).list_evaluations(evaluation_type, status_filter)
    return [EvaluationSummary.from_model(e) for e in evaluations]


@router.get("/team/{team_id}", response_model=List[EvaluationSummary])
async def list_team_evaluations(
    team_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List a team's evaluations (students: own team only)"""
    ensure_team_access(current_user, team_id)
    evaluations = await EvaluationService(db).list_for_team(team_id)
    return [EvaluationSummary.from_model(e) for e in evaluations]


@router.get("/{evaluation_id}", response_model=EvaluationResponse)
async def get_evaluation(
    evaluation_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get an evaluation with rubric items and totals (students: own team only)"""
    evaluation = await EvaluationService(db).get_evaluation(evaluation_id)
    ensure_team_access(current_user, evaluation.team_id)
    return EvaluationResponse.from_model(evaluation)


@router.get("/{evaluation_id}/export")
async def export_evaluation(
    evaluation_id: str,
    current_user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    """Download the evaluation as an .xlsx workbook"""
    service = EvaluationService(db)
    evaluation = await service.get_evaluation(evaluation_id)
    content = await service.export_evaluation(evaluation_id)

    title = evaluation.project.title if evaluation.project else str(evaluation.id)
    safe_title = re.sub(r"[^A-Za-z0-9_-]+", "-", title).strip("-") or str(evaluation.id)

    return StreamingResponse(
        BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="evaluation-{safe_title}.xlsx"'}
    )


# ==================== Score submission ====================

@router.put("/{evaluation_id}/faculty-score", response_model=EvaluationResponse)
async def submit_faculty_scores(
    evaluation_id: str,
    submission: ScoreSubmission,
    current_user: User = Depends(require_faculty),
    db: AsyncSession = Depends(get_db)
):
    """Submit and lock faculty scores; may also change the evaluation type"""
    evaluation = await EvaluationService(db).submit_scores(
        evaluation_id,
        ScoringRole.faculty,
        [entry.model_dump() for entry in submission.rubric_scores],
        submitted_by=str(current_user.id),
        evaluation_type=submission.evaluation_type,
    )
    return EvaluationResponse.from_model(evaluation)


@router.put("/{evaluation_id}/reviewer-score", response_model=EvaluationResponse)
async def submit_reviewer_scores(
    evaluation_id: str,
    submission: ScoreSubmission,
    current_user: User = Depends(require_reviewer),
    db: AsyncSession = Depends(get_db)
):
    """Submit and lock reviewer scores"""
    evaluation = await EvaluationService(db).submit_scores(
        evaluation_id,
        ScoringRole.reviewer,
        [entry.model_dump() for entry in submission.rubric_scores],
        submitted_by=str(current_user.id),
    )
    return EvaluationResponse.from_model(evaluation)


@router.put("/{evaluation_id}/excel-faculty-score", response_model=EvaluationResponse)
@upload_rate_limit()
async def submit_faculty_scores_from_spreadsheet(
    request: Request,
    evaluation_id: str,
    file: UploadFile = File(...),
    current_user: User = Depends(require_faculty),
    db: AsyncSession = Depends(get_db)
):
    """Submit faculty scores from an .xlsx upload"""
    content = await read_spreadsheet_upload(file)
    evaluation = await EvaluationService(db).submit_scores_from_spreadsheet(
        evaluation_id, ScoringRole.faculty, content, submitted_by=str(current_user.id)
    )
    return EvaluationResponse.from_model(evaluation)


@router.put("/{evaluation_id}/excel-reviewer-score", response_model=EvaluationResponse)
@upload_rate_limit()
async def submit_reviewer_scores_from_spreadsheet(
    request: Request,
    evaluation_id: str,
    file: UploadFile = File(...),
    current_user: User = Depends(require_reviewer),
    db: AsyncSession = Depends(get_db)
):
    """Submit reviewer scores from an .xlsx upload"""
    content = await read_spreadsheet_upload(file)
    evaluation = await EvaluationService(db).submit_scores_from_spreadsheet(
        evaluation_id, ScoringRole.reviewer, content, submitted_by=str(current_user.id)
    )
    return EvaluationResponse.from_model(evaluation)
