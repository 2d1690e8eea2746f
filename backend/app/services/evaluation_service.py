"""
Evaluation Service Layer
Business logic for rubric evaluations:
- Direct creation and spreadsheet-based bulk creation
- One-shot score submission per role (faculty, reviewer)
- Reads and spreadsheet export
"""

from typing import List, Optional, Dict, Any, Union
from datetime import datetime, timedelta
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.core.exceptions import (
    EvaluationNotFoundError,
    ProjectNotFoundError,
    ValidationError,
    InvalidSpreadsheetError,
    ScoresAlreadySubmittedError,
    ScoreExceedsMaxError,
    FacultySubmissionRequiredError,
)
from app.core.logging_config import logger, set_evaluation_id
from app.models.evaluation import (
    Evaluation, RubricItem, EvaluationType, EvaluationStatus, ScoringRole
)
from app.models.project import Project
from app.services.spreadsheet_export import build_evaluation_workbook
from app.services.spreadsheet_import import (
    IMPORT_COMMENT,
    group_rows_by_project,
    parse_score,
    project_name_of,
    read_rows,
    resolve_criteria,
    seed_rubric_items,
)

# Types accepted for a spreadsheet import
IMPORTABLE_TYPES = (EvaluationType.milestone, EvaluationType.final)


def _coerce_evaluation_type(value: Union[str, EvaluationType], allowed=tuple(EvaluationType)) -> EvaluationType:
    try:
        evaluation_type = EvaluationType(value)
    except ValueError:
        evaluation_type = None
    if evaluation_type not in allowed:
        raise ValidationError(
            f"Invalid evaluation type '{value}'. Allowed: {', '.join(t.value for t in allowed)}",
            field="evaluation_type",
        )
    return evaluation_type


class EvaluationService:
    """Service for evaluation scoring operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    # =====================================================
    # READS
    # =====================================================

    async def get_evaluation(self, evaluation_id: str) -> Evaluation:
        """Get evaluation with its rubric items, project and team"""
        result = await self.db.execute(
            select(Evaluation)
            .options(selectinload(Evaluation.rubric_items))
            .where(Evaluation.id == str(evaluation_id))
            .execution_options(populate_existing=True)
        )
        evaluation = result.scalar_one_or_none()
        if not evaluation:
            raise EvaluationNotFoundError(str(evaluation_id))
        return evaluation

    async def list_evaluations(
        self,
        evaluation_type: Optional[EvaluationType] = None,
        status: Optional[EvaluationStatus] = None,
    ) -> List[Evaluation]:
        """All evaluations, newest first"""
        query = select(Evaluation)
        if evaluation_type:
            query = query.where(Evaluation.evaluation_type == evaluation_type)
        if status:
            query = query.where(Evaluation.status == status)

        result = await self.db.execute(query.order_by(Evaluation.created_at.desc()))
        return list(result.scalars().all())

    async def list_for_team(self, team_id: str) -> List[Evaluation]:
        result = await self.db.execute(
            select(Evaluation)
            .where(Evaluation.team_id == str(team_id))
            .order_by(Evaluation.created_at.desc())
        )
        return list(result.scalars().all())

    # =====================================================
    # CREATION
    # =====================================================

    async def _get_project(self, project_id: str) -> Project:
        result = await self.db.execute(select(Project).where(Project.id == str(project_id)))
        project = result.scalar_one_or_none()
        if not project:
            raise ProjectNotFoundError(str(project_id))
        return project

    def _default_due_date(self) -> datetime:
        return datetime.utcnow() + timedelta(days=settings.EVALUATION_DEFAULT_DUE_DAYS)

    async def create_evaluation(
        self,
        project_id: str,
        evaluation_type: Union[str, EvaluationType],
        rubric_items: List[Dict[str, Any]],
        created_by: Optional[str] = None,
        due_date: Optional[datetime] = None,
    ) -> Evaluation:
        """
        Create an evaluation with empty score slots.

        Each rubric item needs "criterion" and "max_score"; "description",
        "faculty_max_score" and "reviewer_max_score" are optional.
        """
        evaluation_type = _coerce_evaluation_type(evaluation_type)
        if not rubric_items:
            raise ValidationError("At least one rubric item is required", field="rubric_items")

        seen = set()
        for item in rubric_items:
            criterion = (item.get("criterion") or "").strip()
            if not criterion:
                raise ValidationError("Rubric item criterion is required", field="rubric_items")
            if item.get("max_score") is None or item["max_score"] <= 0:
                raise ValidationError(f"Rubric item '{criterion}' needs a positive max score", field="rubric_items")
            if criterion.lower() in seen:
                raise ValidationError(f"Duplicate criterion '{criterion}'", field="rubric_items")
            seen.add(criterion.lower())

        project = await self._get_project(project_id)

        evaluation = Evaluation(
            project_id=project.id,
            team_id=project.team_id,
            evaluation_type=evaluation_type,
            due_date=due_date or self._default_due_date(),
            status=EvaluationStatus.pending,
            excel_data=[],
            has_prefilled_scores=False,
            created_by=created_by,
        )
        evaluation.rubric_items = [
            RubricItem(
                position=position,
                criterion=item["criterion"].strip(),
                description=item.get("description") or "",
                max_score=float(item["max_score"]),
                faculty_max_score=item.get("faculty_max_score"),
                reviewer_max_score=item.get("reviewer_max_score"),
            )
            for position, item in enumerate(rubric_items)
        ]

        self.db.add(evaluation)
        await self.db.commit()

        logger.log_scoring_event(
            "evaluation_created", str(evaluation.id),
            project_id=str(project.id), rubric_items=len(rubric_items),
        )
        return await self.get_evaluation(evaluation.id)

    async def create_evaluations_from_spreadsheet(
        self,
        content: bytes,
        evaluation_type: Union[str, EvaluationType],
        created_by: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Create one evaluation per project found in a workbook.

        Projects are matched by exact title. Unknown projects are reported
        in the result list and do not stop the batch. Existing evaluations
        are never touched.
        """
        evaluation_type = _coerce_evaluation_type(evaluation_type, allowed=IMPORTABLE_TYPES)

        rows = read_rows(content)
        criteria = resolve_criteria(rows[0].keys())
        groups = group_rows_by_project(rows)
        if not groups:
            raise InvalidSpreadsheetError("No valid project data found in Excel file")

        logger.info(
            f"[EvaluationImport] {len(rows)} rows, {len(groups)} projects, "
            f"criteria: {[c.name for c in criteria]}"
        )

        results: List[Dict[str, Any]] = []
        created = 0
        for project_name, project_rows in groups.items():
            result = await self.db.execute(select(Project).where(Project.title == project_name))
            project = result.scalars().first()
            if not project:
                results.append({
                    "project_name": project_name,
                    "success": False,
                    "error": f'Project "{project_name}" not found',
                })
                continue

            seeds = seed_rubric_items(project_rows[0], criteria)
            evaluation = Evaluation(
                project_id=project.id,
                team_id=project.team_id,
                evaluation_type=evaluation_type,
                due_date=self._default_due_date(),
                status=EvaluationStatus.pending,
                excel_data=project_rows,
                has_prefilled_scores=any(seed.is_prefilled for seed in seeds),
                created_by=created_by,
            )
            for position, seed in enumerate(seeds):
                item = RubricItem(
                    position=position,
                    criterion=seed.criterion,
                    description=seed.description,
                    max_score=seed.max_score,
                    faculty_max_score=seed.max_score,
                    reviewer_max_score=seed.max_score,
                )
                if seed.is_prefilled:
                    item.lock_score(ScoringRole.faculty, seed.faculty_score, created_by, IMPORT_COMMENT)
                evaluation.rubric_items.append(item)

            self.db.add(evaluation)
            await self.db.flush()
            created += 1

            results.append({
                "project_name": project_name,
                "success": True,
                "evaluation_id": str(evaluation.id),
                "has_prefilled_scores": evaluation.has_prefilled_scores,
            })

        await self.db.commit()

        logger.info(
            f"[EvaluationImport] Created {created} evaluations, "
            f"{len(results) - created} projects not found"
        )
        return results

    # =====================================================
    # SCORE SUBMISSION
    # =====================================================

    async def submit_scores(
        self,
        evaluation_id: str,
        role: ScoringRole,
        scores: List[Dict[str, Any]],
        submitted_by: Optional[str] = None,
        evaluation_type: Optional[Union[str, EvaluationType]] = None,
    ) -> Evaluation:
        """
        Lock in one role's scores.

        Every check runs before anything is written, so a rejected batch
        leaves the evaluation untouched. Slots that are already locked (faculty
        scores seeded by an import) keep their value.

        Args:
            scores: list of {"item_id", "value", "comments"(optional)}
            evaluation_type: faculty only, replaces the stored type
        """
        evaluation_id = str(evaluation_id)
        set_evaluation_id(evaluation_id)
        evaluation = await self.get_evaluation(evaluation_id)

        if evaluation.is_submitted(role):
            raise ScoresAlreadySubmittedError(role.value, evaluation_id)

        if (
            role == ScoringRole.reviewer
            and settings.REVIEWER_REQUIRES_FACULTY_SUBMISSION
            and not evaluation.faculty_submitted
        ):
            raise FacultySubmissionRequiredError(evaluation_id)

        new_type = None
        if role == ScoringRole.faculty and evaluation_type:
            new_type = _coerce_evaluation_type(evaluation_type)

        pairs = []
        seen = set()
        for entry in scores:
            item_id = str(entry.get("item_id"))
            item = evaluation.get_item(item_id)
            if item is None:
                raise ValidationError(
                    f"Rubric item '{item_id}' does not belong to this evaluation",
                    field="rubric_scores",
                )
            if item_id in seen:
                raise ValidationError(f"Rubric item '{item_id}' scored more than once", field="rubric_scores")
            seen.add(item_id)

            value = entry.get("value")
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                raise ValidationError(
                    f"Score for '{item.criterion}' must be a non-negative number",
                    field="rubric_scores",
                )
            pairs.append((item, float(value), entry.get("comments")))

        invalid_scores = [
            {
                "criterion": item.criterion,
                "max_score": item.ceiling(role),
                "submitted_score": value,
            }
            for item, value, _ in pairs
            if not item.is_locked(role) and value > item.ceiling(role)
        ]
        if invalid_scores:
            logger.warning(
                f"[Scoring] {role.value} submission rejected for {evaluation_id}: "
                f"{len(invalid_scores)} scores over the maximum"
            )
            raise ScoreExceedsMaxError(invalid_scores)

        applied = 0
        for item, value, comments in pairs:
            if item.is_locked(role):
                continue
            item.lock_score(role, value, submitted_by, comments)
            applied += 1

        if new_type:
            evaluation.evaluation_type = new_type
        evaluation.mark_submitted(role)

        await self.db.commit()

        logger.log_scoring_event(
            "scores_submitted", evaluation_id, role=role.value,
            applied=applied, kept_locked=len(pairs) - applied,
            status=evaluation.status.value,
        )
        return await self.get_evaluation(evaluation_id)

    async def submit_scores_from_spreadsheet(
        self,
        evaluation_id: str,
        role: ScoringRole,
        content: bytes,
        submitted_by: Optional[str] = None,
    ) -> Evaluation:
        """
        Submit a role's scores from a workbook.

        Uses the row whose ProjectName matches the evaluation's project
        (or the first row when the sheet has no project names) and maps
        columns onto rubric items by criterion, ignoring case.
        """
        evaluation = await self.get_evaluation(evaluation_id)
        rows = read_rows(content)

        title = evaluation.project.title if evaluation.project else ""
        named_rows = [row for row in rows if project_name_of(row)]
        if named_rows:
            row = next((r for r in named_rows if project_name_of(r) == title), None)
        else:
            row = rows[0]
        if row is None:
            raise InvalidSpreadsheetError(f'No row found for project "{title}"')

        scores = []
        for column, cell in row.items():
            item = evaluation.find_item_by_criterion(column)
            if item is None:
                continue
            value = parse_score(cell)
            if value is None:
                continue
            scores.append({"item_id": str(item.id), "value": value})

        if not scores:
            raise InvalidSpreadsheetError("Spreadsheet has no scores for this evaluation's criteria")

        return await self.submit_scores(evaluation.id, role, scores, submitted_by)

    # =====================================================
    # EXPORT
    # =====================================================

    async def export_evaluation(self, evaluation_id: str) -> bytes:
        evaluation = await self.get_evaluation(evaluation_id)
        return build_evaluation_workbook(evaluation)
