from app.services.evaluation_service import EvaluationService
from app.services.spreadsheet_export import build_evaluation_workbook
from app.services.spreadsheet_import import (
    CriterionSpec,
    RubricSeed,
    read_rows,
    resolve_criteria,
    group_rows_by_project,
    seed_rubric_items,
)

__all__ = [
    "EvaluationService",
    # Spreadsheet I/O
    "build_evaluation_workbook",
    "CriterionSpec",
    "RubricSeed",
    "read_rows",
    "resolve_criteria",
    "group_rows_by_project",
    "seed_rubric_items",
]
