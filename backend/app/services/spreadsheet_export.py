"""Render an evaluation back into an .xlsx workbook"""

from io import BytesIO

import pandas as pd

from app.models.evaluation import Evaluation, ScoringRole
from app.services.spreadsheet_import import PROJECT_NAME_COLUMN

EVALUATION_SHEET = "Evaluation"
SCORES_SHEET = "Scores"


def _evaluation_rows(evaluation: Evaluation) -> list:
    if evaluation.excel_data:
        return list(evaluation.excel_data)

    row = {PROJECT_NAME_COLUMN: evaluation.project.title if evaluation.project else ""}
    for item in evaluation.rubric_items:
        row[item.criterion] = item.score_value(ScoringRole.faculty)
    return [row]


def _score_rows(evaluation: Evaluation) -> list:
    rows = [
        {
            "Criterion": item.criterion,
            "Max Score": item.max_score,
            "Faculty Score": item.score_value(ScoringRole.faculty),
            "Reviewer Score": item.score_value(ScoringRole.reviewer),
            "Total": item.total_score,
        }
        for item in evaluation.rubric_items
    ]
    rows.append({
        "Criterion": "Total",
        "Max Score": evaluation.max_total,
        "Faculty Score": evaluation.total_score(ScoringRole.faculty),
        "Reviewer Score": evaluation.total_score(ScoringRole.reviewer),
        "Total": evaluation.grand_total,
    })
    return rows


def build_evaluation_workbook(evaluation: Evaluation) -> bytes:
    """Raw imported rows on one sheet, the per-criterion breakdown on another"""
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        pd.DataFrame(_evaluation_rows(evaluation)).to_excel(writer, sheet_name=EVALUATION_SHEET, index=False)
        pd.DataFrame(_score_rows(evaluation)).to_excel(writer, sheet_name=SCORES_SHEET, index=False)
    return buffer.getvalue()
