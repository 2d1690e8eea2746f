"""
Unit Tests for spreadsheet export
"""
from io import BytesIO

import pandas as pd

from app.models.evaluation import Evaluation, RubricItem, ScoringRole
from app.models.project import Project
from app.services.spreadsheet_export import build_evaluation_workbook


def read_sheets(content: bytes) -> dict:
    return pd.read_excel(BytesIO(content), sheet_name=None, engine="openpyxl")


class TestBuildEvaluationWorkbook:

    def test_scores_sheet_has_breakdown_and_total(self):
        design = RubricItem(criterion="Design", max_score=5)
        demo = RubricItem(criterion="Implementation Demonstration", max_score=20)
        design.lock_score(ScoringRole.faculty, 4, "f")
        design.lock_score(ScoringRole.reviewer, 3, "r")
        evaluation = Evaluation(
            project=Project(title="Alpha"),
            rubric_items=[design, demo],
            excel_data=[],
        )

        sheets = read_sheets(build_evaluation_workbook(evaluation))

        scores = sheets["Scores"]
        assert list(scores["Criterion"]) == ["Design", "Implementation Demonstration", "Total"]
        total = scores.iloc[-1]
        assert total["Max Score"] == 25
        assert total["Faculty Score"] == 4
        assert total["Reviewer Score"] == 3
        assert total["Total"] == 7

    def test_evaluation_sheet_synthesized_without_import_rows(self):
        design = RubricItem(criterion="Design", max_score=5)
        design.lock_score(ScoringRole.faculty, 4, "f")
        evaluation = Evaluation(project=Project(title="Alpha"), rubric_items=[design], excel_data=[])

        sheet = read_sheets(build_evaluation_workbook(evaluation))["Evaluation"]

        assert sheet.to_dict("records") == [{"ProjectName": "Alpha", "Design": 4}]

    def test_evaluation_sheet_keeps_imported_rows(self):
        rows = [
            {"ProjectName": "Alpha", "StudentName": "Asha", "Design": 4},
            {"ProjectName": "Alpha", "StudentName": "Ravi", "Design": 4},
        ]
        evaluation = Evaluation(
            project=Project(title="Alpha"),
            rubric_items=[RubricItem(criterion="Design", max_score=5)],
            excel_data=rows,
        )

        sheet = read_sheets(build_evaluation_workbook(evaluation))["Evaluation"]

        assert list(sheet["StudentName"]) == ["Asha", "Ravi"]
