"""
Spreadsheet Import
==================
Turns an uploaded .xlsx workbook into per-project rubric seeds.

Layout expected on the first sheet:
- One header row
- Identifier columns: ProjectName, StudentName, SAPId
- Every other column is a rubric criterion; cells hold faculty scores

Several rows may share a ProjectName (one per student). Only the first row
of each project carries the scores that get imported.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime
from io import BytesIO
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from app.core.config import settings
from app.core.exceptions import InvalidSpreadsheetError
from app.core.logging_config import logger

PROJECT_NAME_COLUMN = "ProjectName"
IDENTIFIER_COLUMNS = (PROJECT_NAME_COLUMN, "StudentName", "SAPId")

# Reference rubric; matched case-insensitively against column headers
DEFAULT_CRITERIA: Dict[str, float] = {
    "Implementation Demonstration": 20,
    "Project Recognition": 10,
    "Black Book Draft": 5,
    "Presentation Quality": 5,
    "Contribution & Punctuality": 5,
}

IMPORT_COMMENT = "Imported from Excel"

Row = Dict[str, Any]


@dataclass(frozen=True)
class CriterionSpec:
    """A criterion resolved from a header, with its max score"""
    name: str
    max_score: float


@dataclass
class RubricSeed:
    """Values used to build one rubric item for an imported project"""
    criterion: str
    max_score: float
    description: str
    faculty_score: Optional[float] = None

    @property
    def is_prefilled(self) -> bool:
        return self.faculty_score is not None


def _cell_value(value: Any) -> Any:
    """Convert a pandas cell into a JSON-safe python value"""
    if value is None:
        return None
    if isinstance(value, (pd.Timestamp, datetime, date)):
        return value.isoformat()
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    if hasattr(value, "item"):
        # numpy scalar
        return value.item()
    return value


def read_rows(content: bytes) -> List[Row]:
    """
    Parse the first sheet of a workbook into a list of row mappings.

    Blank cells become None, columns without a header are dropped and
    fully blank rows are skipped.

    Raises:
        InvalidSpreadsheetError: payload is not a readable workbook or has no data rows
    """
    try:
        frame = pd.read_excel(BytesIO(content), sheet_name=0, engine="openpyxl")
    except Exception as e:
        logger.warning(f"[SpreadsheetImport] Failed to parse workbook: {e}")
        raise InvalidSpreadsheetError("File is not a readable .xlsx workbook") from e

    headers = [str(column).strip() for column in frame.columns]

    rows: List[Row] = []
    for values in frame.itertuples(index=False, name=None):
        row = {
            header: _cell_value(value)
            for header, value in zip(headers, values)
            if header and not header.startswith("Unnamed:")
        }
        if any(value is not None for value in row.values()):
            rows.append(row)

    if not rows:
        raise InvalidSpreadsheetError("Excel file is empty")

    return rows


def max_score_for(criterion: str) -> float:
    """Reference max score for a criterion, or the configured default"""
    wanted = criterion.strip().lower()
    for name, max_score in DEFAULT_CRITERIA.items():
        if name.lower() == wanted:
            return float(max_score)
    return float(settings.SPREADSHEET_DEFAULT_MAX_SCORE)


def resolve_criteria(columns: Iterable[str]) -> List[CriterionSpec]:
    """
    Resolve the criteria for a whole import batch.

    Every non-identifier column is a criterion. A sheet with no criterion
    columns falls back to the reference rubric.
    """
    criteria = [
        CriterionSpec(name=column, max_score=max_score_for(column))
        for column in columns
        if column not in IDENTIFIER_COLUMNS
    ]
    if criteria:
        return criteria
    return [CriterionSpec(name=name, max_score=float(max_score)) for name, max_score in DEFAULT_CRITERIA.items()]


def project_name_of(row: Row) -> str:
    value = row.get(PROJECT_NAME_COLUMN)
    if value is None:
        return ""
    return str(value).strip()


def group_rows_by_project(rows: List[Row]) -> Dict[str, List[Row]]:
    """Group rows by ProjectName in first-seen order, dropping rows without one"""
    groups: Dict[str, List[Row]] = {}
    for row in rows:
        name = project_name_of(row)
        if not name:
            continue
        groups.setdefault(name, []).append(row)
    return groups


def parse_score(cell: Any) -> Optional[float]:
    """
    Read a numeric score from a cell.

    Returns None for blanks, booleans, non-numeric text and non-finite numbers.
    """
    if cell is None or isinstance(cell, bool):
        return None
    if isinstance(cell, (int, float)):
        score = float(cell)
    elif isinstance(cell, str):
        text = cell.strip()
        if not text:
            return None
        try:
            score = float(text)
        except ValueError:
            return None
    else:
        return None
    return score if math.isfinite(score) else None


def clamp_score(score: float, max_score: float) -> float:
    return min(max(0.0, score), max_score)


def seed_rubric_items(first_row: Row, criteria: List[CriterionSpec]) -> List[RubricSeed]:
    """Build rubric seeds for one project from the first row of its group"""
    seeds = []
    for column in criteria:
        score = parse_score(first_row.get(column.name))
        seeds.append(RubricSeed(
            criterion=column.name,
            max_score=column.max_score,
            description=f"Evaluation for {column.name}",
            faculty_score=clamp_score(score, column.max_score) if score is not None else None,
        ))
    return seeds
