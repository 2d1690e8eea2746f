"""
Evaluation Models

Rubric-based scoring of team projects:
- One evaluation ties a project and its team to an ordered list of rubric items
- Two independent scoring tracks per item (faculty, reviewer)
- One-shot submission per track; submitted scores are locked
- Status is derived from the two submission flags
- Spreadsheet imports keep the raw rows and may pre-fill faculty scores
"""
from sqlalchemy import Column, String, Integer, Float, Boolean, Text, DateTime, ForeignKey, Enum as SQLEnum, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from typing import Optional, Dict, Any
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class EvaluationType(str, enum.Enum):
    """Evaluation round"""
    milestone = "milestone"
    final = "final"
    excel_based = "excel-based"


class EvaluationStatus(str, enum.Enum):
    """Derived from the faculty/reviewer submission flags"""
    pending = "pending"
    faculty_evaluated = "faculty-evaluated"
    reviewer_evaluated = "reviewer-evaluated"
    completed = "completed"


class ScoringRole(str, enum.Enum):
    """The two independent grading tracks"""
    faculty = "faculty"
    reviewer = "reviewer"


def derive_status(faculty_submitted: bool, reviewer_submitted: bool) -> EvaluationStatus:
    """Map the two submission flags to an evaluation status"""
    if faculty_submitted and reviewer_submitted:
        return EvaluationStatus.completed
    if faculty_submitted:
        return EvaluationStatus.faculty_evaluated
    if reviewer_submitted:
        return EvaluationStatus.reviewer_evaluated
    return EvaluationStatus.pending


class RubricItem(Base):
    """
    A single gradeable criterion.

    Each role owns a score slot stored as a group of prefixed columns
    (faculty_value, faculty_locked, ...). Access them through the
    role-aware helpers rather than by column name.
    """
    __tablename__ = "rubric_items"
    __table_args__ = (
        UniqueConstraint("evaluation_id", "criterion", name="uq_rubric_items_evaluation_criterion"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    evaluation_id = Column(GUID, ForeignKey("evaluations.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    criterion = Column(String(255), nullable=False)
    description = Column(Text, default="")
    max_score = Column(Float, nullable=False)

    # Per-role ceilings; NULL means the item's max_score
    faculty_max_score = Column(Float, nullable=True)
    reviewer_max_score = Column(Float, nullable=True)

    # Faculty score slot
    faculty_value = Column(Float, nullable=True)
    faculty_submitted_by = Column(GUID, ForeignKey("users.id"), nullable=True)
    faculty_submitted_at = Column(DateTime, nullable=True)
    faculty_comments = Column(Text, nullable=True)
    faculty_locked = Column(Boolean, default=False, nullable=False)

    # Reviewer score slot
    reviewer_value = Column(Float, nullable=True)
    reviewer_submitted_by = Column(GUID, ForeignKey("users.id"), nullable=True)
    reviewer_submitted_at = Column(DateTime, nullable=True)
    reviewer_comments = Column(Text, nullable=True)
    reviewer_locked = Column(Boolean, default=False, nullable=False)

    # Relationships
    evaluation = relationship("Evaluation", back_populates="rubric_items")

    def __repr__(self):
        return f"<RubricItem {self.criterion} (max {self.max_score})>"

    def ceiling(self, role: ScoringRole) -> float:
        """Highest score the role may give on this item"""
        role_max = getattr(self, f"{role.value}_max_score")
        return self.max_score if role_max is None else role_max

    def score_value(self, role: ScoringRole) -> Optional[float]:
        return getattr(self, f"{role.value}_value")

    def is_locked(self, role: ScoringRole) -> bool:
        return bool(getattr(self, f"{role.value}_locked", False))

    def lock_score(
        self,
        role: ScoringRole,
        value: float,
        submitted_by: Optional[str],
        comments: Optional[str] = None,
    ):
        """Write the role's score and lock the slot"""
        setattr(self, f"{role.value}_value", value)
        setattr(self, f"{role.value}_submitted_by", submitted_by)
        setattr(self, f"{role.value}_submitted_at", datetime.utcnow())
        setattr(self, f"{role.value}_comments", comments)
        setattr(self, f"{role.value}_locked", True)

    def score_slot(self, role: ScoringRole) -> Dict[str, Any]:
        """The role's slot as a plain mapping"""
        return {
            "value": self.score_value(role),
            "submitted_by": getattr(self, f"{role.value}_submitted_by"),
            "submitted_at": getattr(self, f"{role.value}_submitted_at"),
            "comments": getattr(self, f"{role.value}_comments"),
            "locked": self.is_locked(role),
        }

    @property
    def total_score(self) -> float:
        """Faculty plus reviewer score, unscored slots count as 0"""
        return sum(self.score_value(role) or 0 for role in ScoringRole)


class Evaluation(Base):
    """Scoring record for one project/team pair"""
    __tablename__ = "evaluations"

    id = Column(GUID, primary_key=True, default=generate_uuid)

    # Set at creation, never reassigned
    project_id = Column(GUID, ForeignKey("projects.id"), nullable=False, index=True)
    team_id = Column(GUID, ForeignKey("teams.id"), nullable=False, index=True)

    evaluation_type = Column(SQLEnum(EvaluationType, values_callable=lambda obj: [e.value for e in obj]), nullable=False)
    # Informational only, not enforced on submission
    due_date = Column(DateTime, nullable=False)

    # Submission state
    faculty_submitted = Column(Boolean, default=False, nullable=False)
    reviewer_submitted = Column(Boolean, default=False, nullable=False)
    status = Column(SQLEnum(EvaluationStatus, values_callable=lambda obj: [e.value for e in obj]), default=EvaluationStatus.pending, nullable=False)

    # Spreadsheet import artifacts
    excel_data = Column(JSON, default=list)
    has_prefilled_scores = Column(Boolean, default=False, nullable=False)

    created_by = Column(GUID, ForeignKey("users.id"), nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    rubric_items = relationship(
        "RubricItem",
        back_populates="evaluation",
        cascade="all, delete-orphan",
        order_by="RubricItem.position",
        lazy="selectin",
    )
    project = relationship("Project", lazy="selectin")
    team = relationship("Team", lazy="selectin")

    def __repr__(self):
        return f"<Evaluation {self.evaluation_type} for project {self.project_id}>"

    def is_submitted(self, role: ScoringRole) -> bool:
        return bool(getattr(self, f"{role.value}_submitted", False))

    def mark_submitted(self, role: ScoringRole):
        """Flip the role's flag and recompute status"""
        setattr(self, f"{role.value}_submitted", True)
        self.status = derive_status(bool(self.faculty_submitted), bool(self.reviewer_submitted))

    def get_item(self, item_id: str) -> Optional[RubricItem]:
        for item in self.rubric_items:
            if str(item.id) == str(item_id):
                return item
        return None

    def find_item_by_criterion(self, criterion: str) -> Optional[RubricItem]:
        """Case-insensitive criterion lookup"""
        wanted = criterion.strip().lower()
        for item in self.rubric_items:
            if item.criterion.strip().lower() == wanted:
                return item
        return None

    def total_score(self, role: ScoringRole) -> float:
        """Sum of the role's scores, unscored items count as 0"""
        return sum(item.score_value(role) or 0 for item in self.rubric_items)

    @property
    def max_total(self) -> float:
        return sum(item.max_score for item in self.rubric_items)

    @property
    def grand_total(self) -> float:
        return sum(self.total_score(role) for role in ScoringRole)

    @property
    def is_completed(self) -> bool:
        return self.status == EvaluationStatus.completed
