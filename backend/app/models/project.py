from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class ProjectStatus(str, enum.Enum):
    """Project status"""
    PROPOSED = "proposed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Project(Base):
    """Team project registered for evaluation"""
    __tablename__ = "projects"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    # Looked up by exact title during spreadsheet import
    title = Column(String(500), nullable=False, index=True)
    description = Column(Text, nullable=True)

    team_id = Column(GUID, ForeignKey("teams.id"), nullable=False, unique=True)
    status = Column(SQLEnum(ProjectStatus, values_callable=lambda obj: [e.value for e in obj]), default=ProjectStatus.PROPOSED, nullable=False)

    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    team = relationship("Team", back_populates="project", lazy="selectin")

    def __repr__(self):
        return f"<Project {self.title}>"
