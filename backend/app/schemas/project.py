from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import Optional, List
from datetime import datetime

from app.models.project import ProjectStatus


class ProjectCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=500)
    description: Optional[str] = Field(None, max_length=5000)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class ProjectResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    team_id: str
    team_name: Optional[str] = None
    status: ProjectStatus
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_model(cls, project) -> "ProjectResponse":
        return cls(
            id=str(project.id),
            title=project.title,
            description=project.description,
            team_id=str(project.team_id),
            team_name=project.team.name if project.team else None,
            status=project.status,
            start_date=project.start_date,
            end_date=project.end_date,
            created_at=project.created_at,
        )


class ProjectListResponse(BaseModel):
    projects: List[ProjectResponse]
    total: int
