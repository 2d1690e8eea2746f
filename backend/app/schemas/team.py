"""Pydantic schemas for student teams"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime


class TeamCreate(BaseModel):
    """Create a new team; the caller becomes its leader"""
    name: str = Field(..., min_length=2, max_length=255, description="Team name")
    description: str = Field(..., min_length=1, max_length=1000)
    max_members: int = Field(default=5, ge=1, le=10)


class TeamJoin(BaseModel):
    team_code: str = Field(..., min_length=4, max_length=16, description="Code shared by the team leader")


class TeamMemberResponse(BaseModel):
    id: str
    name: str
    email: str
    sap_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class TeamResponse(BaseModel):
    id: str
    name: str
    description: str
    leader_id: str
    max_members: int
    is_open: bool
    team_code: str
    project_id: Optional[str] = None
    members: List[TeamMemberResponse] = []
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
