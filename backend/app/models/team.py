"""Student teams - one team owns at most one project"""
from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base
from app.core.types import GUID, generate_uuid, generate_team_code


class Team(Base):
    """Team of students working on a single project"""
    __tablename__ = "teams"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(Text, nullable=False)

    leader_id = Column(GUID, ForeignKey("users.id"), nullable=False)

    # Team settings
    max_members = Column(Integer, default=5, nullable=False)
    is_open = Column(Boolean, default=True)
    team_code = Column(String(16), unique=True, nullable=False, default=generate_team_code)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    leader = relationship("User", foreign_keys=[leader_id], lazy="selectin")
    project = relationship("Project", back_populates="team", uselist=False, lazy="selectin")

    def __repr__(self):
        return f"<Team {self.name}>"

    def is_leader(self, user_id: str) -> bool:
        return str(self.leader_id) == str(user_id)
