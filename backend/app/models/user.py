from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class UserRole(str, enum.Enum):
    """User roles"""
    STUDENT = "student"
    FACULTY = "faculty"
    REVIEWER = "reviewer"
    ADMIN = "admin"


class User(Base):
    """
    Portal user.

    Accounts are provisioned by the identity provider; this service only
    reads them and tracks team membership.
    """
    __tablename__ = "users"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    sap_id = Column(String(50), unique=True, nullable=True)

    role = Column(SQLEnum(UserRole, values_callable=lambda obj: [e.value for e in obj]), default=UserRole.STUDENT, nullable=False)
    is_active = Column(Boolean, default=True)

    # Team membership (students only)
    team_id = Column(GUID, nullable=True, index=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<User {self.email}>"

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT

    def can_access_team(self, team_id: str) -> bool:
        """Students only see their own team; staff see every team"""
        if not self.is_student:
            return True
        return self.team_id is not None and str(self.team_id) == str(team_id)
