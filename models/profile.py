from datetime import datetime
from enum import Enum

from sqlalchemy import Column, Integer, String, DateTime, Enum as SQLEnum

from database.connection import Base


class ProfileRole(str, Enum):
    ADMIN = "admin"
    ASSISTANT = "assistant"


class Profile(Base):
    """Staff user. Authentication itself lives with the external session provider."""
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    email = Column(String(120), nullable=False, unique=True, index=True)
    role = Column(
        SQLEnum(ProfileRole, values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=ProfileRole.ASSISTANT,
    )

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = Column(DateTime, nullable=True)

    @property
    def is_admin(self) -> bool:
        return self.role == ProfileRole.ADMIN

    def __repr__(self):
        return f"<Profile(id={self.id}, email='{self.email}', role='{self.role}')>"
