from enum import Enum

from sqlalchemy import Column, String, Boolean, Integer, DateTime, Text
from sqlalchemy.orm import relationship
from app.core.clock import utcnow
from app.core.database import Base


class UserRole(str, Enum):
    recycler = "recycler"
    admin = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    username = Column(String, unique=True, nullable=False)
    email = Column(String, unique=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    name = Column(String, nullable=False)
    bio = Column(Text, nullable=True)
    avatar = Column(Text, nullable=True)  # profile picture URL
    role = Column(String, nullable=False, default=UserRole.recycler.value)
    is_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow)

    participations = relationship("Participation", back_populates="user")
    material_logs = relationship("MaterialLog", back_populates="user")
