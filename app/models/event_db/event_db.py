from sqlalchemy import Column, Integer, String, DateTime, Numeric, Text
from sqlalchemy.orm import relationship
from app.core.clock import utcnow
from app.core.database import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    address = Column(String, nullable=False)
    description = Column(Text, nullable=True)

    start_time = Column(DateTime, nullable=False, index=True)
    weight_capacity = Column(Numeric(10, 3), nullable=False)  # kg

    created_at = Column(DateTime, default=utcnow)

    # Relationships
    participations = relationship("Participation", back_populates="event")
    material_logs = relationship("MaterialLog", back_populates="event")
