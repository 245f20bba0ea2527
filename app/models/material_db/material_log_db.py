from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric
from sqlalchemy.orm import relationship
from app.core.clock import utcnow
from app.core.database import Base


class MaterialLog(Base):
    """Material dropped off by a recycler. Rows are written once and never updated."""

    __tablename__ = "material_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=True, index=True)

    material = Column(String, nullable=False)
    weight = Column(Numeric(10, 3), nullable=False)  # kg
    rate_per_kg = Column(Numeric(10, 4), nullable=False)
    earnings = Column(Numeric(12, 2), nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    user = relationship("User", back_populates="material_logs")
    event = relationship("Event", back_populates="material_logs")
