from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from app.core.clock import utcnow
from app.core.database import Base

ACTIVE_ONLY = text("status != 'cancelled'")


class Participation(Base):
    __tablename__ = "participations"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    status = Column(String, nullable=False)  # 'joined', 'attended', 'cancelled'
    joined_at = Column(DateTime, default=utcnow)
    attended_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)

    # One active participation per (user, event); cancelled rows are history
    __table_args__ = (
        Index(
            "uq_active_participation",
            "user_id",
            "event_id",
            unique=True,
            postgresql_where=ACTIVE_ONLY,
            sqlite_where=ACTIVE_ONLY,
        ),
    )

    # Relationships
    user = relationship("User", back_populates="participations")
    event = relationship("Event", back_populates="participations")
    transitions = relationship(
        "ParticipationTransition",
        back_populates="participation",
        order_by="ParticipationTransition.id",
    )


class ParticipationTransition(Base):
    """Append-only audit trail of participation status changes."""

    __tablename__ = "participation_transitions"

    id = Column(Integer, primary_key=True, index=True)
    participation_id = Column(Integer, ForeignKey("participations.id"), nullable=False, index=True)
    from_status = Column(String, nullable=True)  # None for the initial join
    to_status = Column(String, nullable=False)
    actor_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    participation = relationship("Participation", back_populates="transitions")
