from decimal import Decimal
from typing import List

from sqlalchemy import exists, func
from sqlalchemy.orm import Session

from app.core.database import store_guard
from app.core.errors import EventNotFound
from app.models.event_db.event_db import Event
from app.models.event_db.participation_db import Participation
from app.models.material_db.material_log_db import MaterialLog
from app.schemas.events.event_base import EventCreate
from app.services.participation_states import ACTIVE_STATUSES, ParticipationStatus


def create_event(db: Session, data: EventCreate) -> Event:
    event = Event(
        address=data.address,
        description=data.description,
        start_time=data.start_time,
        weight_capacity=data.weight_capacity,
    )
    with store_guard(db):
        db.add(event)
        db.commit()
        db.refresh(event)
    return event


def get_event(db: Session, event_id: int, for_update: bool = False) -> Event:
    with store_guard(db):
        query = db.query(Event).filter(Event.id == event_id)
        if for_update:
            query = query.with_for_update()
        event = query.first()
    if not event:
        raise EventNotFound()
    return event


def list_eligible_events(db: Session, recycler_id: int) -> List[Event]:
    """Events this recycler has no active participation in, soonest first."""
    active = exists().where(
        Participation.event_id == Event.id,
        Participation.user_id == recycler_id,
        Participation.status != ParticipationStatus.cancelled.value,
    )
    with store_guard(db):
        return db.query(Event).filter(~active).order_by(Event.start_time, Event.id).all()


def list_joined_events(db: Session, recycler_id: int) -> List[Event]:
    with store_guard(db):
        return (
            db.query(Event)
            .join(Participation, Participation.event_id == Event.id)
            .filter(
                Participation.user_id == recycler_id,
                Participation.status.in_(ACTIVE_STATUSES),
            )
            .order_by(Event.start_time, Event.id)
            .all()
        )


def committed_weight(db: Session, event_id: int) -> Decimal:
    """Weight already logged against an event."""
    with store_guard(db):
        total = (
            db.query(func.coalesce(func.sum(MaterialLog.weight), 0))
            .filter(MaterialLog.event_id == event_id)
            .scalar()
        )
    return Decimal(str(total))
