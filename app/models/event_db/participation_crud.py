"""
Participation state machine backed by the participations table.

eligible (no row) -> joined -> attended
                     joined -> cancelled

Every transition writes a ParticipationTransition row in the same
transaction as the status change. History is never rewritten; a cancelled
recycler re-joins by creating a new participation.
"""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.core.config import settings
from app.core.database import store_guard
from app.core.errors import AlreadyJoined, CapacityExceeded, NotVerified
from app.models.event_db.event_crud import committed_weight, get_event
from app.models.event_db.participation_db import Participation, ParticipationTransition
from app.models.user_db.user_db_crud import get_recycler
from app.services.participation_states import ParticipationStatus, check_transition

logger = logging.getLogger(__name__)


def get_participation(
    db: Session, recycler_id: int, event_id: int, for_update: bool = False
) -> Optional[Participation]:
    """Most recent participation for the pair, cancelled ones included."""
    with store_guard(db):
        query = (
            db.query(Participation)
            .filter(Participation.user_id == recycler_id, Participation.event_id == event_id)
            .order_by(Participation.id.desc())
        )
        if for_update:
            query = query.with_for_update()
        return query.first()


def _record_transition(db: Session, participation: Participation, from_status, actor_id):
    db.add(
        ParticipationTransition(
            participation=participation,
            from_status=from_status,
            to_status=participation.status,
            actor_id=actor_id,
            created_at=utcnow(),
        )
    )


def join_event(db: Session, recycler_id: int, event_id: int) -> Participation:
    recycler = get_recycler(db, recycler_id)
    event = get_event(db, event_id)

    if not recycler.is_verified:
        raise NotVerified()

    current = get_participation(db, recycler_id, event_id, for_update=True)
    if current and current.status != ParticipationStatus.cancelled.value:
        raise AlreadyJoined()

    if settings.ENFORCE_CAPACITY_ON_JOIN and committed_weight(db, event_id) >= event.weight_capacity:
        raise CapacityExceeded("Event has no remaining weight capacity")

    participation = Participation(
        user_id=recycler_id,
        event_id=event_id,
        status=ParticipationStatus.joined.value,
        joined_at=utcnow(),
    )
    with store_guard(db):
        db.add(participation)
        _record_transition(db, participation, None, recycler_id)
        try:
            db.commit()
        except IntegrityError as exc:
            # a concurrent join won the unique active-participation index
            db.rollback()
            raise AlreadyJoined() from exc
        db.refresh(participation)

    logger.info("Recycler %s joined event %s", recycler_id, event_id)
    return participation


def _advance(
    db: Session, recycler_id: int, event_id: int, target: ParticipationStatus, actor_id: Optional[int]
) -> Participation:
    get_event(db, event_id)
    participation = get_participation(db, recycler_id, event_id, for_update=True)
    previous = participation.status if participation else None
    check_transition(previous, target)

    participation.status = target.value
    if target == ParticipationStatus.attended:
        participation.attended_at = utcnow()
    elif target == ParticipationStatus.cancelled:
        participation.cancelled_at = utcnow()

    with store_guard(db):
        _record_transition(db, participation, previous, actor_id)
        db.commit()
        db.refresh(participation)

    logger.info(
        "Participation %s of recycler %s in event %s: %s -> %s",
        participation.id, recycler_id, event_id, previous, target.value,
    )
    return participation


def check_in(db: Session, recycler_id: int, event_id: int, actor_id: Optional[int] = None) -> Participation:
    """Attendance confirmed by an organizer."""
    return _advance(db, recycler_id, event_id, ParticipationStatus.attended, actor_id)


def cancel_participation(
    db: Session, recycler_id: int, event_id: int, actor_id: Optional[int] = None
) -> Participation:
    return _advance(db, recycler_id, event_id, ParticipationStatus.cancelled, actor_id)
