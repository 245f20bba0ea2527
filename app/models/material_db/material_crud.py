import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.core.config import settings
from app.core.database import store_guard
from app.core.errors import CapacityExceeded, EventNotAttended, InvalidRange, InvalidWeight
from app.models.event_db.event_crud import committed_weight, get_event
from app.models.event_db.participation_db import Participation
from app.models.material_db.material_log_db import MaterialLog
from app.models.user_db.user_db_crud import get_recycler
from app.services.materials import GRAM, MAX_WEIGHT, MaterialType, compute_earnings
from app.services.participation_states import ACTIVE_STATUSES

logger = logging.getLogger(__name__)


def record_material(
    db: Session,
    recycler_id: int,
    event_id: Optional[int],
    weight,
    material: MaterialType = MaterialType.mixed,
) -> MaterialLog:
    weight = Decimal(str(weight))
    if weight > MAX_WEIGHT:
        raise InvalidWeight(f"Weight must not exceed {MAX_WEIGHT} kg")
    # stored with gram precision; checks run on the stored value
    weight = weight.quantize(GRAM, rounding=ROUND_HALF_UP)
    if weight <= 0:
        raise InvalidWeight()

    get_recycler(db, recycler_id)

    if event_id is not None:
        event = get_event(db, event_id, for_update=True)

        with store_guard(db):
            participation = (
                db.query(Participation)
                .filter(
                    Participation.user_id == recycler_id,
                    Participation.event_id == event_id,
                    Participation.status.in_(ACTIVE_STATUSES),
                )
                .first()
            )
        if not participation:
            raise EventNotAttended()

        if settings.ENFORCE_CAPACITY_ON_LOG:
            committed = committed_weight(db, event_id)
            if committed + weight > event.weight_capacity:
                logger.warning(
                    "Capacity exceeded for event %s: %s + %s > %s",
                    event_id, committed, weight, event.weight_capacity,
                )
                raise CapacityExceeded()

    rate, earnings = compute_earnings(weight, material)
    log = MaterialLog(
        user_id=recycler_id,
        event_id=event_id,
        material=material.value,
        weight=weight,
        rate_per_kg=rate,
        earnings=earnings,
        created_at=utcnow(),
    )
    with store_guard(db):
        db.add(log)
        db.commit()
        db.refresh(log)

    logger.info("Recorded %s kg of %s for recycler %s (earnings %s)", weight, material.value, recycler_id, earnings)
    return log


def day_bounds(from_date: date, to_date: date):
    """[start of from_date, start of the day after to_date) in UTC."""
    return datetime.combine(from_date, time.min), datetime.combine(to_date + timedelta(days=1), time.min)


def list_logs(db: Session, recycler_id: int, from_date: date, to_date: date) -> List[MaterialLog]:
    if from_date > to_date:
        raise InvalidRange()

    start, end = day_bounds(from_date, to_date)
    with store_guard(db):
        return (
            db.query(MaterialLog)
            .filter(
                MaterialLog.user_id == recycler_id,
                MaterialLog.created_at >= start,
                MaterialLog.created_at < end,
            )
            .order_by(MaterialLog.created_at, MaterialLog.id)
            .all()
        )
