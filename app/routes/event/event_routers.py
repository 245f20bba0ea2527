from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import get_session_context, require_admin, resolve_recycler_id
from app.models.event_db.event_crud import (
    create_event, get_event, list_eligible_events, list_joined_events, committed_weight
)
from app.models.event_db.participation_crud import (
    join_event, cancel_participation, check_in, get_participation
)
from app.schemas.events.event_base import (
    EventCreate, EventOut, EventDetail, ParticipationOut, ParticipationHistory
)
from app.schemas.login.login_base import SessionContext

event_router = APIRouter(prefix="/events", tags=["Events"])


@event_router.get("", response_model=List[EventOut])
def eligible_events(
    recycler_id: Optional[int] = Query(None, alias="recyclerId"),
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    return list_eligible_events(db, resolve_recycler_id(ctx, recycler_id))


@event_router.get("/joined", response_model=List[EventOut])
def joined_events(
    recycler_id: Optional[int] = Query(None, alias="recyclerId"),
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    return list_joined_events(db, resolve_recycler_id(ctx, recycler_id))


@event_router.post("", response_model=EventOut, status_code=201)
def new_event(data: EventCreate, db: Session = Depends(get_db), _: SessionContext = Depends(require_admin)):
    return create_event(db, data)


@event_router.get("/{event_id}", response_model=EventDetail)
def event_detail(event_id: int, db: Session = Depends(get_db), _: SessionContext = Depends(get_session_context)):
    event = get_event(db, event_id)
    committed = committed_weight(db, event_id)
    return EventDetail(
        **EventOut.model_validate(event).model_dump(),
        committed_weight=committed,
        remaining_capacity=max(event.weight_capacity - committed, 0),
    )


@event_router.post("/{event_id}/join", response_model=ParticipationOut, status_code=201)
def join(event_id: int, db: Session = Depends(get_db), ctx: SessionContext = Depends(get_session_context)):
    return join_event(db, ctx.user_id, event_id)


@event_router.post("/{event_id}/cancel", response_model=ParticipationOut)
def cancel(event_id: int, db: Session = Depends(get_db), ctx: SessionContext = Depends(get_session_context)):
    return cancel_participation(db, ctx.user_id, event_id, actor_id=ctx.user_id)


@event_router.post("/{event_id}/check-in/{recycler_id}", response_model=ParticipationOut)
def confirm_attendance(
    event_id: int,
    recycler_id: int,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_admin),
):
    return check_in(db, recycler_id, event_id, actor_id=ctx.user_id)


@event_router.get("/{event_id}/participation", response_model=Optional[ParticipationHistory])
def my_participation(event_id: int, db: Session = Depends(get_db), ctx: SessionContext = Depends(get_session_context)):
    get_event(db, event_id)
    return get_participation(db, ctx.user_id, event_id)
