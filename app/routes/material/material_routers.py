from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import get_session_context, resolve_recycler_id
from app.models.material_db.material_crud import record_material, list_logs
from app.schemas.login.login_base import SessionContext
from app.schemas.materials.material_base import MaterialLogCreate, MaterialLogOut

material_router = APIRouter(prefix="/material-logs", tags=["Material Logs"])


@material_router.post("", response_model=MaterialLogOut, status_code=201)
def create_material_log(
    payload: MaterialLogCreate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    recycler_id = resolve_recycler_id(ctx, payload.recycler_id)
    return record_material(db, recycler_id, payload.event_id, payload.weight, payload.material)


@material_router.get("", response_model=List[MaterialLogOut])
def material_logs(
    from_date: date = Query(..., alias="from"),
    to_date: date = Query(..., alias="to"),
    recycler_id: Optional[int] = Query(None, alias="recyclerId"),
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    return list_logs(db, resolve_recycler_id(ctx, recycler_id), from_date, to_date)
