from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import get_session_context, resolve_recycler_id
from app.schemas.earnings.earning_base import DailyEarning, EarningsSummary
from app.schemas.login.login_base import SessionContext
from app.services.earnings import daily_earnings, earnings_summary

earnings_router = APIRouter(prefix="/earnings", tags=["Earnings"])


@earnings_router.get("", response_model=List[DailyEarning])
def get_daily_earnings(
    from_date: date = Query(..., alias="from"),
    to_date: date = Query(..., alias="to"),
    recycler_id: Optional[int] = Query(None, alias="recyclerId"),
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    return daily_earnings(db, resolve_recycler_id(ctx, recycler_id), from_date, to_date)


@earnings_router.get("/summary", response_model=EarningsSummary)
def get_earnings_summary(
    from_date: date = Query(..., alias="from"),
    to_date: date = Query(..., alias="to"),
    recycler_id: Optional[int] = Query(None, alias="recyclerId"),
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    return earnings_summary(db, resolve_recycler_id(ctx, recycler_id), from_date, to_date)
