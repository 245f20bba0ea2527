"""
Earnings aggregation over material logs.

Daily series are derived on every call and never persisted. Logs are bucketed
by the UTC calendar day of ``created_at``; only days that have at least one
log appear in the output.
"""
import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List

from sqlalchemy.orm import Session

from app.core.errors import InvalidRange
from app.models.material_db.material_crud import list_logs
from app.models.material_db.material_log_db import MaterialLog

logger = logging.getLogger(__name__)


def bucket_daily(logs: Iterable[MaterialLog]) -> List[Dict]:
    totals = defaultdict(Decimal)
    for log in logs:
        totals[log.created_at.date()] += Decimal(log.earnings)

    return [{"date": day, "earnings": totals[day]} for day in sorted(totals)]


def daily_earnings(db: Session, recycler_id: int, from_date: date, to_date: date) -> List[Dict]:
    if from_date > to_date:
        raise InvalidRange()

    series = bucket_daily(list_logs(db, recycler_id, from_date, to_date))
    logger.debug("Daily earnings for recycler %s: %d day(s)", recycler_id, len(series))
    return series


def earnings_summary(db: Session, recycler_id: int, from_date: date, to_date: date) -> Dict:
    if from_date > to_date:
        raise InvalidRange()

    logs = list_logs(db, recycler_id, from_date, to_date)
    return {
        "from_date": from_date,
        "to_date": to_date,
        "log_count": len(logs),
        "total_weight": sum((Decimal(log.weight) for log in logs), Decimal("0")),
        "total_earnings": sum((Decimal(log.earnings) for log in logs), Decimal("0")),
        "active_days": len({log.created_at.date() for log in logs}),
    }
