import datetime

from pydantic import BaseModel


class DailyEarning(BaseModel):
    date: datetime.date
    earnings: float


class EarningsSummary(BaseModel):
    from_date: datetime.date
    to_date: datetime.date
    log_count: int
    active_days: int
    total_weight: float
    total_earnings: float
