"""
Mock Data Generator

Generates synthetic price history for demo charts and tests,
and filters price series by date range.
"""

import calendar
import random
from datetime import datetime, timedelta
from typing import Optional

from folio.schemas.indicators import DateRange, PricePoint

# Small upward drift applied every day
DAILY_DRIFT = 0.0005

# Mock history parameters per chart scope
PORTFOLIO_START_PRICE = 10_000.0
PORTFOLIO_VOLATILITY = 0.015
ASSET_START_PRICE = 100.0
ASSET_VOLATILITY = 0.02
HISTORY_DAYS = 365

DATE_RANGE_MONTHS = {
    DateRange.M1: 1,
    DateRange.M3: 3,
    DateRange.M6: 6,
    DateRange.Y1: 12,
}


def generate_mock_price_history(
    start_price: float = 100.0,
    days: int = 365,
    volatility: float = 0.02,
    end: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> list[PricePoint]:
    """
    Generate a daily random walk with drift.

    Point i is dated `end - (days - i)` days, so dates are strictly
    ascending and the last point is one day before `end`.
    """
    if end is None:
        end = datetime.now()
    if rng is None:
        rng = random.Random()

    points = []
    price = start_price

    for i in range(days):
        date = end - timedelta(days=days - i)

        # Random walk with drift
        change = (rng.random() - 0.5) * 2 * volatility
        price = price * (1 + DAILY_DRIFT + change)

        points.append(PricePoint(date=date, price=round(price, 2)))

    return points


def filter_price_data_by_date_range(
    data: list[PricePoint],
    start: datetime,
    end: datetime,
) -> list[PricePoint]:
    """Keep points with start <= date <= end, order preserved."""
    return [point for point in data if start <= point.date <= end]


def _subtract_months(moment: datetime, months: int) -> datetime:
    """Calendar month subtraction, clamping the day (Mar 31 - 1M = Feb 28/29)."""
    month_index = moment.month - 1 - months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def resolve_date_range(
    date_range: DateRange,
    now: datetime,
    earliest: Optional[datetime] = None,
) -> datetime:
    """Start date of a chart window ending at `now`."""
    if date_range == DateRange.ALL:
        return earliest if earliest is not None else now
    return _subtract_months(now, DATE_RANGE_MONTHS[date_range])
