# flowershop/services/reports.py

import calendar
import datetime

from flowershop.schemas.order import Order
from flowershop.schemas.report import SalesReport


def month_back(day: datetime.date) -> datetime.date:
    year, month = (day.year, day.month - 1) if day.month > 1 else (day.year - 1, 12)
    return day.replace(year=year, month=month, day=min(day.day, calendar.monthrange(year, month)[1]))


def period_start(period: str, today: datetime.date) -> datetime.date | None:
    """First day counted for period, None for all time."""
    if period == "today":
        return today
    if period == "week":
        return today - datetime.timedelta(days=7)
    if period == "month":
        return month_back(today)
    return None


def summarize(orders: list[Order], period: str = "today", today: datetime.date | None = None) -> SalesReport:
    """
    Order count, cash revenue and delivered count for the period.
    """
    today = today or datetime.date.today()
    start = period_start(period, today)
    selected = [o for o in orders if start is None or o.date >= start]

    return SalesReport(
        period=period,
        total_orders=len(selected),
        total_revenue=sum(o.total_amount for o in selected),
        total_deliveries=sum(1 for o in selected if o.status == "Delivered"),
    )
