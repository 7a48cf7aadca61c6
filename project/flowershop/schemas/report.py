# flowershop/schemas/report.py

from pydantic import BaseModel
from typing import Literal

ReportPeriod = Literal["today", "week", "month", "all"]

class SalesReport(BaseModel):
    period: ReportPeriod
    total_orders: int
    total_revenue: int
    total_deliveries: int
