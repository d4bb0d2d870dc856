from datetime import datetime
from typing import List

from pydantic import BaseModel


class SaleReportRow(BaseModel):
    customer_name: str
    total_amount: float
    created_at: datetime
    item_names: List[str]


class ExpenseReportRow(BaseModel):
    name: str
    price: float
    date: datetime


class ProfitReport(BaseModel):
    total_profit: float
