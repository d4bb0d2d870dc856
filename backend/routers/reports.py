import calendar
from datetime import date, datetime, time
from typing import List, Tuple

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from db.database import get_async_session
from db.expense import Expense as ExpenseModel
from db.sale import Sale as SaleModel
from schemas.reports import ExpenseReportRow, ProfitReport, SaleReportRow

router = APIRouter()


def month_range(month: int, year: int) -> Tuple[datetime, datetime]:
    """First and last instant of the month, both inclusive."""
    if not 1 <= month <= 12:
        raise ValueError("month must be between 1 and 12")
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1)
    end = datetime.combine(date(year, month, last_day), time.max)
    return start, end


@router.get("/sales", response_model=List[SaleReportRow])
async def total_sales(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1, le=9999),
    db: AsyncSession = Depends(get_async_session),
):
    start, end = month_range(month, year)
    res = await db.execute(
        select(SaleModel)
        .where(SaleModel.created_at >= start, SaleModel.created_at <= end)
        .order_by(SaleModel.created_at)
    )
    return [
        SaleReportRow(
            customer_name=s.customer_name or "N/A",
            total_amount=float(s.total_amount or 0),
            created_at=s.created_at,
            item_names=list(s.item_names or []),
        )
        for s in res.scalars().all()
    ]


@router.get("/expenses", response_model=List[ExpenseReportRow])
async def total_expenses(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1, le=9999),
    db: AsyncSession = Depends(get_async_session),
):
    start, end = month_range(month, year)
    res = await db.execute(
        select(ExpenseModel)
        .where(ExpenseModel.date >= start, ExpenseModel.date <= end)
        .order_by(ExpenseModel.date)
    )
    return [ExpenseReportRow(name=e.name, price=float(e.price), date=e.date) for e in res.scalars().all()]


@router.get("/profit", response_model=ProfitReport)
async def total_profit(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1, le=9999),
    db: AsyncSession = Depends(get_async_session),
):
    start, end = month_range(month, year)
    sales_total = await db.scalar(
        select(func.coalesce(func.sum(SaleModel.total_amount), 0))
        .where(SaleModel.created_at >= start, SaleModel.created_at <= end)
    )
    expenses_total = await db.scalar(
        select(func.coalesce(func.sum(ExpenseModel.price), 0))
        .where(ExpenseModel.date >= start, ExpenseModel.date <= end)
    )
    return ProfitReport(total_profit=float(sales_total or 0) - float(expenses_total or 0))
