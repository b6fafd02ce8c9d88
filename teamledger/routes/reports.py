from datetime import date
from typing import List, Literal, Optional, Type

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from pydantic import BaseModel

from teamledger.db.mongo import get_db
from teamledger.schemas.reports import (
    CashflowRow,
    DashboardSummary,
    InventoryRow,
    MemberBalanceRow,
    ProfitLossRow,
)
from teamledger.services.report_service import ReportService
from teamledger.utils.csv_export import rows_to_csv

router = APIRouter(prefix="/reports", tags=["reports"])

ReportFormat = Literal["json", "csv"]


def _render(rows: List[BaseModel], model: Type[BaseModel], fmt: str, name: str):
    if fmt == "csv":
        return Response(
            content=rows_to_csv(rows, model),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{name}.csv"'}
        )
    return rows


@router.get("/pl", response_model=List[ProfitLossRow])
async def profit_and_loss(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    fmt: ReportFormat = Query("json", alias="format"),
    db = Depends(get_db)
):
    """Income, expense and net per (category, project)."""
    rows = await ReportService(db).profit_and_loss(start, end)
    return _render(rows, ProfitLossRow, fmt, "profit_and_loss")


@router.get("/balances", response_model=List[MemberBalanceRow])
async def member_balances(
    fmt: ReportFormat = Query("json", alias="format"),
    db = Depends(get_db)
):
    """Per member: positive means the member owes the team."""
    rows = await ReportService(db).member_balances()
    return _render(rows, MemberBalanceRow, fmt, "member_balances")


@router.get("/cashflow", response_model=List[CashflowRow])
async def monthly_cashflow(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    fmt: ReportFormat = Query("json", alias="format"),
    db = Depends(get_db)
):
    rows = await ReportService(db).monthly_cashflow(start, end)
    return _render(rows, CashflowRow, fmt, "cashflow")


@router.get("/inventory", response_model=List[InventoryRow])
async def inventory(
    fmt: ReportFormat = Query("json", alias="format"),
    db = Depends(get_db)
):
    rows = await ReportService(db).inventory()
    return _render(rows, InventoryRow, fmt, "inventory")


@router.get("/dashboard", response_model=DashboardSummary)
async def dashboard(db = Depends(get_db)):
    return await ReportService(db).dashboard()
