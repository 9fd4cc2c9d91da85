"""Accounting reporting endpoints."""
from datetime import datetime

from fastapi import APIRouter, Query

from travel_expense.core.deps import CurrentActor, DbSession
from travel_expense.schemas.expense_report import SummaryReportOut
from travel_expense.services import summary as summary_svc

router = APIRouter()


@router.get("/summary", response_model=SummaryReportOut, summary="Totals by status and category")
def get_summary(
    db: DbSession,
    actor: CurrentActor,
    start_date: datetime | None = Query(None, description="Reports created at or after"),
    end_date: datetime | None = Query(None, description="Reports created at or before"),
):
    return summary_svc.get_summary_report(db, actor, created_from=start_date, created_to=end_date)
