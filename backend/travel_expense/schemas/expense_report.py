"""Pydantic schemas for expense report endpoints."""
import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from travel_expense.models.approval_history import HistoryAction
from travel_expense.models.expense import ReportStatus


# ─── Report output ───

class ExpenseReportOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    trip_purpose: str
    trip_start_date: date
    trip_end_date: date
    status: ReportStatus
    total_amount: Decimal
    submitted_at: datetime | None
    approved_at: datetime | None
    approved_by: uuid.UUID | None
    created_at: datetime
    updated_at: datetime


class ExpenseReportListResponse(BaseModel):
    items: list[ExpenseReportOut]
    total: int


# ─── Request bodies ───

class ExpenseReportCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    trip_purpose: str = Field(min_length=1)
    trip_start_date: date
    trip_end_date: date


class ExpenseReportUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    trip_purpose: str | None = Field(default=None, min_length=1)
    trip_start_date: date | None = None
    trip_end_date: date | None = None


class DecisionRequest(BaseModel):
    comment: str | None = None


# ─── Approval history ───

class ApprovalHistoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    expense_report_id: uuid.UUID
    action: HistoryAction
    user_id: uuid.UUID
    user_name: str
    user_email: str
    comment: str | None
    created_at: datetime


# ─── Accounting summary ───

class StatusTotal(BaseModel):
    count: int
    amount: Decimal


class RecentActivity(BaseModel):
    action: HistoryAction
    created_at: datetime
    comment: str | None
    user_name: str
    report_id: uuid.UUID
    report_title: str


class SummaryReportOut(BaseModel):
    total_reports: int
    total_amount: Decimal
    by_status: dict[str, StatusTotal]
    by_category: dict[str, Decimal]
    recent_activity: list[RecentActivity]
