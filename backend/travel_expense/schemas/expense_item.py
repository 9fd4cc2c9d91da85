"""Pydantic schemas for expense item endpoints."""
import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from travel_expense.models.expense import ExpenseCategory


class ExpenseItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    expense_report_id: uuid.UUID
    category: ExpenseCategory
    description: str
    amount: Decimal
    receipt_url: str | None
    expense_date: date
    created_at: datetime
    updated_at: datetime


class ExpenseItemCreate(BaseModel):
    category: ExpenseCategory
    description: str = Field(min_length=1, max_length=500)
    amount: Decimal  # range and scale checked by the item ledger (INVALID_AMOUNT)
    receipt_url: str | None = Field(default=None, max_length=1000)
    expense_date: date


class ExpenseItemUpdate(BaseModel):
    category: ExpenseCategory | None = None
    description: str | None = Field(default=None, min_length=1, max_length=500)
    amount: Decimal | None = None
    receipt_url: str | None = Field(default=None, max_length=1000)
    expense_date: date | None = None


class CategoryTotal(BaseModel):
    category: ExpenseCategory
    total: Decimal


class CategorySummaryOut(BaseModel):
    report_id: uuid.UUID
    items: list[CategoryTotal]
