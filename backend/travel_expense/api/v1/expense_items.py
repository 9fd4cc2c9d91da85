"""Expense item API endpoints, nested under a report.

  GET    /expense-reports/{id}/items
  POST   /expense-reports/{id}/items
  GET    /expense-reports/{id}/items/summary   — totals per category
  GET    /expense-reports/{id}/items/{item_id}
  PATCH  /expense-reports/{id}/items/{item_id}
  DELETE /expense-reports/{id}/items/{item_id}
"""
import uuid

from fastapi import APIRouter, status

from travel_expense.core.deps import CurrentActor, DbSession
from travel_expense.schemas.expense_item import (
    CategorySummaryOut,
    CategoryTotal,
    ExpenseItemCreate,
    ExpenseItemOut,
    ExpenseItemUpdate,
)
from travel_expense.services import items as items_svc

router = APIRouter()


@router.get("/{report_id}/items", response_model=list[ExpenseItemOut], summary="List items")
def list_items(report_id: uuid.UUID, db: DbSession, actor: CurrentActor):
    return [ExpenseItemOut.model_validate(i) for i in items_svc.list_items(db, report_id, actor)]


@router.post(
    "/{report_id}/items",
    response_model=ExpenseItemOut,
    status_code=status.HTTP_201_CREATED,
    summary="Add an item to a draft report",
)
def add_item(
    report_id: uuid.UUID,
    body: ExpenseItemCreate,
    db: DbSession,
    actor: CurrentActor,
):
    item = items_svc.add_item(db, report_id, body.model_dump(), actor)
    return ExpenseItemOut.model_validate(item)


@router.get(
    "/{report_id}/items/summary",
    response_model=CategorySummaryOut,
    summary="Item totals per category",
)
def category_summary(report_id: uuid.UUID, db: DbSession, actor: CurrentActor):
    totals = items_svc.get_category_summary(db, report_id, actor)
    return CategorySummaryOut(
        report_id=report_id,
        items=[CategoryTotal(category=c, total=t) for c, t in totals.items()],
    )


@router.get("/{report_id}/items/{item_id}", response_model=ExpenseItemOut, summary="Get an item")
def get_item(report_id: uuid.UUID, item_id: uuid.UUID, db: DbSession, actor: CurrentActor):
    return ExpenseItemOut.model_validate(items_svc.get_item(db, report_id, item_id, actor))


@router.patch(
    "/{report_id}/items/{item_id}",
    response_model=ExpenseItemOut,
    summary="Update an item on a draft report",
)
def update_item(
    report_id: uuid.UUID,
    item_id: uuid.UUID,
    body: ExpenseItemUpdate,
    db: DbSession,
    actor: CurrentActor,
):
    updates = body.model_dump(exclude_unset=True)
    item = items_svc.update_item(db, report_id, item_id, updates, actor)
    return ExpenseItemOut.model_validate(item)


@router.delete(
    "/{report_id}/items/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an item from a draft report",
)
def delete_item(report_id: uuid.UUID, item_id: uuid.UUID, db: DbSession, actor: CurrentActor):
    items_svc.delete_item(db, report_id, item_id, actor)
