"""Expense report API endpoints.

  GET    /expense-reports               — reports visible to the current user
  POST   /expense-reports               — create a draft report
  GET    /expense-reports/{id}
  PATCH  /expense-reports/{id}          — edit a draft
  DELETE /expense-reports/{id}          — delete a draft
  POST   /expense-reports/{id}/submit   — owner submits for review
  POST   /expense-reports/{id}/approve  — accounting
  POST   /expense-reports/{id}/reject   — accounting, comment required
  POST   /expense-reports/{id}/pay      — accounting
  GET    /expense-reports/{id}/history

Business errors raised by the lifecycle service are translated to HTTP
responses by the handler registered in main.py.
"""
import uuid

from fastapi import APIRouter, status

from travel_expense.core.deps import CurrentActor, DbSession
from travel_expense.schemas.expense_report import (
    ApprovalHistoryOut,
    DecisionRequest,
    ExpenseReportCreate,
    ExpenseReportListResponse,
    ExpenseReportOut,
    ExpenseReportUpdate,
)
from travel_expense.services import lifecycle

router = APIRouter()


@router.get("", response_model=ExpenseReportListResponse, summary="List expense reports")
def list_reports(db: DbSession, actor: CurrentActor):
    reports = lifecycle.list_reports(db, actor)
    return ExpenseReportListResponse(
        items=[ExpenseReportOut.model_validate(r) for r in reports],
        total=len(reports),
    )


@router.post(
    "",
    response_model=ExpenseReportOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a draft expense report",
)
def create_report(body: ExpenseReportCreate, db: DbSession, actor: CurrentActor):
    report = lifecycle.create_report(
        db,
        owner_id=actor.id,
        title=body.title,
        trip_purpose=body.trip_purpose,
        trip_start_date=body.trip_start_date,
        trip_end_date=body.trip_end_date,
    )
    return ExpenseReportOut.model_validate(report)


@router.get("/{report_id}", response_model=ExpenseReportOut, summary="Get an expense report")
def get_report(report_id: uuid.UUID, db: DbSession, actor: CurrentActor):
    return ExpenseReportOut.model_validate(lifecycle.get_report(db, report_id, actor))


@router.patch("/{report_id}", response_model=ExpenseReportOut, summary="Update a draft report")
def update_report(
    report_id: uuid.UUID,
    body: ExpenseReportUpdate,
    db: DbSession,
    actor: CurrentActor,
):
    updates = body.model_dump(exclude_unset=True)
    report = lifecycle.update_report(db, report_id, updates, actor)
    return ExpenseReportOut.model_validate(report)


@router.delete(
    "/{report_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a draft report",
)
def delete_report(report_id: uuid.UUID, db: DbSession, actor: CurrentActor):
    lifecycle.delete_report(db, report_id, actor)


# ─── Lifecycle transitions ───

@router.post("/{report_id}/submit", response_model=ExpenseReportOut, summary="Submit for review")
def submit_report(report_id: uuid.UUID, db: DbSession, actor: CurrentActor):
    return ExpenseReportOut.model_validate(lifecycle.submit_report(db, report_id, actor))


@router.post("/{report_id}/approve", response_model=ExpenseReportOut, summary="Approve a report")
def approve_report(
    report_id: uuid.UUID,
    body: DecisionRequest,
    db: DbSession,
    actor: CurrentActor,
):
    report = lifecycle.approve_report(db, report_id, actor, comment=body.comment)
    return ExpenseReportOut.model_validate(report)


@router.post("/{report_id}/reject", response_model=ExpenseReportOut, summary="Reject a report")
def reject_report(
    report_id: uuid.UUID,
    body: DecisionRequest,
    db: DbSession,
    actor: CurrentActor,
):
    report = lifecycle.reject_report(db, report_id, actor, comment=body.comment)
    return ExpenseReportOut.model_validate(report)


@router.post("/{report_id}/pay", response_model=ExpenseReportOut, summary="Mark a report as paid")
def mark_paid(
    report_id: uuid.UUID,
    body: DecisionRequest,
    db: DbSession,
    actor: CurrentActor,
):
    report = lifecycle.mark_paid(db, report_id, actor, comment=body.comment)
    return ExpenseReportOut.model_validate(report)


@router.get(
    "/{report_id}/history",
    response_model=list[ApprovalHistoryOut],
    summary="Approval history, newest first",
)
def get_history(report_id: uuid.UUID, db: DbSession, actor: CurrentActor):
    entries = lifecycle.get_approval_history(db, report_id, actor)
    return [ApprovalHistoryOut.model_validate(e) for e in entries]
