"""Query helpers for reports, items and history.

All functions take the caller's Session; none of them commit. Callers
wrap mutations in ``transaction(db)`` so the reads below that lock rows
run inside the same unit of work as the writes that depend on them.
"""
import uuid
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from travel_expense.models.approval_history import ApprovalHistory
from travel_expense.models.expense import ExpenseCategory, ExpenseItem, ExpenseReport
from travel_expense.services import authorization as authz


# ─── Reports ───

def get_report(
    db: Session,
    report_id: uuid.UUID,
    actor: "authz.Actor | None" = None,
) -> ExpenseReport | None:
    """Fetch a report, filtered to what ``actor`` may see when one is given."""
    stmt = select(ExpenseReport).where(ExpenseReport.id == report_id)
    if actor is not None and not authz.can_view_all_reports(actor):
        stmt = stmt.where(ExpenseReport.user_id == actor.id)
    return db.execute(stmt).scalars().first()


def get_report_for_update(db: Session, report_id: uuid.UUID) -> ExpenseReport | None:
    """Fetch a report and lock its row until the current transaction ends.

    Concurrent submit / item mutations on the same report serialize here.
    """
    stmt = (
        select(ExpenseReport)
        .where(ExpenseReport.id == report_id)
        .with_for_update(of=ExpenseReport)
        .execution_options(populate_existing=True)
    )
    return db.execute(stmt).scalars().first()


def list_reports(db: Session, actor: authz.Actor) -> list[ExpenseReport]:
    stmt = select(ExpenseReport)
    if not authz.can_view_all_reports(actor):
        stmt = stmt.where(ExpenseReport.user_id == actor.id)
    stmt = stmt.order_by(ExpenseReport.created_at.desc())
    return list(db.execute(stmt).scalars().all())


# ─── Items ───

def get_item(db: Session, report_id: uuid.UUID, item_id: uuid.UUID) -> ExpenseItem | None:
    stmt = select(ExpenseItem).where(
        ExpenseItem.id == item_id,
        ExpenseItem.expense_report_id == report_id,
    )
    return db.execute(stmt).scalars().first()


def list_items(db: Session, report_id: uuid.UUID) -> list[ExpenseItem]:
    stmt = (
        select(ExpenseItem)
        .where(ExpenseItem.expense_report_id == report_id)
        .order_by(ExpenseItem.expense_date.desc(), ExpenseItem.created_at.desc())
    )
    return list(db.execute(stmt).scalars().all())


def list_item_amounts(db: Session, report_id: uuid.UUID) -> list[Decimal]:
    stmt = select(ExpenseItem.amount).where(ExpenseItem.expense_report_id == report_id)
    return [Decimal(str(amount)) for amount in db.execute(stmt).scalars().all()]


def count_items(db: Session, report_id: uuid.UUID) -> int:
    stmt = select(func.count(ExpenseItem.id)).where(
        ExpenseItem.expense_report_id == report_id
    )
    return db.execute(stmt).scalar_one()


def category_totals(db: Session, report_id: uuid.UUID) -> list[tuple[ExpenseCategory, Decimal]]:
    stmt = (
        select(ExpenseItem.category, func.sum(ExpenseItem.amount))
        .where(ExpenseItem.expense_report_id == report_id)
        .group_by(ExpenseItem.category)
        .order_by(ExpenseItem.category)
    )
    return [
        (category, Decimal(str(total)))
        for category, total in db.execute(stmt).all()
    ]


# ─── History ───

def list_history(db: Session, report_id: uuid.UUID, limit: int | None = None) -> list[ApprovalHistory]:
    stmt = (
        select(ApprovalHistory)
        .where(ApprovalHistory.expense_report_id == report_id)
        .order_by(ApprovalHistory.created_at.desc())
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    return list(db.execute(stmt).scalars().all())


def recent_history(db: Session, limit: int) -> list[tuple[ApprovalHistory, ExpenseReport]]:
    """Most recent transitions across all reports, newest first."""
    stmt = (
        select(ApprovalHistory, ExpenseReport)
        .join(ExpenseReport, ApprovalHistory.expense_report_id == ExpenseReport.id)
        .order_by(ApprovalHistory.created_at.desc())
        .limit(limit)
    )
    return [(entry, report) for entry, report in db.execute(stmt).all()]
