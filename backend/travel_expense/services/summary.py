"""Accounting summary across all expense reports."""
import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from travel_expense.core.config import settings
from travel_expense.core.exceptions import Forbidden
from travel_expense.db import repository
from travel_expense.models.expense import ExpenseCategory, ExpenseItem, ExpenseReport, ReportStatus
from travel_expense.services import authorization as authz
from travel_expense.services.authorization import Actor

logger = logging.getLogger(__name__)


def _created_between(stmt, created_from: datetime | None, created_to: datetime | None):
    if created_from is not None:
        stmt = stmt.where(ExpenseReport.created_at >= created_from)
    if created_to is not None:
        stmt = stmt.where(ExpenseReport.created_at <= created_to)
    return stmt


def get_summary_report(
    db: Session,
    actor: Actor,
    created_from: datetime | None = None,
    created_to: datetime | None = None,
) -> dict:
    """Totals by status and category plus recent approval activity.

    Every status and category is present in the result, zero-filled when
    nothing matches. The date range filters on report creation time; the
    recent activity list is not filtered.
    """
    if not authz.can_view_all_reports(actor):
        raise Forbidden("Only accounting can view the summary report")

    totals_stmt = _created_between(
        select(func.count(ExpenseReport.id), func.sum(ExpenseReport.total_amount)),
        created_from, created_to,
    )
    total_reports, total_amount = db.execute(totals_stmt).one()

    by_status = {s.value: {"count": 0, "amount": Decimal("0")} for s in ReportStatus}
    status_stmt = _created_between(
        select(
            ExpenseReport.status,
            func.count(ExpenseReport.id),
            func.sum(ExpenseReport.total_amount),
        ).group_by(ExpenseReport.status),
        created_from, created_to,
    )
    for status, count, amount in db.execute(status_stmt).all():
        by_status[ReportStatus(status).value] = {
            "count": count,
            "amount": Decimal(str(amount or 0)),
        }

    by_category = {c.value: Decimal("0") for c in ExpenseCategory}
    category_stmt = _created_between(
        select(ExpenseItem.category, func.sum(ExpenseItem.amount))
        .join(ExpenseReport, ExpenseItem.expense_report_id == ExpenseReport.id)
        .group_by(ExpenseItem.category),
        created_from, created_to,
    )
    for category, amount in db.execute(category_stmt).all():
        by_category[ExpenseCategory(category).value] = Decimal(str(amount or 0))

    recent_activity = [
        {
            "action": entry.action.value,
            "created_at": entry.created_at,
            "comment": entry.comment,
            "user_name": entry.user_name,
            "report_id": report.id,
            "report_title": report.title,
        }
        for entry, report in repository.recent_history(db, settings.RECENT_ACTIVITY_LIMIT)
    ]

    logger.info("Summary report generated: actor=%s reports=%s", actor.id, total_reports)

    return {
        "total_reports": total_reports,
        "total_amount": Decimal(str(total_amount or 0)),
        "by_status": by_status,
        "by_category": by_category,
        "recent_activity": recent_activity,
    }
