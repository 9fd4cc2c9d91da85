"""Expense report lifecycle service.

Status changes follow one explicit transition table. Every mutation runs
as a single transaction: the report row is locked, the guard is checked,
then status, timestamps and the history entry are written together.

All functions accept a sync SQLAlchemy Session supplied by the caller.
"""
import enum
import logging
import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import delete, update
from sqlalchemy.orm import Session

from travel_expense.core.exceptions import (
    DeleteFailed,
    Forbidden,
    InvalidComment,
    InvalidDates,
    InvalidStatus,
    NoItems,
    NotFound,
    UpdateFailed,
)
from travel_expense.db import repository
from travel_expense.db.base import utcnow
from travel_expense.db.session import transaction
from travel_expense.models.approval_history import ApprovalHistory, HistoryAction
from travel_expense.models.expense import ExpenseItem, ExpenseReport, ReportStatus
from travel_expense.services import authorization as authz
from travel_expense.services import history as history_svc
from travel_expense.services.authorization import Actor

logger = logging.getLogger(__name__)


class ReportAction(str, enum.Enum):
    submit = "submit"
    approve = "approve"
    reject = "reject"
    pay = "pay"
    update = "update"
    delete = "delete"


# (current status, action) -> resulting status. None means the row is removed.
TRANSITIONS: dict[tuple[ReportStatus, ReportAction], ReportStatus | None] = {
    (ReportStatus.draft, ReportAction.submit): ReportStatus.submitted,
    (ReportStatus.submitted, ReportAction.approve): ReportStatus.approved,
    (ReportStatus.submitted, ReportAction.reject): ReportStatus.rejected,
    (ReportStatus.approved, ReportAction.pay): ReportStatus.paid,
    (ReportStatus.draft, ReportAction.update): ReportStatus.draft,
    (ReportStatus.draft, ReportAction.delete): None,
}

_HISTORY_ACTIONS = {
    ReportAction.submit: HistoryAction.submitted,
    ReportAction.approve: HistoryAction.approved,
    ReportAction.reject: HistoryAction.rejected,
    ReportAction.pay: HistoryAction.paid,
}

_INVALID_STATUS_MESSAGES = {
    ReportAction.submit: "Only draft reports can be submitted",
    ReportAction.approve: "Only submitted reports can be approved",
    ReportAction.reject: "Only submitted reports can be rejected",
    ReportAction.pay: "Only approved reports can be marked as paid",
    ReportAction.update: "Only draft reports can be updated",
    ReportAction.delete: "Only draft reports can be deleted",
}

EDITABLE_FIELDS = ("title", "trip_purpose", "trip_start_date", "trip_end_date")


def next_status(current: ReportStatus, action: ReportAction) -> ReportStatus | None:
    """Return the status reached by applying ``action`` in ``current``.

    Raises:
        InvalidStatus: if the table has no entry for the pair.
    """
    current = ReportStatus(current)
    action = ReportAction(action)
    try:
        return TRANSITIONS[(current, action)]
    except KeyError:
        raise InvalidStatus(
            f"{_INVALID_STATUS_MESSAGES[action]} (status={current.value})"
        ) from None


def _check_dates(start: date, end: date) -> None:
    if end < start:
        raise InvalidDates("End date must be on or after start date")


def _load_for_update(db: Session, report_id: uuid.UUID) -> ExpenseReport:
    report = repository.get_report_for_update(db, report_id)
    if report is None:
        raise NotFound("Expense report not found")
    return report


def _apply_transition(
    db: Session,
    report: ExpenseReport,
    action: ReportAction,
    **values,
) -> ReportStatus:
    """Write the new status with a compare-and-set on the current one."""
    current = report.status
    target = next_status(current, action)
    result = db.execute(
        update(ExpenseReport)
        .where(ExpenseReport.id == report.id, ExpenseReport.status == current)
        .values(status=target, updated_at=utcnow(), **values)
    )
    if result.rowcount != 1:
        raise UpdateFailed(f"Failed to {action.value} report {report.id}")
    db.refresh(report)
    return target


def _transition(
    db: Session,
    report_id: uuid.UUID,
    actor: Actor,
    action: ReportAction,
    comment: str | None = None,
    **values,
) -> ExpenseReport:
    with transaction(db):
        report = _load_for_update(db, report_id)
        _apply_transition(db, report, action, **values)
        history_svc.record(db, report.id, _HISTORY_ACTIONS[action], actor.id, comment)

    logger.info(
        "Expense report %s: report=%s actor=%s status=%s",
        action.value, report.id, actor.id, report.status.value,
    )
    return report


# ─── Create / read ───

def create_report(
    db: Session,
    owner_id: uuid.UUID,
    title: str,
    trip_purpose: str,
    trip_start_date: date,
    trip_end_date: date,
) -> ExpenseReport:
    """Create a report in draft with a zero total."""
    _check_dates(trip_start_date, trip_end_date)

    with transaction(db):
        report = ExpenseReport(
            user_id=owner_id,
            title=title,
            trip_purpose=trip_purpose,
            trip_start_date=trip_start_date,
            trip_end_date=trip_end_date,
            status=ReportStatus.draft,
            total_amount=Decimal("0"),
        )
        db.add(report)
        db.flush()

    logger.info("Expense report created: report=%s owner=%s", report.id, owner_id)
    return report


def get_report(db: Session, report_id: uuid.UUID, actor: Actor) -> ExpenseReport:
    """Return the report if ``actor`` may see it.

    Raises NotFound both when the report is absent and when it belongs to
    someone else, so existence is never revealed.
    """
    report = repository.get_report(db, report_id, actor)
    if report is None:
        raise NotFound("Expense report not found")
    return report


def list_reports(db: Session, actor: Actor) -> list[ExpenseReport]:
    return repository.list_reports(db, actor)


# ─── Draft editing ───

def update_report(
    db: Session,
    report_id: uuid.UUID,
    fields: dict,
    actor: Actor,
) -> ExpenseReport:
    """Apply title / purpose / date changes to a draft report.

    An empty payload still goes through the access and status checks and
    then returns the report unchanged.
    """
    changes = {
        key: value for key, value in fields.items()
        if key in EDITABLE_FIELDS and value is not None
    }

    with transaction(db):
        report = _load_for_update(db, report_id)
        if not authz.can_access_report(report, actor):
            raise Forbidden("You do not have access to this report")
        next_status(report.status, ReportAction.update)

        _check_dates(
            changes.get("trip_start_date", report.trip_start_date),
            changes.get("trip_end_date", report.trip_end_date),
        )
        for key, value in changes.items():
            setattr(report, key, value)
        db.flush()

    if changes:
        logger.info(
            "Expense report updated: report=%s actor=%s fields=%s",
            report.id, actor.id, sorted(changes),
        )
    return report


def delete_report(db: Session, report_id: uuid.UUID, actor: Actor) -> None:
    """Hard-delete a draft report together with its items."""
    with transaction(db):
        report = _load_for_update(db, report_id)
        if not authz.can_access_report(report, actor):
            raise Forbidden("You do not have access to this report")
        next_status(report.status, ReportAction.delete)

        db.execute(
            delete(ExpenseItem).where(ExpenseItem.expense_report_id == report.id)
        )
        result = db.execute(
            delete(ExpenseReport).where(
                ExpenseReport.id == report.id,
                ExpenseReport.status == ReportStatus.draft,
            )
        )
        if result.rowcount != 1:
            raise DeleteFailed(f"Failed to delete report {report.id}")

    logger.info("Expense report deleted: report=%s actor=%s", report_id, actor.id)


# ─── Transitions ───

def submit_report(db: Session, report_id: uuid.UUID, actor: Actor) -> ExpenseReport:
    """draft -> submitted. Owner only; the report must have at least one item.

    The item count is read after the row lock is taken, so an item deleted
    concurrently cannot slip in between the check and the status write.
    """
    with transaction(db):
        report = _load_for_update(db, report_id)
        if not authz.can_access_report(report, actor):
            raise NotFound("Expense report not found")
        if not authz.owns_report(report, actor):
            raise Forbidden("You can only submit your own reports")
        next_status(report.status, ReportAction.submit)

        if repository.count_items(db, report.id) == 0:
            raise NoItems("Cannot submit report without expense items")

        _apply_transition(db, report, ReportAction.submit, submitted_at=utcnow())
        history_svc.record(db, report.id, HistoryAction.submitted, actor.id)

    logger.info("Expense report submitted: report=%s actor=%s", report.id, actor.id)
    return report


def approve_report(
    db: Session,
    report_id: uuid.UUID,
    actor: Actor,
    comment: str | None = None,
) -> ExpenseReport:
    """submitted -> approved. Accounting only."""
    if not authz.can_approve(actor):
        raise Forbidden("Only accounting can approve reports")
    return _transition(
        db, report_id, actor, ReportAction.approve, comment,
        approved_at=utcnow(), approved_by=actor.id,
    )


def reject_report(
    db: Session,
    report_id: uuid.UUID,
    actor: Actor,
    comment: str,
) -> ExpenseReport:
    """submitted -> rejected. Accounting only; a reason is mandatory.

    Rejected reports are terminal: there is no path back to draft.
    """
    if not authz.can_reject(actor):
        raise Forbidden("Only accounting can reject reports")
    if comment is None or not comment.strip():
        raise InvalidComment("A comment is required when rejecting a report")
    return _transition(
        db, report_id, actor, ReportAction.reject, comment,
        approved_at=utcnow(), approved_by=actor.id,
    )


def mark_paid(
    db: Session,
    report_id: uuid.UUID,
    actor: Actor,
    comment: str | None = None,
) -> ExpenseReport:
    """approved -> paid. Accounting only; paid is terminal."""
    if not authz.can_mark_paid(actor):
        raise Forbidden("Only accounting can mark reports as paid")
    return _transition(db, report_id, actor, ReportAction.pay, comment)


# ─── History ───

def get_approval_history(
    db: Session,
    report_id: uuid.UUID,
    actor: Actor | None = None,
) -> list[ApprovalHistory]:
    """Entries for a report, newest first. Access-checked when an actor is given."""
    if actor is not None:
        get_report(db, report_id, actor)
    return history_svc.list_by_report(db, report_id)
