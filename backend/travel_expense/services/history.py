"""Approval history helper: append-only writes to the approval_history table."""
import logging
import uuid

from sqlalchemy.orm import Session

from travel_expense.db import repository
from travel_expense.models.approval_history import ApprovalHistory, HistoryAction

logger = logging.getLogger(__name__)


def record(
    db: Session,
    report_id: uuid.UUID,
    action: HistoryAction,
    actor_id: uuid.UUID,
    comment: str | None = None,
) -> ApprovalHistory:
    """Append one history entry for a lifecycle transition.

    Args:
        db: Session of the transaction that performs the transition.
        report_id: Report whose status changed.
        action: The transition that happened.
        actor_id: User who triggered it.
        comment: Optional free text (required upstream for rejections).
    """
    entry = ApprovalHistory(
        expense_report_id=report_id,
        action=HistoryAction(action),
        user_id=actor_id,
        comment=comment or None,
    )
    db.add(entry)
    db.flush()  # surface FK violations here; caller controls the transaction
    logger.debug("History: %s report=%s actor=%s", action, report_id, actor_id)
    return entry


def list_by_report(db: Session, report_id: uuid.UUID) -> list[ApprovalHistory]:
    """Return every entry for a report, newest first, with the actor loaded."""
    return repository.list_history(db, report_id)


def latest_action(db: Session, report_id: uuid.UUID) -> ApprovalHistory | None:
    entries = repository.list_history(db, report_id, limit=1)
    return entries[0] if entries else None
