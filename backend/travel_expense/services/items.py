"""Expense item ledger.

Items are mutable only while their report is a draft. Each add / update /
delete locks the parent report, checks access and status, writes the item
and recomputes the report total, all in one transaction.
"""
import logging
import uuid
from collections.abc import Iterable
from datetime import date
from decimal import Decimal, InvalidOperation

from sqlalchemy.orm import Session

from travel_expense.core.config import settings
from travel_expense.core.exceptions import (
    Forbidden,
    InvalidAmount,
    InvalidDate,
    InvalidItem,
    InvalidStatus,
    NotFound,
)
from travel_expense.db import repository
from travel_expense.db.base import utcnow
from travel_expense.db.session import transaction
from travel_expense.models.expense import (
    MAX_AMOUNT,
    MONEY_QUANTUM,
    ExpenseCategory,
    ExpenseItem,
    ExpenseReport,
)
from travel_expense.services import authorization as authz
from travel_expense.services.authorization import Actor

logger = logging.getLogger(__name__)

ITEM_FIELDS = ("category", "description", "amount", "receipt_url", "expense_date")
# Fields that may be explicitly cleared with None on update.
NULLABLE_ITEM_FIELDS = ("receipt_url",)


def compute_total(amounts: Iterable[Decimal]) -> Decimal:
    """Sum of item amounts; zero for a report without items."""
    return sum((Decimal(str(a)) for a in amounts), Decimal("0"))


# ─── Validation ───

def _validate_amount(amount) -> Decimal:
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise InvalidAmount("Amount must be a number") from None
    if not value.is_finite() or value <= 0:
        raise InvalidAmount("Amount must be greater than zero")
    if value >= MAX_AMOUNT:
        raise InvalidAmount(f"Amount must be less than {MAX_AMOUNT:,}")
    quantized = value.quantize(MONEY_QUANTUM)
    if quantized != value:
        raise InvalidAmount("Amount must not have more than 2 decimal places")
    return quantized


def _validate_expense_date(expense_date: date) -> date:
    if expense_date > utcnow().date():
        raise InvalidDate("Expense date cannot be in the future")
    return expense_date


def _validate_description(description: str) -> str:
    if description is None or not description.strip():
        raise InvalidItem("Description is required")
    if len(description) > settings.MAX_DESCRIPTION_LENGTH:
        raise InvalidItem(
            f"Description must not exceed {settings.MAX_DESCRIPTION_LENGTH} characters"
        )
    return description


def _validate_category(category) -> ExpenseCategory:
    try:
        return ExpenseCategory(category)
    except ValueError:
        raise InvalidItem(f"Unknown expense category '{category}'") from None


_VALIDATORS = {
    "category": _validate_category,
    "description": _validate_description,
    "amount": _validate_amount,
    "expense_date": _validate_expense_date,
}


def _clean_fields(fields: dict, partial: bool) -> dict:
    cleaned = {}
    for key in ITEM_FIELDS:
        if key not in fields:
            continue
        value = fields[key]
        if value is None:
            if key in NULLABLE_ITEM_FIELDS:
                cleaned[key] = None
            elif not partial:
                raise InvalidItem(f"'{key}' is required")
            continue
        validator = _VALIDATORS.get(key)
        cleaned[key] = validator(value) if validator else value

    if not partial:
        missing = [k for k in _VALIDATORS if k not in cleaned]
        if missing:
            raise InvalidItem(f"Missing required item fields: {', '.join(missing)}")
    return cleaned


# ─── Guards ───

def _lock_editable_report(db: Session, report_id: uuid.UUID, actor: Actor) -> ExpenseReport:
    """Lock the parent report and make sure ``actor`` may change its items."""
    report = repository.get_report_for_update(db, report_id)
    if report is None:
        raise NotFound("Expense report not found")
    if not authz.can_access_report(report, actor):
        raise Forbidden("You do not have access to this report")
    if not authz.can_modify_report(report, actor):
        raise InvalidStatus(
            f"Items can only be changed on draft reports (status={report.status.value})"
        )
    return report


def _recompute_total(db: Session, report: ExpenseReport) -> Decimal:
    db.flush()
    total = compute_total(repository.list_item_amounts(db, report.id))
    if total >= MAX_AMOUNT:
        raise InvalidAmount(f"Report total must be less than {MAX_AMOUNT:,}")
    report.total_amount = total
    db.flush()
    return report.total_amount


def _get_accessible_report(db: Session, report_id: uuid.UUID, actor: Actor) -> ExpenseReport:
    report = repository.get_report(db, report_id, actor)
    if report is None:
        raise NotFound("Expense report not found")
    return report


# ─── Mutations ───

def add_item(db: Session, report_id: uuid.UUID, fields: dict, actor: Actor) -> ExpenseItem:
    """Create an item on a draft report and refresh the report total."""
    with transaction(db):
        report = _lock_editable_report(db, report_id, actor)
        cleaned = _clean_fields(fields, partial=False)

        item = ExpenseItem(expense_report_id=report.id, **cleaned)
        db.add(item)
        total = _recompute_total(db, report)

    logger.info(
        "Expense item created: item=%s report=%s actor=%s total=%s",
        item.id, report_id, actor.id, total,
    )
    return item


def update_item(
    db: Session,
    report_id: uuid.UUID,
    item_id: uuid.UUID,
    fields: dict,
    actor: Actor,
) -> ExpenseItem:
    with transaction(db):
        report = _lock_editable_report(db, report_id, actor)
        item = repository.get_item(db, report.id, item_id)
        if item is None:
            raise NotFound("Expense item not found")

        cleaned = _clean_fields(fields, partial=True)
        for key, value in cleaned.items():
            setattr(item, key, value)
        total = _recompute_total(db, report)

    logger.info(
        "Expense item updated: item=%s report=%s actor=%s total=%s",
        item_id, report_id, actor.id, total,
    )
    return item


def delete_item(db: Session, report_id: uuid.UUID, item_id: uuid.UUID, actor: Actor) -> None:
    with transaction(db):
        report = _lock_editable_report(db, report_id, actor)
        item = repository.get_item(db, report.id, item_id)
        if item is None:
            raise NotFound("Expense item not found")

        db.delete(item)
        total = _recompute_total(db, report)

    logger.info(
        "Expense item deleted: item=%s report=%s actor=%s total=%s",
        item_id, report_id, actor.id, total,
    )


# ─── Reads ───

def list_items(db: Session, report_id: uuid.UUID, actor: Actor) -> list[ExpenseItem]:
    report = _get_accessible_report(db, report_id, actor)
    return repository.list_items(db, report.id)


def get_item(db: Session, report_id: uuid.UUID, item_id: uuid.UUID, actor: Actor) -> ExpenseItem:
    report = _get_accessible_report(db, report_id, actor)
    item = repository.get_item(db, report.id, item_id)
    if item is None:
        raise NotFound("Expense item not found")
    return item


def get_category_summary(
    db: Session,
    report_id: uuid.UUID,
    actor: Actor,
) -> dict[ExpenseCategory, Decimal]:
    """Total amount per category for one report; categories without items are omitted."""
    report = _get_accessible_report(db, report_id, actor)
    return dict(repository.category_totals(db, report.id))
