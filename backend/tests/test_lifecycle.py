"""Tests for the expense report lifecycle service against an in-memory store."""
import uuid
from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from conftest import item_fields, make_report
from travel_expense.core.exceptions import (
    Forbidden,
    InvalidComment,
    InvalidDates,
    InvalidStatus,
    NoItems,
    NotFound,
    PersistenceError,
)
from travel_expense.db import repository
from travel_expense.models.approval_history import HistoryAction
from travel_expense.models.expense import ReportStatus
from travel_expense.services import items as items_svc
from travel_expense.services import lifecycle


def _reload(db, report_id, actor):
    db.expire_all()
    return lifecycle.get_report(db, report_id, actor)


# ─── Create / read ────────────────────────────────────────────────────────────

def test_create_report_starts_as_empty_draft(db, employee):
    """Create 'Tokyo trip' 2024-01-15..17 → draft with a zero total."""
    report = make_report(db, employee)

    assert report.status is ReportStatus.draft
    assert report.total_amount == Decimal("0")
    assert report.user_id == employee.id
    assert report.submitted_at is None


def test_create_report_rejects_end_before_start(db, employee):
    with pytest.raises(InvalidDates):
        make_report(db, employee, trip_start_date=date(2024, 1, 17), trip_end_date=date(2024, 1, 15))
    assert lifecycle.list_reports(db, employee) == []


def test_single_day_trip_is_allowed(db, employee):
    report = make_report(db, employee, trip_start_date=date(2024, 1, 15), trip_end_date=date(2024, 1, 15))
    assert report.trip_start_date == report.trip_end_date


def test_other_employee_gets_not_found(db, draft_report, other_employee):
    """Existence of another user's report is not revealed."""
    with pytest.raises(NotFound):
        lifecycle.get_report(db, draft_report.id, other_employee)


def test_accounting_can_read_any_report(db, draft_report, accountant):
    assert lifecycle.get_report(db, draft_report.id, accountant).id == draft_report.id


def test_missing_report_is_not_found(db, employee):
    with pytest.raises(NotFound):
        lifecycle.get_report(db, uuid.uuid4(), employee)


def test_list_reports_filters_by_owner(db, employee, other_employee, accountant):
    mine = make_report(db, employee, title="Mine")
    theirs = make_report(db, other_employee, title="Theirs")

    assert [r.id for r in lifecycle.list_reports(db, employee)] == [mine.id]
    assert {r.id for r in lifecycle.list_reports(db, accountant)} == {mine.id, theirs.id}


# ─── Update / delete ──────────────────────────────────────────────────────────

def test_update_draft_fields(db, draft_report, employee):
    report = lifecycle.update_report(
        db, draft_report.id, {"title": "Tokyo trip (revised)", "trip_end_date": date(2024, 1, 18)}, employee,
    )
    assert report.title == "Tokyo trip (revised)"
    assert report.trip_end_date == date(2024, 1, 18)


def test_update_checks_dates_against_stored_values(db, draft_report, employee):
    with pytest.raises(InvalidDates):
        lifecycle.update_report(db, draft_report.id, {"trip_end_date": date(2024, 1, 10)}, employee)
    assert _reload(db, draft_report.id, employee).trip_end_date == date(2024, 1, 17)


def test_update_ignores_unknown_and_none_fields(db, draft_report, employee):
    report = lifecycle.update_report(
        db, draft_report.id, {"status": "paid", "title": None, "total_amount": 5}, employee,
    )
    assert report.status is ReportStatus.draft
    assert report.title == "Tokyo trip"
    assert report.total_amount == Decimal("0")


def test_update_by_other_employee_is_forbidden(db, draft_report, other_employee):
    with pytest.raises(Forbidden):
        lifecycle.update_report(db, draft_report.id, {"title": "x"}, other_employee)


def test_accounting_can_edit_draft(db, draft_report, accountant):
    report = lifecycle.update_report(db, draft_report.id, {"trip_purpose": "Audit"}, accountant)
    assert report.trip_purpose == "Audit"


def test_empty_update_on_submitted_report_fails(db, submitted_report, employee):
    with pytest.raises(InvalidStatus):
        lifecycle.update_report(db, submitted_report.id, {}, employee)


def test_empty_update_on_draft_returns_report(db, draft_report, employee):
    report = lifecycle.update_report(db, draft_report.id, {}, employee)
    assert report.id == draft_report.id


def test_delete_draft_removes_report_and_items(db, report_with_item, employee):
    lifecycle.delete_report(db, report_with_item.id, employee)

    with pytest.raises(NotFound):
        lifecycle.get_report(db, report_with_item.id, employee)


def test_delete_submitted_report_fails(db, submitted_report, employee):
    with pytest.raises(InvalidStatus):
        lifecycle.delete_report(db, submitted_report.id, employee)
    assert _reload(db, submitted_report.id, employee).status is ReportStatus.submitted


def test_delete_by_other_employee_is_forbidden(db, draft_report, other_employee):
    with pytest.raises(Forbidden):
        lifecycle.delete_report(db, draft_report.id, other_employee)


def test_delete_missing_report_is_not_found(db, employee):
    with pytest.raises(NotFound):
        lifecycle.delete_report(db, uuid.uuid4(), employee)


# ─── Submit ───────────────────────────────────────────────────────────────────

def test_submit_with_item(db, report_with_item, employee):
    """Owner submits a report with one item → submitted, timestamp and one history entry."""
    report = lifecycle.submit_report(db, report_with_item.id, employee)

    assert report.status is ReportStatus.submitted
    assert report.submitted_at is not None

    history = lifecycle.get_approval_history(db, report.id)
    assert len(history) == 1
    assert history[0].action is HistoryAction.submitted
    assert history[0].user_id == employee.id


def test_submit_without_items_fails(db, draft_report, employee):
    with pytest.raises(NoItems):
        lifecycle.submit_report(db, draft_report.id, employee)

    assert _reload(db, draft_report.id, employee).status is ReportStatus.draft
    assert lifecycle.get_approval_history(db, draft_report.id) == []


def test_submit_by_accounting_is_forbidden(db, report_with_item, accountant):
    with pytest.raises(Forbidden):
        lifecycle.submit_report(db, report_with_item.id, accountant)


def test_submit_by_other_employee_is_not_found(db, report_with_item, other_employee):
    with pytest.raises(NotFound):
        lifecycle.submit_report(db, report_with_item.id, other_employee)


def test_submit_twice_fails(db, submitted_report, employee):
    with pytest.raises(InvalidStatus):
        lifecycle.submit_report(db, submitted_report.id, employee)
    assert len(lifecycle.get_approval_history(db, submitted_report.id)) == 1


def test_submit_after_last_item_deleted_fails(db, draft_report, employee):
    item = items_svc.add_item(db, draft_report.id, item_fields(), employee)
    items_svc.delete_item(db, draft_report.id, item.id, employee)

    with pytest.raises(NoItems):
        lifecycle.submit_report(db, draft_report.id, employee)


def test_submit_counts_items_under_the_row_lock(db, report_with_item, employee):
    """The item count is read after the report row is locked and before the commit."""
    calls = []
    lock = repository.get_report_for_update
    count = repository.count_items
    commit = db.commit

    def _lock(*args, **kwargs):
        calls.append("lock")
        return lock(*args, **kwargs)

    def _count(*args, **kwargs):
        calls.append("count")
        return count(*args, **kwargs)

    def _commit():
        calls.append("commit")
        return commit()

    with patch.object(repository, "get_report_for_update", side_effect=_lock), \
            patch.object(repository, "count_items", side_effect=_count), \
            patch.object(db, "commit", side_effect=_commit):
        lifecycle.submit_report(db, report_with_item.id, employee)

    assert calls == ["lock", "count", "commit"]


# ─── Approve / reject / pay ───────────────────────────────────────────────────

def test_approve_then_owner_cannot_edit(db, submitted_report, accountant, employee):
    report = lifecycle.approve_report(db, submitted_report.id, accountant, comment="ok")

    assert report.status is ReportStatus.approved
    assert report.approved_by == accountant.id
    assert report.approved_at is not None

    history = lifecycle.get_approval_history(db, report.id)
    assert [h.action for h in history] == [HistoryAction.approved, HistoryAction.submitted]
    assert history[0].comment == "ok"

    with pytest.raises(InvalidStatus):
        lifecycle.update_report(db, report.id, {"title": "New title"}, employee)


def test_employee_cannot_approve(db, submitted_report, employee):
    with pytest.raises(Forbidden):
        lifecycle.approve_report(db, submitted_report.id, employee)


def test_approve_draft_fails(db, report_with_item, accountant):
    with pytest.raises(InvalidStatus):
        lifecycle.approve_report(db, report_with_item.id, accountant)


def test_approve_missing_report_is_not_found(db, accountant):
    with pytest.raises(NotFound):
        lifecycle.approve_report(db, uuid.uuid4(), accountant)


@pytest.mark.parametrize("comment", ["", "   ", None])
def test_reject_without_comment_fails(db, submitted_report, accountant, employee, comment):
    with pytest.raises(InvalidComment):
        lifecycle.reject_report(db, submitted_report.id, accountant, comment=comment)

    assert _reload(db, submitted_report.id, employee).status is ReportStatus.submitted


def test_reject_with_comment(db, submitted_report, accountant):
    report = lifecycle.reject_report(db, submitted_report.id, accountant, comment="Receipt missing")

    assert report.status is ReportStatus.rejected
    assert report.approved_by == accountant.id
    latest = lifecycle.get_approval_history(db, report.id)[0]
    assert latest.action is HistoryAction.rejected
    assert latest.comment == "Receipt missing"


def test_rejected_report_is_terminal(db, submitted_report, accountant, employee):
    lifecycle.reject_report(db, submitted_report.id, accountant, comment="No")

    with pytest.raises(InvalidStatus):
        lifecycle.submit_report(db, submitted_report.id, employee)
    with pytest.raises(InvalidStatus):
        lifecycle.approve_report(db, submitted_report.id, accountant)
    with pytest.raises(InvalidStatus):
        lifecycle.update_report(db, submitted_report.id, {"title": "fixed"}, employee)


def test_mark_paid(db, approved_report, accountant):
    report = lifecycle.mark_paid(db, approved_report.id, accountant, comment="Transferred")
    assert report.status is ReportStatus.paid


def test_mark_paid_twice_fails_without_second_history_entry(db, approved_report, accountant):
    lifecycle.mark_paid(db, approved_report.id, accountant)

    with pytest.raises(InvalidStatus):
        lifecycle.mark_paid(db, approved_report.id, accountant)

    actions = [h.action for h in lifecycle.get_approval_history(db, approved_report.id)]
    assert actions.count(HistoryAction.paid) == 1


def test_mark_paid_requires_approval(db, submitted_report, accountant):
    with pytest.raises(InvalidStatus):
        lifecycle.mark_paid(db, submitted_report.id, accountant)


def test_employee_cannot_mark_paid(db, approved_report, employee):
    with pytest.raises(Forbidden):
        lifecycle.mark_paid(db, approved_report.id, employee)


# ─── Atomicity ────────────────────────────────────────────────────────────────

def test_history_failure_rolls_back_status(db, submitted_report, accountant, employee):
    """If the history insert fails, the status change is not persisted either."""
    with patch(
        "travel_expense.services.lifecycle.history_svc.record",
        side_effect=OperationalError("INSERT", {}, Exception("connection lost")),
    ):
        with pytest.raises(PersistenceError):
            lifecycle.approve_report(db, submitted_report.id, accountant)

    report = _reload(db, submitted_report.id, employee)
    assert report.status is ReportStatus.submitted
    assert report.approved_by is None
    assert len(lifecycle.get_approval_history(db, report.id)) == 1


def test_submit_history_failure_keeps_draft(db, report_with_item, employee):
    with patch(
        "travel_expense.services.lifecycle.history_svc.record",
        side_effect=OperationalError("INSERT", {}, Exception("disk full")),
    ):
        with pytest.raises(PersistenceError):
            lifecycle.submit_report(db, report_with_item.id, employee)

    report = _reload(db, report_with_item.id, employee)
    assert report.status is ReportStatus.draft
    assert report.submitted_at is None


def test_persistence_error_is_not_a_business_error():
    from travel_expense.core.exceptions import ExpenseError

    assert not issubclass(PersistenceError, ExpenseError)


# ─── History access ───────────────────────────────────────────────────────────

def test_history_is_access_checked_when_actor_given(db, submitted_report, other_employee, accountant):
    with pytest.raises(NotFound):
        lifecycle.get_approval_history(db, submitted_report.id, other_employee)
    assert len(lifecycle.get_approval_history(db, submitted_report.id, accountant)) == 1
