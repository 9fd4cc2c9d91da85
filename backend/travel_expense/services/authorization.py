"""Authorization gate: pure decisions about what an actor may do.

No other module compares roles directly; everything goes through the
functions here. Nothing is cached: role and status can change between
calls, so every decision is made from the values passed in.
"""
import uuid
from dataclasses import dataclass

from travel_expense.models.expense import ExpenseReport, ReportStatus
from travel_expense.models.user import Role


@dataclass(frozen=True)
class Actor:
    """The authenticated identity attempting an operation."""

    id: uuid.UUID
    role: Role

    @classmethod
    def from_user(cls, user) -> "Actor":
        return cls(id=user.id, role=Role(user.role))


def is_accounting(actor: Actor) -> bool:
    return actor.role == Role.accounting


def owns_report(report: ExpenseReport, actor: Actor) -> bool:
    return report.user_id == actor.id


# ─── Report access ───

def can_view_all_reports(actor: Actor) -> bool:
    return is_accounting(actor)


def can_access_report(report: ExpenseReport, actor: Actor) -> bool:
    return is_accounting(actor) or owns_report(report, actor)


def can_modify_report(report: ExpenseReport, actor: Actor) -> bool:
    return can_access_report(report, actor) and report.status == ReportStatus.draft


# ─── Lifecycle actions ───

def can_submit(report: ExpenseReport, actor: Actor) -> bool:
    return owns_report(report, actor) and report.status == ReportStatus.draft


def can_approve(actor: Actor) -> bool:
    return is_accounting(actor)


def can_reject(actor: Actor) -> bool:
    return is_accounting(actor)


def can_mark_paid(actor: Actor) -> bool:
    return is_accounting(actor)


# ─── Administration ───

def can_manage_users(actor: Actor) -> bool:
    return is_accounting(actor)


def can_edit_profile(user_id: uuid.UUID, actor: Actor) -> bool:
    return is_accounting(actor) or user_id == actor.id
