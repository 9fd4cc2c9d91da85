from travel_expense.models.user import User, Role
from travel_expense.models.expense import ExpenseReport, ExpenseItem, ReportStatus, ExpenseCategory
from travel_expense.models.approval_history import ApprovalHistory, HistoryAction

__all__ = [
    "User", "Role",
    "ExpenseReport", "ExpenseItem", "ReportStatus", "ExpenseCategory",
    "ApprovalHistory", "HistoryAction",
]
