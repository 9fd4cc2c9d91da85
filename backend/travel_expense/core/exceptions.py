"""Typed errors raised by the expense core.

Business-rule violations derive from ExpenseError and carry a stable
``code`` plus a human message. PersistenceError is not an
ExpenseError: it signals that the store failed, not that a rule was broken.
"""


class ExpenseError(Exception):
    code = "EXPENSE_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class NotFound(ExpenseError):
    code = "NOT_FOUND"


class Forbidden(ExpenseError):
    code = "FORBIDDEN"


class InvalidStatus(ExpenseError):
    code = "INVALID_STATUS"


class InvalidAmount(ExpenseError):
    code = "INVALID_AMOUNT"


class InvalidDate(ExpenseError):
    code = "INVALID_DATE"


class InvalidDates(ExpenseError):
    code = "INVALID_DATES"


class InvalidItem(ExpenseError):
    code = "INVALID_ITEM"


class NoItems(ExpenseError):
    code = "NO_ITEMS"


class InvalidComment(ExpenseError):
    code = "INVALID_COMMENT"


class DuplicateEmail(ExpenseError):
    code = "DUPLICATE_EMAIL"


class UpdateFailed(ExpenseError):
    code = "UPDATE_FAILED"


class DeleteFailed(ExpenseError):
    code = "DELETE_FAILED"


class PersistenceError(Exception):
    """The relational store failed (constraint violation, lost connection, ...)."""

    code = "PERSISTENCE_ERROR"
