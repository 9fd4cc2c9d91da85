import enum
import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from travel_expense.db.base import Base, TimestampMixin, UUIDMixin


# Money columns are NUMERIC(12, 2): ten integer digits, two decimals.
MONEY_PRECISION = 12
MONEY_SCALE = 2
MONEY_QUANTUM = Decimal("0.01")
MAX_AMOUNT = Decimal(10) ** (MONEY_PRECISION - MONEY_SCALE)


class ReportStatus(str, enum.Enum):
    draft = "draft"
    submitted = "submitted"
    approved = "approved"
    rejected = "rejected"
    paid = "paid"


class ExpenseCategory(str, enum.Enum):
    transportation = "transportation"
    accommodation = "accommodation"
    meal = "meal"
    other = "other"


class ExpenseReport(Base, UUIDMixin, TimestampMixin):
    """A travel expense report: the aggregate root for its items."""

    __tablename__ = "expense_reports"
    __table_args__ = (
        CheckConstraint("trip_end_date >= trip_start_date", name="ck_expense_reports_trip_dates"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    trip_purpose: Mapped[str] = mapped_column(Text, nullable=False)
    trip_start_date: Mapped[date] = mapped_column(Date, nullable=False)
    trip_end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[ReportStatus] = mapped_column(
        SAEnum(ReportStatus, name="report_status", native_enum=False, length=20),
        nullable=False,
        default=ReportStatus.draft,
        index=True,
    )
    # Derived from items; written only by the item ledger's recompute.
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(MONEY_PRECISION, MONEY_SCALE), nullable=False, default=Decimal("0")
    )
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=True
    )

    owner: Mapped["User"] = relationship("User", foreign_keys=[user_id])  # noqa: F821
    approver: Mapped["User"] = relationship("User", foreign_keys=[approved_by])  # noqa: F821
    items: Mapped[list["ExpenseItem"]] = relationship(
        "ExpenseItem", back_populates="report", cascade="all, delete-orphan"
    )


class ExpenseItem(Base, UUIDMixin, TimestampMixin):
    """A single chargeable expense on a report."""

    __tablename__ = "expense_items"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_expense_items_amount_positive"),
    )

    expense_report_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("expense_reports.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category: Mapped[ExpenseCategory] = mapped_column(
        SAEnum(ExpenseCategory, name="expense_category", native_enum=False, length=20),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(MONEY_PRECISION, MONEY_SCALE), nullable=False)
    receipt_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    expense_date: Mapped[date] = mapped_column(Date, nullable=False)

    report: Mapped["ExpenseReport"] = relationship("ExpenseReport", back_populates="items")
