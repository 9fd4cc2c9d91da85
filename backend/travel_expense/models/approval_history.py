import enum
import uuid

from sqlalchemy import ForeignKey, Text, Uuid
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from travel_expense.db.base import Base, CreatedAtMixin, UUIDMixin


class HistoryAction(str, enum.Enum):
    submitted = "submitted"
    approved = "approved"
    rejected = "rejected"
    paid = "paid"


class ApprovalHistory(Base, UUIDMixin, CreatedAtMixin):
    """Append-only record of one lifecycle transition. Never updated or deleted."""

    __tablename__ = "approval_history"

    expense_report_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("expense_reports.id"), nullable=False, index=True
    )
    action: Mapped[HistoryAction] = mapped_column(
        SAEnum(HistoryAction, name="history_action", native_enum=False, length=20),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    actor: Mapped["User"] = relationship("User", lazy="joined", innerjoin=True)  # noqa: F821

    @property
    def user_name(self) -> str:
        return self.actor.name

    @property
    def user_email(self) -> str:
        return self.actor.email
