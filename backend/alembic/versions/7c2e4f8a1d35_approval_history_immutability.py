"""approval_history_immutability

Revision ID: 7c2e4f8a1d35
Revises: 3a7d1c9e2b10
Create Date: 2026-10-12 09:41:03.000000

Lock approval_history down to inserts and reads. Every submit, approve,
reject and pay appends a row; nothing in the service rewrites or removes
one, and the database now refuses it too.
"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '7c2e4f8a1d35'
down_revision: Union[str, None] = '3a7d1c9e2b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TABLE = "approval_history"


def upgrade() -> None:
    op.execute(f"REVOKE UPDATE, DELETE, TRUNCATE ON {TABLE} FROM PUBLIC;")
    op.execute(f"GRANT SELECT, INSERT ON {TABLE} TO PUBLIC;")


def downgrade() -> None:
    # Reopen the table for manual data repair
    op.execute(f"GRANT UPDATE, DELETE, TRUNCATE ON {TABLE} TO PUBLIC;")
