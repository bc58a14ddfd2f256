"""Create session table

Revision ID: b2c3d4e5f6a7
Revises: a1b2c3d4e5f6
Create Date: 2026-10-17 12:00:00.000000

Same layout as the connect-pg-simple session table, created only when
missing.
"""

from collections.abc import Sequence
from typing import Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "b2c3d4e5f6a7"
down_revision: Union[str, None] = "a1b2c3d4e5f6"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS "session" (
            sid VARCHAR(255) NOT NULL PRIMARY KEY,
            sess JSON NOT NULL,
            expire TIMESTAMP(6) NOT NULL
        )
        """
    )
    op.execute('CREATE INDEX IF NOT EXISTS "IDX_session_expire" ON "session" (expire)')


def downgrade() -> None:
    op.execute('DROP INDEX IF EXISTS "IDX_session_expire"')
    op.execute('DROP TABLE IF EXISTS "session"')
