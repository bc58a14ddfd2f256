"""Create search_queries table

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-17 10:00:00.000000

Uses IF NOT EXISTS so databases already populated by the ingestion
process are left untouched.
"""

from collections.abc import Sequence
from typing import Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1b2c3d4e5f6"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS search_queries (
            id SERIAL PRIMARY KEY,
            keyword TEXT,
            search_type TEXT,
            platform_name TEXT,
            results JSON,
            error_message TEXT,
            created_at TIMESTAMP DEFAULT (NOW() AT TIME ZONE 'utc')
        )
        """
    )

    # Columns added after the table was first deployed
    op.execute("ALTER TABLE search_queries ADD COLUMN IF NOT EXISTS platform_name TEXT")
    op.execute("ALTER TABLE search_queries ADD COLUMN IF NOT EXISTS results JSON")
    op.execute("ALTER TABLE search_queries ADD COLUMN IF NOT EXISTS error_message TEXT")
    op.execute("ALTER TABLE search_queries ALTER COLUMN created_at SET DEFAULT (NOW() AT TIME ZONE 'utc')")

    op.execute("CREATE INDEX IF NOT EXISTS ix_search_queries_search_type ON search_queries (search_type)")
    op.execute("CREATE INDEX IF NOT EXISTS ix_search_queries_platform_name ON search_queries (platform_name)")
    op.execute("CREATE INDEX IF NOT EXISTS ix_search_queries_created_at ON search_queries (created_at DESC)")


def downgrade() -> None:
    op.execute("DROP INDEX IF EXISTS ix_search_queries_created_at")
    op.execute("DROP INDEX IF EXISTS ix_search_queries_platform_name")
    op.execute("DROP INDEX IF EXISTS ix_search_queries_search_type")
    op.execute("DROP TABLE IF EXISTS search_queries")
