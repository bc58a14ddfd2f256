"""
SearchQuery Model

Search queries recorded by the ingestion process. The dashboard only reads
this table.

Timestamps are naive UTC, both when written here and by the database
default set in the migration.
"""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Index, Integer, Text

from search_dashboard.database import Base


class SearchQuery(Base):
    __tablename__ = "search_queries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    keyword = Column(Text, nullable=True, comment="Search keyword")
    search_type = Column(Text, nullable=True, comment="Type of search performed")
    platform_name = Column(Text, nullable=True, comment="Platform the search came from")
    results = Column(JSON, nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc).replace(tzinfo=None),
        nullable=True,
        comment="When the query was created (UTC)",
    )

    __table_args__ = (
        Index("ix_search_queries_search_type", "search_type"),
        Index("ix_search_queries_platform_name", "platform_name"),
        Index("ix_search_queries_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<SearchQuery id={self.id} type={self.search_type!r} platform={self.platform_name!r}>"
