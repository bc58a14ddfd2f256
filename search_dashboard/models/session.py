"""
Session Model

Server-side login sessions. The layout (sid, sess, expire) is the one
connect-pg-simple uses, so the table can be shared with tooling that
already knows it. The browser only holds the ``sid``.
"""

from sqlalchemy import JSON, Column, DateTime, Index, String

from search_dashboard.database import Base


class SessionRecord(Base):
    __tablename__ = "session"

    sid = Column(String(255), primary_key=True)
    sess = Column(JSON, nullable=False)
    expire = Column(DateTime, nullable=False, comment="Expiry in naive UTC")

    __table_args__ = (Index("IDX_session_expire", "expire"),)

    def __repr__(self) -> str:
        return f"<SessionRecord expire={self.expire!s}>"
