"""
Session Storage backed by the database

Login sessions are rows of the ``session`` table keyed by an opaque,
randomly generated id. The browser cookie carries only that id, so
deleting the row on logout ends the session for every copy of the cookie.
Expiry is absolute: ``max_age`` seconds after login.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import delete

from search_dashboard import database
from search_dashboard.database import store_operation
from search_dashboard.models.session import SessionRecord

logger = logging.getLogger(__name__)

SESSION_ID_BYTES = 32


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SessionStore:
    """
    Durable session store.

    Features:
    - Session creation with an unguessable id
    - Lookup that treats expired rows as missing
    - Deletion on logout
    - Purging of expired rows on each new login
    """

    def __init__(self, max_age: int):
        self.max_age = max_age

    async def create_session(self, data: dict[str, Any]) -> str:
        """
        Store a new session context.

        Args:
            data: JSON-serializable session context.

        Returns:
            str: The session id to hand to the client.
        """
        session_id = secrets.token_urlsafe(SESSION_ID_BYTES)
        now = _utcnow()
        with store_operation("session_create"):
            async with database.AsyncSessionLocal() as db:
                await db.execute(delete(SessionRecord).where(SessionRecord.expire <= now))
                db.add(SessionRecord(sid=session_id, sess=data, expire=now + timedelta(seconds=self.max_age)))
                await db.commit()
        return session_id

    async def get_session(self, session_id: str) -> dict[str, Any] | None:
        """Return the stored context, or None when the id is unknown or expired."""
        with store_operation("session_load"):
            async with database.AsyncSessionLocal() as db:
                record = await db.get(SessionRecord, session_id)

        if record is None:
            return None
        if record.expire <= _utcnow():
            await self.delete_session(session_id)
            return None
        return dict(record.sess or {})

    async def delete_session(self, session_id: str) -> bool:
        with store_operation("session_delete"):
            async with database.AsyncSessionLocal() as db:
                result = await db.execute(delete(SessionRecord).where(SessionRecord.sid == session_id))
                await db.commit()
        return result.rowcount > 0

    async def purge_expired(self) -> int:
        with store_operation("session_purge"):
            async with database.AsyncSessionLocal() as db:
                result = await db.execute(delete(SessionRecord).where(SessionRecord.expire <= _utcnow()))
                await db.commit()
        if result.rowcount:
            logger.info(f"Purged {result.rowcount} expired sessions")
        return result.rowcount
