"""
Server-side login sessions.

The signed cookie set by SessionMiddleware holds nothing but a random session
id; who is logged in (customer and/or admin) lives in the ``sessions`` table,
so logging out or expiring a session revokes it for every copy of the cookie.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from fastapi import Request

from portal.config import settings
from portal.core import security
from portal.core.dates import format_timestamp, normalize_timestamp
from portal.database import Database

logger = logging.getLogger(__name__)

SESSION_KEY = "sid"


class SessionService:
    def _load(
        self, db: Database, request: Request, now: Optional[datetime] = None
    ) -> Optional[Dict[str, Any]]:
        sid = request.session.get(SESSION_KEY)
        if not sid:
            return None

        row = db.query_one("SELECT * FROM sessions WHERE id = ?", [sid])
        if not row:
            request.session.pop(SESSION_KEY, None)
            return None

        if normalize_timestamp(row["expires_at"]) < format_timestamp(now or datetime.now()):
            db.execute("DELETE FROM sessions WHERE id = ?", [sid])
            request.session.pop(SESSION_KEY, None)
            logger.info("Expired session removed")
            return None
        return row

    def start(
        self,
        db: Database,
        request: Request,
        user_id: Optional[int] = None,
        admin_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> str:
        """
        Attach a customer and/or admin identity to the caller's session.

        A live session keeps its id and gains the new identity; otherwise a
        new row is created and its id stored in the cookie.
        """
        now = now or datetime.now()
        expires_at = format_timestamp(now + timedelta(seconds=settings.SESSION_MAX_AGE))
        row = self._load(db, request, now)

        if row is None:
            sid = security.generate_session_id()
            db.execute(
                "INSERT INTO sessions (id, user_id, admin_id, expires_at, created_at) "
                "VALUES (?, ?, ?, ?, ?)",
                [sid, user_id, admin_id, expires_at, format_timestamp(now)],
            )
            request.session[SESSION_KEY] = sid
            return sid

        sid = row["id"]
        db.execute(
            "UPDATE sessions SET user_id = ?, admin_id = ?, expires_at = ? WHERE id = ?",
            [
                user_id if user_id is not None else row["user_id"],
                admin_id if admin_id is not None else row["admin_id"],
                expires_at,
                sid,
            ],
        )
        return sid

    def user_id(self, db: Database, request: Request) -> Optional[int]:
        row = self._load(db, request)
        return row["user_id"] if row else None

    def admin_id(self, db: Database, request: Request) -> Optional[int]:
        row = self._load(db, request)
        return row["admin_id"] if row else None

    def destroy(self, db: Database, request: Request) -> None:
        """Delete the session row and clear the cookie."""
        sid = request.session.get(SESSION_KEY)
        if sid:
            db.execute("DELETE FROM sessions WHERE id = ?", [sid])
        request.session.clear()


session_service = SessionService()
