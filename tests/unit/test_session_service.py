"""
Tests for server-side login sessions - creation, scopes, expiry, revocation
"""
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from portal.config import settings
from portal.services.session_service import SESSION_KEY, session_service


def _request(session=None):
    return SimpleNamespace(session=session if session is not None else {})


def _rows(db):
    return db.query_all("SELECT * FROM sessions")


@pytest.mark.unit
class TestSessionService:
    def test_start_stores_only_the_id_in_the_cookie(self, test_db, user):
        request = _request()
        sid = session_service.start(test_db, request, user_id=user["id"])

        assert request.session == {SESSION_KEY: sid}
        assert len(sid) >= 32
        rows = _rows(test_db)
        assert len(rows) == 1
        assert rows[0]["id"] == sid
        assert rows[0]["user_id"] == user["id"]
        assert rows[0]["admin_id"] is None

    def test_lookup_by_scope(self, test_db, user):
        request = _request()
        session_service.start(test_db, request, user_id=user["id"])
        assert session_service.user_id(test_db, request) == user["id"]
        assert session_service.admin_id(test_db, request) is None

    def test_no_cookie_no_identity(self, test_db):
        assert session_service.user_id(test_db, _request()) is None

    def test_admin_login_keeps_customer_scope(self, test_db, user, admin):
        request = _request()
        first = session_service.start(test_db, request, user_id=user["id"])
        second = session_service.start(test_db, request, admin_id=admin["id"])

        assert first == second
        assert session_service.user_id(test_db, request) == user["id"]
        assert session_service.admin_id(test_db, request) == admin["id"]
        assert len(_rows(test_db)) == 1

    def test_expires_after_max_age(self, test_db, user):
        request = _request()
        past = datetime.now() - timedelta(seconds=settings.SESSION_MAX_AGE + 60)
        session_service.start(test_db, request, user_id=user["id"], now=past)

        assert session_service.user_id(test_db, request) is None
        assert _rows(test_db) == []
        assert SESSION_KEY not in request.session

    def test_unknown_id_is_dropped(self, test_db):
        request = _request({SESSION_KEY: "forged-or-revoked"})
        assert session_service.user_id(test_db, request) is None
        assert request.session == {}

    def test_destroy_revokes_every_copy(self, test_db, user):
        request = _request()
        sid = session_service.start(test_db, request, user_id=user["id"])
        copy = _request({SESSION_KEY: sid})

        session_service.destroy(test_db, request)

        assert request.session == {}
        assert _rows(test_db) == []
        assert session_service.user_id(test_db, copy) is None

    def test_deleting_user_removes_sessions(self, test_db, user):
        session_service.start(test_db, _request(), user_id=user["id"])
        test_db.execute("DELETE FROM users WHERE id = ?", [user["id"]])
        assert _rows(test_db) == []
