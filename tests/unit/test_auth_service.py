"""
Tests for accounts - registration, login, profile, password reset, admins
"""
from datetime import datetime, timedelta

import pytest

from conftest import ADMIN_PASSWORD, TEST_PASSWORD
from portal.exceptions import AuthorizationError, ValidationError
from portal.services.auth_service import auth_service


@pytest.mark.unit
class TestCustomerAccounts:
    def test_password_is_hashed(self, test_db, user):
        row = test_db.query_one("SELECT password FROM users WHERE id = ?", [user["id"]])
        assert row["password"] != TEST_PASSWORD
        assert row["password"].startswith("$2")
        assert "password" not in user

    def test_authenticate(self, test_db, user):
        assert auth_service.authenticate_user(test_db, user["email"], TEST_PASSWORD)["id"] == user["id"]

    @pytest.mark.parametrize("email, password", [
        ("buyer@example.com", "wrong-password"),
        ("nobody@example.com", TEST_PASSWORD),
    ])
    def test_authenticate_failure(self, test_db, user, email, password):
        with pytest.raises(AuthorizationError):
            auth_service.authenticate_user(test_db, email, password)

    def test_duplicate_email(self, test_db, user):
        with pytest.raises(ValidationError):
            auth_service.create_user(
                test_db, user["email"], TEST_PASSWORD, "Dup", "A", "B", "000"
            )

    def test_short_password(self, test_db):
        with pytest.raises(ValidationError):
            auth_service.create_user(test_db, "short@example.com", "1234567", "C", "A", "B", "000")

    def test_update_profile_keeps_unspecified_fields(self, test_db, user):
        updated = auth_service.update_profile(test_db, user["id"], {"company_name": "Gym Yokohama"})
        assert updated["company_name"] == "Gym Yokohama"
        assert updated["email"] == user["email"]
        assert updated["phone"] == user["phone"]

    def test_update_profile_email_taken(self, test_db, user, other_user):
        with pytest.raises(ValidationError):
            auth_service.update_profile(test_db, user["id"], {"email": other_user["email"]})

    def test_change_password(self, test_db, user):
        with pytest.raises(ValidationError):
            auth_service.change_password(test_db, user["id"], "wrong-password", "new-password-1")
        auth_service.change_password(test_db, user["id"], TEST_PASSWORD, "new-password-1")
        assert auth_service.authenticate_user(test_db, user["email"], "new-password-1")


@pytest.mark.unit
class TestPasswordReset:
    NOW = datetime(2025, 1, 1, 12, 0, 0)

    def test_unknown_email_is_silent(self, test_db, notifier):
        assert auth_service.request_password_reset(test_db, notifier, "nobody@example.com") is None
        assert notifier.sent == []

    def test_reset_flow(self, test_db, notifier, user):
        token = auth_service.request_password_reset(test_db, notifier, user["email"], now=self.NOW)
        assert len(token) == 64
        assert notifier.recipients() == [user["email"]]
        assert f"token={token}" in notifier.sent[0][2]

        auth_service.reset_password(test_db, token, "brand-new-pass", now=self.NOW + timedelta(minutes=30))
        assert auth_service.authenticate_user(test_db, user["email"], "brand-new-pass")

    def test_token_is_single_use(self, test_db, notifier, user):
        token = auth_service.request_password_reset(test_db, notifier, user["email"], now=self.NOW)
        auth_service.reset_password(test_db, token, "brand-new-pass", now=self.NOW)
        with pytest.raises(ValidationError, match="Invalid token"):
            auth_service.reset_password(test_db, token, "another-pass-1", now=self.NOW)

    def test_expired_token(self, test_db, notifier, user):
        token = auth_service.request_password_reset(test_db, notifier, user["email"], now=self.NOW)
        with pytest.raises(ValidationError, match="expired"):
            auth_service.reset_password(
                test_db, token, "brand-new-pass", now=self.NOW + timedelta(hours=1, seconds=1)
            )
        assert test_db.query_one("SELECT * FROM password_reset_tokens WHERE token = ?", [token]) is None

    def test_new_request_replaces_old_token(self, test_db, notifier, user):
        old = auth_service.request_password_reset(test_db, notifier, user["email"], now=self.NOW)
        new = auth_service.request_password_reset(test_db, notifier, user["email"], now=self.NOW)
        assert old != new
        with pytest.raises(ValidationError):
            auth_service.reset_password(test_db, old, "brand-new-pass", now=self.NOW)

    def test_missing_fields(self, test_db):
        with pytest.raises(ValidationError):
            auth_service.reset_password(test_db, None, "brand-new-pass")


@pytest.mark.unit
class TestAdminAccounts:
    def test_authenticate_admin(self, test_db, admin):
        assert auth_service.authenticate_admin(test_db, "admin", ADMIN_PASSWORD)["id"] == admin["id"]
        with pytest.raises(AuthorizationError):
            auth_service.authenticate_admin(test_db, "admin", "nope")

    def test_change_admin_password(self, test_db, admin):
        with pytest.raises(ValidationError):
            auth_service.change_admin_password(test_db, admin["id"], ADMIN_PASSWORD, "12345")
        with pytest.raises(AuthorizationError):
            auth_service.change_admin_password(test_db, admin["id"], "wrong", "123456")
        auth_service.change_admin_password(test_db, admin["id"], ADMIN_PASSWORD, "123456")
        assert auth_service.authenticate_admin(test_db, "admin", "123456")

    def test_list_users_hides_passwords(self, test_db, user, other_user):
        users = auth_service.list_users(test_db)
        assert {u["email"] for u in users} == {user["email"], other_user["email"]}
        assert all("password" not in u for u in users)
