"""
Authentication Service: customer accounts, admin accounts, password resets.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from portal.config import settings
from portal.core import security
from portal.core.dates import format_timestamp, normalize_timestamp, now_timestamp
from portal.database import Database
from portal.exceptions import AuthorizationError, NotFoundError, ValidationError
from portal.services import email_templates
from portal.services.notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)

USER_PUBLIC_COLUMNS = (
    "id, email, company_name, last_name, first_name, phone, postal_code, address, created_at"
)
MIN_USER_PASSWORD = 8
MIN_ADMIN_PASSWORD = 6


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """User row without the password hash."""
    return {key: value for key, value in user.items() if key != "password"}


class AuthService:
    # --- customers ----------------------------------------------------------

    def get_user_by_email(self, db: Database, email: str) -> Optional[Dict[str, Any]]:
        return db.query_one("SELECT * FROM users WHERE email = ?", [email])

    def get_user(self, db: Database, user_id: int) -> Dict[str, Any]:
        user = db.query_one("SELECT * FROM users WHERE id = ?", [user_id])
        if not user:
            raise NotFoundError("User not found")
        return public_user(user)

    def create_user(
        self,
        db: Database,
        email: str,
        password: str,
        company_name: str,
        last_name: str,
        first_name: str,
        phone: str,
        postal_code: Optional[str] = None,
        address: Optional[str] = None,
    ) -> int:
        """Register a new customer and return its id."""
        if len(password or "") < MIN_USER_PASSWORD:
            raise ValidationError(f"Password must be at least {MIN_USER_PASSWORD} characters")
        if self.get_user_by_email(db, email):
            raise ValidationError("This email address is already registered")

        user_id = db.insert(
            "INSERT INTO users (email, password, company_name, last_name, first_name, "
            "phone, postal_code, address, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [
                email,
                security.get_password_hash(password),
                company_name,
                last_name,
                first_name,
                phone,
                postal_code or "",
                address or "",
                now_timestamp(),
            ],
        )
        logger.info(f"Registered user #{user_id} ({company_name})")
        return user_id

    def authenticate_user(self, db: Database, email: str, password: str) -> Dict[str, Any]:
        """Return the user for valid credentials, raise AuthorizationError otherwise."""
        user = self.get_user_by_email(db, email)
        if not user or not security.verify_password(password, user["password"]):
            raise AuthorizationError("Incorrect email or password")
        return user

    def update_profile(self, db: Database, user_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
        current = db.query_one("SELECT * FROM users WHERE id = ?", [user_id])
        if not current:
            raise NotFoundError("User not found")

        email = changes.get("email")
        if email and email != current["email"]:
            taken = db.query_one(
                "SELECT id FROM users WHERE email = ? AND id != ?", [email, user_id]
            )
            if taken:
                raise ValidationError("This email address is already in use")

        merged = {
            field: changes[field] if changes.get(field) is not None else current[field]
            for field in ("email", "company_name", "last_name", "first_name", "phone", "postal_code", "address")
        }
        db.execute(
            "UPDATE users SET email = ?, company_name = ?, last_name = ?, first_name = ?, "
            "phone = ?, postal_code = ?, address = ? WHERE id = ?",
            [
                merged["email"],
                merged["company_name"],
                merged["last_name"],
                merged["first_name"],
                merged["phone"],
                merged["postal_code"] or "",
                merged["address"] or "",
                user_id,
            ],
        )
        return self.get_user(db, user_id)

    def change_password(
        self, db: Database, user_id: int, current_password: str, new_password: str
    ) -> None:
        user = db.query_one("SELECT * FROM users WHERE id = ?", [user_id])
        if not user:
            raise NotFoundError("User not found")
        if not security.verify_password(current_password, user["password"]):
            raise ValidationError("Current password is incorrect")
        if len(new_password) < MIN_USER_PASSWORD:
            raise ValidationError(f"Password must be at least {MIN_USER_PASSWORD} characters")
        db.execute(
            "UPDATE users SET password = ? WHERE id = ?",
            [security.get_password_hash(new_password), user_id],
        )

    # --- password reset -----------------------------------------------------

    def request_password_reset(
        self,
        db: Database,
        notifier: NotificationDispatcher,
        email: str,
        now: Optional[datetime] = None,
    ) -> Optional[str]:
        """
        Issue a reset token and email the link.

        Unknown emails are silently ignored so the endpoint does not reveal
        which addresses are registered. Returns the token (None when ignored).
        """
        user = self.get_user_by_email(db, email)
        if not user:
            logger.info("Password reset requested for an unknown email")
            return None

        now = now or datetime.now()
        token = security.generate_reset_token()
        expires_at = now + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)

        # One live token per user
        db.execute("DELETE FROM password_reset_tokens WHERE user_id = ?", [user["id"]])
        db.execute(
            "INSERT INTO password_reset_tokens (token, user_id, expires_at, created_at) "
            "VALUES (?, ?, ?, ?)",
            [token, user["id"], format_timestamp(expires_at), format_timestamp(now)],
        )

        reset_link = f"{settings.PUBLIC_BASE_URL.rstrip('/')}/reset_password.html?token={token}"
        try:
            subject, html = email_templates.password_reset_email(
                user, reset_link, settings.RESET_TOKEN_EXPIRE_MINUTES
            )
            notifier.dispatch(user["email"], subject, html)
        except Exception as e:
            logger.error(f"Could not dispatch password reset email: {e}", exc_info=True)
        logger.debug(f"Reset link for user #{user['id']}: {reset_link}")
        return token

    def reset_password(
        self,
        db: Database,
        token: str,
        new_password: str,
        now: Optional[datetime] = None,
    ) -> None:
        if not token or not new_password:
            raise ValidationError("Token and new password are required")

        record = db.query_one("SELECT * FROM password_reset_tokens WHERE token = ?", [token])
        if not record:
            raise ValidationError("Invalid token")

        now_str = format_timestamp(now or datetime.now())
        if normalize_timestamp(record["expires_at"]) < now_str:
            db.execute("DELETE FROM password_reset_tokens WHERE token = ?", [token])
            raise ValidationError("Token has expired")

        if len(new_password) < MIN_USER_PASSWORD:
            raise ValidationError(f"Password must be at least {MIN_USER_PASSWORD} characters")

        db.execute(
            "UPDATE users SET password = ? WHERE id = ?",
            [security.get_password_hash(new_password), record["user_id"]],
        )
        db.execute("DELETE FROM password_reset_tokens WHERE token = ?", [token])
        logger.info(f"Password reset completed for user #{record['user_id']}")

    # --- admins -------------------------------------------------------------

    def authenticate_admin(self, db: Database, username: str, password: str) -> Dict[str, Any]:
        admin = db.query_one("SELECT * FROM admin_users WHERE username = ?", [username])
        if not admin or not security.verify_password(password, admin["password"]):
            raise AuthorizationError("Incorrect username or password")
        return admin

    def get_admin(self, db: Database, admin_id: int) -> Dict[str, Any]:
        admin = db.query_one("SELECT id, username FROM admin_users WHERE id = ?", [admin_id])
        if not admin:
            raise NotFoundError("Admin not found")
        return admin

    def change_admin_password(
        self, db: Database, admin_id: int, current_password: str, new_password: str
    ) -> None:
        if not current_password or not new_password:
            raise ValidationError("Current and new password are required")
        if len(new_password) < MIN_ADMIN_PASSWORD:
            raise ValidationError(f"Password must be at least {MIN_ADMIN_PASSWORD} characters")

        admin = db.query_one("SELECT * FROM admin_users WHERE id = ?", [admin_id])
        if not admin:
            raise NotFoundError("Admin not found")
        if not security.verify_password(current_password, admin["password"]):
            raise AuthorizationError("Current password is incorrect")

        db.execute(
            "UPDATE admin_users SET password = ? WHERE id = ?",
            [security.get_password_hash(new_password), admin_id],
        )

    def list_users(self, db: Database) -> List[Dict[str, Any]]:
        return db.query_all(
            f"SELECT {USER_PUBLIC_COLUMNS} FROM users ORDER BY created_at DESC, id DESC"
        )


auth_service = AuthService()
