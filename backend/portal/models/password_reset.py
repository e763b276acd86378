"""
PasswordResetToken database model.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func

from portal.database import Base


class PasswordResetToken(Base):
    """Single-use reset token; one live token per user."""

    __tablename__ = "password_reset_tokens"

    token = Column(String, primary_key=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, server_default=func.current_timestamp())
