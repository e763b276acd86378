"""
Session database model.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func

from portal.database import Base


class LoginSession(Base):
    """Server-side session; the cookie only carries its random id."""

    __tablename__ = "sessions"

    id = Column(String, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    admin_id = Column(
        Integer, ForeignKey("admin_users.id", ondelete="CASCADE"), nullable=True, index=True
    )
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, server_default=func.current_timestamp())
