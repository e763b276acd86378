"""
AdminUser database model.
"""

from sqlalchemy import Column, DateTime, Integer, String, func

from portal.database import Base


class AdminUser(Base):
    """Back-office account. Unrelated to customer users."""

    __tablename__ = "admin_users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False)
    password = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=func.current_timestamp())
