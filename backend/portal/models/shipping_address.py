"""
ShippingAddress database model.
"""

from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from portal.database import Base


class ShippingAddress(Base):
    """Delivery address owned by a user. At most one per user is the default."""

    __tablename__ = "shipping_addresses"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    label = Column(String, nullable=False)
    postal_code = Column(String, nullable=False)
    address = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    is_default = Column(Integer, default=0, server_default="0")

    # Relationships
    user = relationship("User", back_populates="shipping_addresses")
