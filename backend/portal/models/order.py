"""
Order database model.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import relationship

from portal.database import Base


class Order(Base):
    """Bulk order for a single product."""

    __tablename__ = "orders"
    __table_args__ = (
        Index("idx_order_created", "created_at"),
        Index("idx_order_user_created", "user_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True, index=True)  # NULL on legacy rows
    shipping_address_id = Column(Integer, ForeignKey("shipping_addresses.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Integer, nullable=True)  # price snapshot at order time
    total_price = Column(Integer, nullable=False)
    status = Column(String, nullable=False, default="received", server_default="received")
    payment_confirmed = Column(Integer, default=0, server_default="0")
    payment_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.current_timestamp())

    # Relationships
    user = relationship("User", back_populates="orders")
