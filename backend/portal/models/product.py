"""
Product database model.
"""

from sqlalchemy import Column, DateTime, Integer, String, func

from portal.database import Base


class Product(Base):
    """Catalog entry. Prices are integers in the smallest currency unit, tax included."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    flavor = Column(String, nullable=True)
    price = Column(Integer, nullable=False)
    image_url = Column(String, nullable=True)
    description = Column(String, nullable=True)
    catch_copy = Column(String, nullable=True)
    min_quantity = Column(Integer, default=10, server_default="10")
    quantity_step = Column(Integer, default=10, server_default="10")
    is_active = Column(Integer, default=1, server_default="1")
    created_at = Column(DateTime, server_default=func.current_timestamp())
