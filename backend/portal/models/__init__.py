"""
Database models for the ordering portal.

The declarative classes define the schema; runtime queries go through
portal.database with plain SQL.
"""

from portal.models.user import User
from portal.models.shipping_address import ShippingAddress
from portal.models.product import Product
from portal.models.order import Order
from portal.models.admin import AdminUser
from portal.models.password_reset import PasswordResetToken
from portal.models.session import LoginSession

__all__ = [
    "User",
    "ShippingAddress",
    "Product",
    "Order",
    "AdminUser",
    "PasswordResetToken",
    "LoginSession",
]
