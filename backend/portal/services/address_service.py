"""
Shipping address management.
"""

import logging
from typing import Any, Dict, List

from portal.database import Database
from portal.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("label", "postal_code", "address", "phone")


class AddressService:
    def list_addresses(self, db: Database, user_id: int) -> List[Dict[str, Any]]:
        """Default address first, then newest."""
        return db.query_all(
            "SELECT * FROM shipping_addresses WHERE user_id = ? ORDER BY is_default DESC, id DESC",
            [user_id],
        )

    def _validate(self, data: Dict[str, Any]) -> None:
        if any(not data.get(field) for field in REQUIRED_FIELDS):
            raise ValidationError("Label, postal code, address and phone are required")

    def _clear_default(self, db: Database, user_id: int) -> None:
        db.execute("UPDATE shipping_addresses SET is_default = 0 WHERE user_id = ?", [user_id])

    def create_address(self, db: Database, user_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        self._validate(data)
        is_default = bool(data.get("is_default"))
        if is_default:
            self._clear_default(db, user_id)

        address_id = db.insert(
            "INSERT INTO shipping_addresses (user_id, label, postal_code, address, phone, is_default) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            [
                user_id,
                data["label"],
                data["postal_code"],
                data["address"],
                data["phone"],
                1 if is_default else 0,
            ],
        )
        return db.query_one("SELECT * FROM shipping_addresses WHERE id = ?", [address_id])

    def update_address(
        self, db: Database, user_id: int, address_id: int, data: Dict[str, Any]
    ) -> Dict[str, Any]:
        existing = db.query_one(
            "SELECT * FROM shipping_addresses WHERE id = ? AND user_id = ?", [address_id, user_id]
        )
        if not existing:
            raise NotFoundError("Shipping address not found")
        self._validate(data)

        is_default = bool(data.get("is_default"))
        if is_default:
            self._clear_default(db, user_id)

        db.execute(
            "UPDATE shipping_addresses SET label = ?, postal_code = ?, address = ?, phone = ?, "
            "is_default = ? WHERE id = ? AND user_id = ?",
            [
                data["label"],
                data["postal_code"],
                data["address"],
                data["phone"],
                1 if is_default else 0,
                address_id,
                user_id,
            ],
        )
        return db.query_one("SELECT * FROM shipping_addresses WHERE id = ?", [address_id])

    def delete_address(self, db: Database, user_id: int, address_id: int) -> None:
        existing = db.query_one(
            "SELECT id FROM shipping_addresses WHERE id = ? AND user_id = ?", [address_id, user_id]
        )
        if not existing:
            raise NotFoundError("Shipping address not found")
        # Orders keep a foreign key to their address
        if db.query_one("SELECT id FROM orders WHERE shipping_address_id = ? LIMIT 1", [address_id]):
            raise ValidationError("This address is used by existing orders and cannot be deleted")
        db.execute(
            "DELETE FROM shipping_addresses WHERE id = ? AND user_id = ?", [address_id, user_id]
        )


address_service = AddressService()
