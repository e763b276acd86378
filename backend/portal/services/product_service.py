"""
Product catalog.
"""

import logging
from typing import Any, Dict, List

from portal.core.dates import now_timestamp
from portal.database import Database
from portal.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "name",
    "flavor",
    "price",
    "image_url",
    "description",
    "catch_copy",
    "min_quantity",
    "quantity_step",
    "is_active",
)


def _check_positive(data: Dict[str, Any]) -> None:
    for field in ("price", "min_quantity", "quantity_step"):
        value = data.get(field)
        if value is not None and int(value) <= 0:
            raise ValidationError(f"{field} must be a positive integer")


class ProductService:
    def list_active(self, db: Database) -> List[Dict[str, Any]]:
        return db.query_all("SELECT * FROM products WHERE is_active = 1 ORDER BY id ASC")

    def list_all(self, db: Database) -> List[Dict[str, Any]]:
        return db.query_all("SELECT * FROM products ORDER BY id ASC")

    def get_product(self, db: Database, product_id: int) -> Dict[str, Any]:
        product = db.query_one("SELECT * FROM products WHERE id = ?", [product_id])
        if not product:
            raise NotFoundError("Product not found")
        return product

    def create_product(self, db: Database, data: Dict[str, Any]) -> Dict[str, Any]:
        if not data.get("name") or not data.get("price"):
            raise ValidationError("Product name and price are required")
        _check_positive(data)

        product_id = db.insert(
            "INSERT INTO products (name, flavor, price, image_url, description, catch_copy, "
            "min_quantity, quantity_step, is_active, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [
                data["name"],
                data.get("flavor"),
                int(data["price"]),
                data.get("image_url") or "",
                data.get("description"),
                data.get("catch_copy") or "",
                int(data.get("min_quantity") or 10),
                int(data.get("quantity_step") or 10),
                0 if data.get("is_active") is False else 1,
                now_timestamp(),
            ],
        )
        logger.info(f"Product #{product_id} created: {data['name']}")
        return self.get_product(db, product_id)

    def update_product(self, db: Database, product_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        """Partial update; fields left out (or None) keep their value."""
        self.get_product(db, product_id)
        _check_positive(data)

        changes = {k: v for k, v in data.items() if k in EDITABLE_FIELDS and v is not None}
        if "is_active" in changes:
            changes["is_active"] = 1 if changes["is_active"] else 0
        if not changes:
            return self.get_product(db, product_id)

        assignments = ", ".join(f"{field} = ?" for field in changes)
        db.execute(
            f"UPDATE products SET {assignments} WHERE id = ?",
            [*changes.values(), product_id],
        )
        logger.info(f"Product #{product_id} updated: {', '.join(changes)}")
        return self.get_product(db, product_id)


product_service = ProductService()
