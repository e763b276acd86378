"""
Order lifecycle: creation, status changes, payment confirmation.

Status and payment are independent axes. Any known status can be set from any
other one by an administrator; notifications for a change are dispatched
fire-and-forget after the row has been written.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from portal.config import settings
from portal.core.dates import normalize_timestamp, now_timestamp
from portal.database import Database
from portal.exceptions import NotFoundError, ValidationError
from portal.services import email_templates
from portal.services.notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)


class OrderStatus(str, Enum):
    RECEIVED = "received"
    PROCESSING = "processing"  # legacy alias of RECEIVED
    PREPARING = "preparing"
    SHIPPED = "shipped"
    ARRIVED = "arrived"
    CANCELLED = "cancelled"


PROGRESS_STEPS = [
    OrderStatus.RECEIVED,
    OrderStatus.PREPARING,
    OrderStatus.SHIPPED,
    OrderStatus.ARRIVED,
]


def parse_status(value: Optional[str]) -> OrderStatus:
    if not value:
        raise ValidationError("Status is required")
    try:
        return OrderStatus(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(f"Unknown status '{value}'. Allowed: {allowed}")


def display_status(status: str) -> str:
    """Presentation value of a stored status; ``processing`` shows as ``received``."""
    if status == OrderStatus.PROCESSING.value:
        return OrderStatus.RECEIVED.value
    return status


def progress_step(status: str) -> Optional[int]:
    """Index on the received -> arrived track, None when off the track (cancelled)."""
    shown = display_status(status)
    for index, step in enumerate(PROGRESS_STEPS):
        if step.value == shown:
            return index
    return None


def validate_quantity(product: Dict[str, Any], quantity: int) -> None:
    minimum = int(product.get("min_quantity") or 1)
    step = int(product.get("quantity_step") or 1)
    if quantity < minimum:
        raise ValidationError(f"Minimum order quantity is {minimum}")
    if quantity % step != 0:
        raise ValidationError(f"Quantity must be a multiple of {step}")


def present(order: Dict[str, Any]) -> Dict[str, Any]:
    """Order row plus display-only fields."""
    return {
        **order,
        "display_status": display_status(order["status"]),
        "progress_step": progress_step(order["status"]),
    }


_ADMIN_LIST_SQL = """
    SELECT o.*,
           u.company_name, u.last_name, u.first_name, u.email AS user_email,
           p.name AS product_name, p.flavor AS product_flavor,
           a.label AS address_label, a.postal_code AS address_postal_code,
           a.address AS address_address, a.phone AS address_phone
    FROM orders o
    LEFT JOIN users u ON o.user_id = u.id
    LEFT JOIN products p ON o.product_id = p.id
    LEFT JOIN shipping_addresses a ON o.shipping_address_id = a.id
    ORDER BY o.created_at DESC, o.id DESC
"""


class OrderService:
    # --- creation ---------------------------------------------------------

    def create_order(
        self,
        db: Database,
        notifier: NotificationDispatcher,
        user_id: int,
        shipping_address_id: Optional[int],
        quantity: Optional[int],
        product_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Place an order for the authenticated user.

        The unit price is snapshotted from the product at this moment and the
        total is ``quantity * unit_price``. A confirmation email to the customer
        and a new-order email to the administrator are dispatched afterwards.

        Raises:
            ValidationError: missing fields, no orderable product, or a quantity
                below the minimum / off the step.
            NotFoundError: the shipping address is not one of the user's.
        """
        if not shipping_address_id or not quantity:
            raise ValidationError("Shipping address and quantity are required")

        if product_id:
            product = db.query_one("SELECT * FROM products WHERE id = ?", [product_id])
        else:
            product = db.query_one(
                "SELECT * FROM products WHERE is_active = 1 ORDER BY id ASC LIMIT 1"
            )
        if not product or not product["is_active"]:
            raise ValidationError("No valid product found")

        validate_quantity(product, quantity)

        address = db.query_one(
            "SELECT * FROM shipping_addresses WHERE id = ? AND user_id = ?",
            [shipping_address_id, user_id],
        )
        if not address:
            raise NotFoundError("Shipping address not found")

        unit_price = int(product["price"])
        total_price = quantity * unit_price

        order_id = db.insert(
            "INSERT INTO orders (user_id, product_id, shipping_address_id, quantity, "
            "unit_price, total_price, status, payment_confirmed, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [
                user_id,
                product["id"],
                shipping_address_id,
                quantity,
                unit_price,
                total_price,
                OrderStatus.RECEIVED.value,
                0,
                now_timestamp(),
            ],
        )
        order = db.query_one("SELECT * FROM orders WHERE id = ?", [order_id])
        logger.info(
            f"Order #{order_id} created: user={user_id} product={product['id']} "
            f"quantity={quantity} total={total_price}"
        )

        user = db.query_one("SELECT * FROM users WHERE id = ?", [user_id])
        self._notify_created(notifier, order, user, product, address)
        return present(order)

    # --- lifecycle --------------------------------------------------------

    def update_status(
        self,
        db: Database,
        notifier: NotificationDispatcher,
        order_id: int,
        status: Optional[str],
    ) -> Dict[str, Any]:
        new_status = parse_status(status)

        order = db.query_one("SELECT * FROM orders WHERE id = ?", [order_id])
        if not order:
            raise NotFoundError("Order not found")

        db.execute("UPDATE orders SET status = ? WHERE id = ?", [new_status.value, order_id])
        order["status"] = new_status.value
        logger.info(f"Order #{order_id} status -> {new_status.value}")

        if new_status in (OrderStatus.SHIPPED, OrderStatus.CANCELLED):
            user = db.query_one("SELECT * FROM users WHERE id = ?", [order["user_id"]])
            address = db.query_one(
                "SELECT * FROM shipping_addresses WHERE id = ?", [order["shipping_address_id"]]
            )
            product = (
                db.query_one("SELECT * FROM products WHERE id = ?", [order["product_id"]])
                if order["product_id"]
                else None
            )
            self._notify_status(notifier, new_status, order, user, product, address)

        return present(order)

    def confirm_payment(
        self,
        db: Database,
        order_id: int,
        payment_confirmed: Optional[bool],
        payment_date: Optional[str] = None,
    ) -> Dict[str, Any]:
        if payment_confirmed is None:
            raise ValidationError("payment_confirmed is required")

        try:
            stored_date = normalize_timestamp(payment_date) if payment_date else None
        except ValueError:
            raise ValidationError(f"Invalid payment date '{payment_date}'")

        order = db.query_one("SELECT * FROM orders WHERE id = ?", [order_id])
        if not order:
            raise NotFoundError("Order not found")

        flag = 1 if payment_confirmed else 0
        db.execute(
            "UPDATE orders SET payment_confirmed = ?, payment_date = ? WHERE id = ?",
            [flag, stored_date, order_id],
        )
        order["payment_confirmed"] = flag
        order["payment_date"] = stored_date
        logger.info(f"Order #{order_id} payment_confirmed={flag} payment_date={stored_date}")
        return present(order)

    # --- queries ----------------------------------------------------------

    def list_orders_for_user(self, db: Database, user_id: int) -> List[Dict[str, Any]]:
        orders = db.query_all(
            "SELECT * FROM orders WHERE user_id = ? ORDER BY created_at DESC, id DESC",
            [user_id],
        )
        return [present(o) for o in orders]

    def get_order_for_user(self, db: Database, user_id: int, order_id: int) -> Dict[str, Any]:
        order = db.query_one("SELECT * FROM orders WHERE id = ?", [order_id])
        if not order or order["user_id"] != user_id:
            raise NotFoundError("Order not found")
        address = db.query_one(
            "SELECT * FROM shipping_addresses WHERE id = ?", [order["shipping_address_id"]]
        )
        return {**present(order), "shipping_address": address}

    def list_all_orders(self, db: Database) -> List[Dict[str, Any]]:
        """Admin view: every order with customer, product and address resolved."""
        result = []
        for row in db.query_all(_ADMIN_LIST_SQL):
            has_user = row.get("company_name") is not None
            has_address = row.get("address_label") is not None
            order = {
                key: row[key]
                for key in (
                    "id",
                    "user_id",
                    "product_id",
                    "shipping_address_id",
                    "quantity",
                    "unit_price",
                    "total_price",
                    "status",
                    "payment_confirmed",
                    "payment_date",
                    "created_at",
                )
            }
            order["company_name"] = row["company_name"] if has_user else "Unknown"
            order["user_name"] = (
                f"{row['last_name']} {row['first_name']}" if has_user else "Unknown"
            )
            order["user_email"] = row.get("user_email")
            order["product_name"] = (
                email_templates.product_label(
                    {"name": row["product_name"], "flavor": row["product_flavor"]}
                )
                if row.get("product_name")
                else "Unknown"
            )
            order["shipping_address"] = (
                {
                    "id": row["shipping_address_id"],
                    "label": row["address_label"],
                    "postal_code": row["address_postal_code"],
                    "address": row["address_address"],
                    "phone": row["address_phone"],
                }
                if has_address
                else None
            )
            result.append(present(order))
        return result

    def build_document_order(
        self, db: Database, order_id: int, user_id: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Resolve everything the invoice/receipt generator needs.

        When ``user_id`` is given the order must belong to that user. Legacy
        orders without a unit price fall back to the product's current price;
        any remainder of the total becomes a shipping line.
        """
        sql = (
            "SELECT o.*, u.company_name, u.email AS user_email, "
            "p.name AS product_name, p.flavor AS product_flavor, p.price AS product_price "
            "FROM orders o "
            "JOIN users u ON o.user_id = u.id "
            "LEFT JOIN products p ON o.product_id = p.id "
            "WHERE o.id = ?"
        )
        params: List[Any] = [order_id]
        if user_id is not None:
            sql += " AND o.user_id = ?"
            params.append(user_id)

        order = db.query_one(sql, params)
        if not order:
            raise NotFoundError("Order not found")

        unit_price = int(order.get("unit_price") or order.get("product_price") or 0)
        name = (
            email_templates.product_label(
                {"name": order["product_name"], "flavor": order["product_flavor"]}
            )
            if order.get("product_name")
            else "Protein"
        )
        items = [{"name": name, "price": unit_price, "quantity": order["quantity"]}]
        shipping = int(order["total_price"]) - unit_price * int(order["quantity"])
        if shipping > 0:
            items.append({"name": "Shipping & handling", "price": shipping, "quantity": 1})

        order["unit_price"] = unit_price
        order["user_name"] = order.get("company_name") or "Customer"
        order["items"] = items
        return order

    # --- notifications ----------------------------------------------------

    def _notify_created(self, notifier, order, user, product, address) -> None:
        try:
            subject, html = email_templates.order_confirmation_email(order, user, product, address)
            notifier.dispatch(user["email"], subject, html)
            subject, html = email_templates.admin_new_order_email(order, user, product, address)
            notifier.dispatch(settings.ADMIN_EMAIL, subject, html)
        except Exception as e:
            logger.error(f"Could not dispatch notifications for order #{order['id']}: {e}", exc_info=True)

    def _notify_status(self, notifier, status, order, user, product, address) -> None:
        if not user:
            logger.warning(f"Order #{order['id']} has no user, {status.value} email skipped")
            return
        try:
            if status == OrderStatus.SHIPPED:
                subject, html = email_templates.order_shipped_email(order, user, product, address)
            else:
                subject, html = email_templates.order_cancelled_email(order, user, product, address)
            notifier.dispatch(user["email"], subject, html)
        except Exception as e:
            logger.error(f"Could not dispatch {status.value} email for order #{order['id']}: {e}", exc_info=True)


order_service = OrderService()
