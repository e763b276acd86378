"""
HTML bodies for customer and administrator emails.

Pure functions over fully-resolved rows: each returns ``(subject, html)`` and
never touches the database.
"""

from html import escape
from typing import Any, Dict, Optional, Tuple

from portal.config import settings

BRAND = "Think Body Japan"

_WRAPPER = '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">{body}</div>'
_FOOTER = (
    '<p style="color: #6b7280; font-size: 14px; margin-top: 30px;">'
    "If you have any questions, please do not hesitate to contact us.<br>"
    f"Thank you for choosing {BRAND}."
    "</p>"
)


def format_yen(amount: Any) -> str:
    return f"¥{int(amount or 0):,}"


def product_label(product: Optional[Dict[str, Any]]) -> str:
    """``BASE (Cocoa)``; falls back for legacy orders without a product."""
    if not product:
        return "Unknown product"
    if product.get("flavor"):
        return f"{product['name']} ({product['flavor']})"
    return product["name"]


def _table(rows) -> str:
    cells = "".join(
        '<tr><td style="padding: 8px 0; color: #6b7280;">{}:</td>'
        '<td style="padding: 8px 0;">{}</td></tr>'.format(escape(label), value)
        for label, value in rows
    )
    return f'<table style="width: 100%; border-collapse: collapse;">{cells}</table>'


def _box(title: str, content: str, background: str = "#f3f4f6") -> str:
    heading = f'<h3 style="margin-top: 0;">{escape(title)}</h3>' if title else ""
    return (
        f'<div style="background-color: {background}; padding: 20px; border-radius: 8px; margin: 20px 0;">'
        f"{heading}{content}</div>"
    )


def _address_block(address: Optional[Dict[str, Any]]) -> str:
    if not address:
        return ""
    return (
        '<div style="margin: 20px 0;"><h3>Shipping address</h3>'
        f'<p style="margin: 5px 0;"><strong>{escape(address["label"])}</strong></p>'
        f'<p style="margin: 5px 0;">〒{escape(address["postal_code"])}</p>'
        f'<p style="margin: 5px 0;">{escape(address["address"])}</p>'
        f'<p style="margin: 5px 0;">TEL: {escape(address["phone"])}</p>'
        "</div>"
    )


def order_confirmation_email(order, user, product, address) -> Tuple[str, str]:
    subject = f"[{BRAND}] Thank you for your order (order #{order['id']})"
    bank = _table(
        [
            ("Bank", escape(settings.BANK_NAME)),
            ("Branch", escape(settings.BANK_BRANCH)),
            ("Account type", escape(settings.BANK_ACCOUNT_TYPE)),
            ("Account number", escape(settings.BANK_ACCOUNT_NUMBER)),
            ("Account holder", escape(settings.BANK_ACCOUNT_HOLDER)),
        ]
    )
    body = (
        '<h2 style="color: #2563eb;">Thank you for your order</h2>'
        f"<p>Dear {escape(user['company_name'])},</p>"
        "<p>We have received your order with the following details.</p>"
        + _box(
            "Order details",
            _table(
                [
                    ("Order number", f"<strong>#{order['id']}</strong>"),
                    ("Product", escape(product_label(product))),
                    ("Quantity", f"{order['quantity']} bags"),
                    ("Total", f"<strong>{format_yen(order['total_price'])}</strong>"),
                ]
            ),
        )
        + _box(
            "Payment",
            "<p>Please transfer the total amount to the following account.</p>" + bank,
            background="#fef3c7",
        )
        + _address_block(address)
        + _FOOTER
    )
    return subject, _WRAPPER.format(body=body)


def admin_new_order_email(order, user, product, address) -> Tuple[str, str]:
    subject = f"[{BRAND}] New order #{order['id']} - {user['company_name']}"
    body = (
        '<h2 style="color: #dc2626;">A new order has arrived</h2>'
        + _box(
            "Customer",
            _table(
                [
                    ("Order number", f"<strong>#{order['id']}</strong>"),
                    ("Company", escape(user["company_name"])),
                    ("Contact", escape(f"{user['last_name']} {user['first_name']}")),
                    ("Email", escape(user["email"])),
                    ("Phone", escape(user["phone"])),
                ]
            ),
        )
        + _box(
            "Order details",
            _table(
                [
                    ("Product", escape(product_label(product))),
                    ("Quantity", f"<strong>{order['quantity']} bags</strong>"),
                    ("Unit price", format_yen(order["unit_price"])),
                    ("Total", f"<strong>{format_yen(order['total_price'])}</strong>"),
                ]
            ),
            background="#dbeafe",
        )
        + _address_block(address)
        + '<p style="color: #6b7280; font-size: 14px;">Please review the order in the admin '
        "dashboard and update its status.</p>"
    )
    return subject, _WRAPPER.format(body=body)


def order_shipped_email(order, user, product, address) -> Tuple[str, str]:
    subject = f"[{BRAND}] Your order has shipped (order #{order['id']})"
    body = (
        '<h2 style="color: #16a34a;">Your order has shipped</h2>'
        f"<p>Dear {escape(user['company_name'])},</p>"
        "<p>The products you ordered are on their way.</p>"
        + _box(
            "Order details",
            _table(
                [
                    ("Order number", f"<strong>#{order['id']}</strong>"),
                    ("Product", escape(product_label(product))),
                    ("Quantity", f"{order['quantity']} bags"),
                ]
            ),
        )
        + _address_block(address)
        + _box("", "<p style=\"margin: 0;\">Thank you for waiting for your delivery.</p>", "#dcfce7")
        + _FOOTER
    )
    return subject, _WRAPPER.format(body=body)


def order_cancelled_email(order, user, product, address) -> Tuple[str, str]:
    subject = f"[{BRAND}] Your order has been cancelled (order #{order['id']})"
    body = (
        '<h2 style="color: #dc2626;">Your order has been cancelled</h2>'
        f"<p>Dear {escape(user['company_name'])},</p>"
        "<p>The following order has been cancelled.</p>"
        + _box(
            "Order details",
            _table(
                [
                    ("Order number", f"<strong>#{order['id']}</strong>"),
                    ("Product", escape(product_label(product))),
                    ("Quantity", f"{order['quantity']} bags"),
                    ("Amount", format_yen(order["total_price"])),
                ]
            ),
        )
        + _box(
            "",
            '<p style="margin: 0;">If you have already paid for this order, '
            "we will arrange a refund.</p>",
            "#fee2e2",
        )
        + _FOOTER
    )
    return subject, _WRAPPER.format(body=body)


def password_reset_email(user, reset_link: str, expire_minutes: int) -> Tuple[str, str]:
    subject = f"[{BRAND}] Reset your password"
    body = (
        '<h2 style="color: #2563eb;">Reset your password</h2>'
        f"<p>Dear {escape(user['company_name'])},</p>"
        "<p>We received a request to reset your password. "
        "Use the link below to choose a new one.</p>"
        '<div style="margin: 30px 0; text-align: center;">'
        f'<a href="{escape(reset_link)}" style="background-color: #2563eb; color: white; '
        'padding: 12px 24px; text-decoration: none; border-radius: 4px; font-weight: bold;">'
        "Reset password</a></div>"
        f"<p>The link is valid for {expire_minutes} minutes.</p>"
        '<p style="color: #6b7280; font-size: 14px;">If you did not request this, '
        "you can ignore this email.</p>"
    )
    return subject, _WRAPPER.format(body=body)
