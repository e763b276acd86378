"""
Invoice and receipt PDFs.

Both renderers take a fully-resolved order dict (see
OrderService.build_document_order) and write to a binary stream; they never
query the database.
"""

import logging
import os
from datetime import date
from typing import Any, BinaryIO, Dict, Optional

from reportlab.lib.pagesizes import A4
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from portal.config import settings

logger = logging.getLogger(__name__)

# Protein is food: reduced consumption tax rate
REDUCED_TAX_RATE = 8

FONT_NAME = "PortalSans"
FALLBACK_FONT = "Helvetica"
FONT_CANDIDATES = [
    os.path.join(os.path.dirname(__file__), "..", "fonts", "NotoSansJP-Regular.ttf"),
    "/usr/share/fonts/truetype/takao-gothic/TakaoPGothic.ttf",
    "/usr/share/fonts/opentype/ipafont-gothic/ipagp.ttf",
    "C:/Windows/Fonts/meiryo.ttc",
]

_font_name: Optional[str] = None


def _resolve_font() -> str:
    """Register the first usable TrueType font once; Helvetica otherwise."""
    global _font_name
    if _font_name:
        return _font_name

    candidates = [settings.PDF_FONT_PATH] if settings.PDF_FONT_PATH else []
    for path in candidates + FONT_CANDIDATES:
        if not path or not os.path.exists(path):
            continue
        try:
            pdfmetrics.registerFont(TTFont(FONT_NAME, path))
            logger.info(f"Using PDF font: {path}")
            _font_name = FONT_NAME
            return _font_name
        except Exception as e:
            logger.warning(f"Could not load font {path}: {e}")

    logger.warning("No CJK font available, falling back to Helvetica")
    _font_name = FALLBACK_FONT
    return _font_name


def included_tax(amount: int, rate: int = REDUCED_TAX_RATE) -> int:
    """Consumption tax contained in a tax-inclusive amount, rounded down."""
    return amount * rate // (100 + rate)


def _yen(amount: Any) -> str:
    return f"¥{int(amount or 0):,}"


def render_invoice(order: Dict[str, Any], stream: BinaryIO) -> None:
    font = _resolve_font()
    pdf = canvas.Canvas(stream, pagesize=A4)
    width, height = A4
    left, right = 50, width - 50

    pdf.setTitle(f"Invoice INV-{order['id']:06d}")
    pdf.setFont(font, 20)
    pdf.drawCentredString(width / 2, height - 70, "INVOICE")

    pdf.setFont(font, 10)
    y = height - 100
    for line in (
        f"Issued: {date.today().isoformat()}",
        f"Invoice no.: INV-{order['id']:06d}",
        f"Registration no.: {settings.INVOICE_NUMBER}",
    ):
        pdf.drawRightString(right, y, line)
        y -= 14

    pdf.setFont(font, 12)
    pdf.drawString(left, y - 10, f"To: {order['user_name']}")
    pdf.setFont(font, 10)
    pdf.drawString(left, y - 30, "We hereby invoice you for the following.")

    pdf.setFont(font, 14)
    pdf.drawCentredString(width / 2, y - 60, f"Amount due: {_yen(order['total_price'])}-")

    # Line items
    y = height - 260
    pdf.setFont(font, 10)
    _draw_row(pdf, y, "Item", "Unit price", "Qty", "Amount", "Tax")
    pdf.line(left, y - 5, right, y - 5)
    y -= 20

    taxable = 0
    for item in order.get("items", []):
        amount = int(item["price"]) * int(item["quantity"])
        taxable += amount
        _draw_row(
            pdf, y, item["name"], _yen(item["price"]), str(item["quantity"]), _yen(amount),
            f"{REDUCED_TAX_RATE}%",
        )
        y -= 20

    pdf.line(left, y + 5, right, y + 5)
    y -= 15
    pdf.drawRightString(
        right, y,
        f"{REDUCED_TAX_RATE}% taxable: {_yen(taxable)} (tax: {_yen(included_tax(taxable))})",
    )
    y -= 20
    pdf.setFont(font, 12)
    pdf.drawRightString(right, y, f"Total: {_yen(order['total_price'])}")

    pdf.setFont(font, 10)
    pdf.drawString(left, 100, f"Issuer: {settings.COMPANY_NAME}")
    pdf.drawString(left, 85, f"Address: {settings.COMPANY_ADDRESS}")

    pdf.showPage()
    pdf.save()


def render_receipt(order: Dict[str, Any], stream: BinaryIO) -> None:
    font = _resolve_font()
    pdf = canvas.Canvas(stream, pagesize=A4)
    width, height = A4
    total = int(order["total_price"])

    pdf.setTitle(f"Receipt #{order['id']}")
    pdf.setFont(font, 24)
    pdf.drawCentredString(width / 2, height - 80, "RECEIPT")

    pdf.setFont(font, 14)
    pdf.drawString(50, height - 130, f"To: {order['user_name']}")

    pdf.setFont(font, 20)
    pdf.drawCentredString(width / 2, height - 190, f"{_yen(total)}-")
    pdf.line(width / 2 - 100, height - 195, width / 2 + 100, height - 195)

    pdf.setFont(font, 11)
    pdf.drawCentredString(width / 2, height - 220, "For protein products.")
    pdf.drawCentredString(width / 2, height - 236, "Received with thanks.")

    pdf.setFont(font, 10)
    pdf.drawCentredString(
        width / 2, height - 270, f"(Consumption tax included: {_yen(included_tax(total))})"
    )
    pdf.drawCentredString(
        width / 2, height - 284, f"* Reduced tax rate ({REDUCED_TAX_RATE}%) items"
    )

    pdf.drawString(50, height - 330, f"Issued: {date.today().isoformat()}")

    issuer_y = height - 380
    pdf.setFont(font, 11)
    pdf.drawString(50, issuer_y, f"Issuer: {settings.COMPANY_NAME}")
    pdf.setFont(font, 10)
    pdf.drawString(50, issuer_y - 15, f"Address: {settings.COMPANY_ADDRESS}")
    pdf.drawString(50, issuer_y - 30, f"Registration no.: {settings.INVOICE_NUMBER}")
    pdf.rect(40, issuer_y - 40, width - 80, 60)

    pdf.showPage()
    pdf.save()


def _draw_row(pdf: canvas.Canvas, y: float, name, price, quantity, amount, tax) -> None:
    pdf.drawString(50, y, str(name))
    pdf.drawRightString(320, y, str(price))
    pdf.drawRightString(370, y, str(quantity))
    pdf.drawRightString(460, y, str(amount))
    pdf.drawRightString(510, y, str(tax))
