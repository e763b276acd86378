"""
Reporting Service for the admin dashboard: monthly sales, trend and ranking.

Month bucketing uses half-open string ranges on ``created_at``
(``>= 'YYYY-MM-01 00:00:00' AND < next month``) instead of backend date
functions, so the same SQL runs on SQLite and PostgreSQL.
"""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Union

from portal.core.dates import month_label, month_range, parse_month, shift_month
from portal.database import Database
from portal.exceptions import PersistenceError, ReportingUnavailableError, ValidationError

logger = logging.getLogger(__name__)

TREND_MONTHS = 6
RANKING_LIMIT = 5

Number = Union[int, float]


def to_number(value: Any) -> Number:
    """
    Coerce an aggregate into a native number.

    Some drivers hand back SUM() results as Decimal or even as strings; None
    and anything unparsable count as 0.
    """
    if value is None or isinstance(value, bool):
        return int(value or 0)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else value
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return 0
    if not number.is_finite():
        return 0
    return int(number) if number == number.to_integral_value() else float(number)


def growth_rate(current_sales: Number, last_sales: Number) -> float:
    """
    Month-over-month growth in percent, rounded to one decimal.

    With no sales last month the rate is 100 when there are sales now, else 0.
    """
    if last_sales > 0:
        rate = (current_sales - last_sales) / last_sales * 100
    elif current_sales > 0:
        rate = 100.0
    else:
        rate = 0.0
    return round(rate, 1)


def trend_months(year: int, month: int, count: int = TREND_MONTHS) -> List[tuple]:
    """``count`` (year, month) pairs ending at the given month, oldest first."""
    return [shift_month(year, month, -offset) for offset in range(count - 1, -1, -1)]


class ReportingService:
    def _month_aggregate(self, db: Database, year: int, month: int) -> Dict[str, Number]:
        start, end = month_range(year, month)
        row = db.query_one(
            """
            SELECT COUNT(*) AS order_count,
                   COALESCE(SUM(total_price), 0) AS sales,
                   COALESCE(SUM(quantity), 0) AS total_quantity
            FROM orders
            WHERE created_at >= ? AND created_at < ?
            """,
            [start, end],
        ) or {}
        return {
            "order_count": to_number(row.get("order_count")),
            "sales": to_number(row.get("sales")),
            "total_quantity": to_number(row.get("total_quantity")),
        }

    def _month_sales(self, db: Database, year: int, month: int) -> Number:
        start, end = month_range(year, month)
        row = db.query_one(
            """
            SELECT COALESCE(SUM(total_price), 0) AS sales
            FROM orders
            WHERE created_at >= ? AND created_at < ?
            """,
            [start, end],
        ) or {}
        return to_number(row.get("sales"))

    def get_sales_trend(self, db: Database, year: int, month: int) -> List[Dict[str, Any]]:
        """Sales per month for the six months ending at the target month."""
        return [
            {"month": month_label(y, m), "sales": self._month_sales(db, y, m)}
            for y, m in trend_months(year, month)
        ]

    def get_product_ranking(self, db: Database, limit: int = RANKING_LIMIT) -> List[Dict[str, Any]]:
        """Top products by all-time sales amount."""
        rows = db.query_all(
            """
            SELECT p.id AS product_id,
                   p.name AS name,
                   SUM(o.quantity) AS total_quantity,
                   SUM(o.total_price) AS total_sales
            FROM orders o
            JOIN products p ON o.product_id = p.id
            GROUP BY p.id, p.name
            ORDER BY total_sales DESC, p.id ASC
            LIMIT ?
            """,
            [limit],
        )
        return [
            {
                "product_id": row["product_id"],
                "name": row["name"],
                "total_quantity": to_number(row["total_quantity"]),
                "total_sales": to_number(row["total_sales"]),
            }
            for row in rows
        ]

    def get_totals(self, db: Database) -> Dict[str, Number]:
        orders = db.query_one("SELECT COUNT(*) AS total FROM orders") or {}
        products = db.query_one("SELECT COUNT(*) AS total FROM products WHERE is_active = 1") or {}
        return {
            "total_orders": to_number(orders.get("total")),
            "active_products": to_number(products.get("total")),
        }

    def build_dashboard(
        self, db: Database, month: Optional[str] = None, today: Optional[date] = None
    ) -> Dict[str, Any]:
        """
        Dashboard payload for a target month (``YYYY-MM``, default current).

        Raises:
            ValidationError: malformed month.
            ReportingUnavailableError: any query failed; nothing partial is returned.
        """
        try:
            year, mon = parse_month(month, today=today)
        except ValueError as e:
            raise ValidationError(str(e))

        last_year, last_mon = shift_month(year, mon, -1)

        try:
            current = self._month_aggregate(db, year, mon)
            last_sales = self._month_sales(db, last_year, last_mon)
            trend = self.get_sales_trend(db, year, mon)
            ranking = self.get_product_ranking(db)
            totals = self.get_totals(db)
        except PersistenceError as e:
            logger.error(f"Dashboard for {month_label(year, mon)} failed: {e}")
            raise ReportingUnavailableError("Dashboard data is currently unavailable") from e

        summary = {
            "current_month_sales": current["sales"],
            "last_month_sales": last_sales,
            "growth_rate": growth_rate(current["sales"], last_sales),
            "current_month_orders": current["order_count"],
            "current_month_quantity": current["total_quantity"],
            "total_orders": totals["total_orders"],
            "active_products": totals["active_products"],
        }

        return {
            "target_month": month_label(year, mon),
            "summary": summary,
            "sales_trend": trend,
            "product_ranking": ranking,
        }


reporting_service = ReportingService()
