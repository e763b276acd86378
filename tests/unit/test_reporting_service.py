"""
Tests for dashboard reporting - growth rate, month buckets, trend, ranking
"""
from datetime import date
from decimal import Decimal
from unittest.mock import Mock

import pytest

from portal.exceptions import PersistenceError, ReportingUnavailableError, ValidationError
from portal.services.product_service import product_service
from portal.services.reporting_service import (
    growth_rate,
    reporting_service,
    to_number,
    trend_months,
)


@pytest.mark.unit
class TestGrowthRate:
    @pytest.mark.parametrize(
        "current, last, expected",
        [
            (30000, 15000, 100.0),
            (15000, 30000, -50.0),
            (10000, 30000, -66.7),
            (100, 0, 100.0),
            (0, 0, 0.0),
            (0, 100, -100.0),
        ],
    )
    def test_growth_rate(self, current, last, expected):
        assert growth_rate(current, last) == expected


@pytest.mark.unit
class TestToNumber:
    def test_coercions(self):
        assert to_number(None) == 0
        assert to_number(5) == 5
        assert to_number(Decimal("30000")) == 30000
        assert to_number("30000") == 30000
        assert to_number("12.5") == 12.5
        assert to_number(7.0) == 7
        assert to_number("n/a") == 0


@pytest.mark.unit
class TestTrendMonths:
    def test_six_months_ending_at_target(self):
        assert trend_months(2025, 6) == [
            (2025, 1), (2025, 2), (2025, 3), (2025, 4), (2025, 5), (2025, 6),
        ]

    def test_crosses_year_boundary(self):
        assert trend_months(2025, 2) == [
            (2024, 9), (2024, 10), (2024, 11), (2024, 12), (2025, 1), (2025, 2),
        ]


@pytest.mark.unit
class TestDashboard:
    @pytest.fixture
    def sales(self, user, address, product, insert_order):
        # May: 15,000 / June: 30,000 + 15,000 / one order on each month edge
        insert_order(user["id"], address["id"], product["id"], 10, 1500, "2025-05-20 10:00:00")
        insert_order(user["id"], address["id"], product["id"], 20, 1500, "2025-06-01 00:00:00")
        insert_order(user["id"], address["id"], product["id"], 10, 1500, "2025-06-30 23:59:59")
        insert_order(user["id"], address["id"], product["id"], 10, 1500, "2025-07-01 00:00:00")

    def test_summary(self, test_db, sales):
        data = reporting_service.build_dashboard(test_db, "2025-06")
        assert data["target_month"] == "2025-06"
        assert data["summary"] == {
            "current_month_sales": 45000,
            "last_month_sales": 15000,
            "growth_rate": 200.0,
            "current_month_orders": 2,
            "current_month_quantity": 30,
            "total_orders": 4,
            "active_products": 1,
        }

    def test_trend(self, test_db, sales):
        trend = reporting_service.build_dashboard(test_db, "2025-06")["sales_trend"]
        assert [point["month"] for point in trend] == [
            "2025-01", "2025-02", "2025-03", "2025-04", "2025-05", "2025-06",
        ]
        assert [point["sales"] for point in trend] == [0, 0, 0, 0, 15000, 45000]

    def test_empty_months_are_zero(self, test_db, product):
        data = reporting_service.build_dashboard(test_db, "2030-01")
        assert data["summary"]["current_month_sales"] == 0
        assert data["summary"]["growth_rate"] == 0.0
        assert all(point["sales"] == 0 for point in data["sales_trend"])
        assert data["product_ranking"] == []

    def test_ranking_by_sales(self, test_db, user, address, product, insert_order):
        other = product_service.create_product(test_db, {"name": "PLUS", "price": 3000})
        insert_order(user["id"], address["id"], product["id"], 30, 1500, "2025-06-02 10:00:00")
        insert_order(user["id"], address["id"], other["id"], 20, 3000, "2025-06-03 10:00:00")

        ranking = reporting_service.build_dashboard(test_db, "2025-06")["product_ranking"]
        assert ranking == [
            {"product_id": other["id"], "name": "PLUS", "total_quantity": 20, "total_sales": 60000},
            {"product_id": product["id"], "name": "BASE", "total_quantity": 30, "total_sales": 45000},
        ]

    def test_ranking_limited_to_five(self, test_db, user, address, insert_order):
        for i in range(7):
            p = product_service.create_product(test_db, {"name": f"P{i}", "price": 1000 + i})
            insert_order(user["id"], address["id"], p["id"], 10, p["price"], "2025-06-02 10:00:00")
        ranking = reporting_service.get_product_ranking(test_db)
        assert len(ranking) == 5
        assert ranking[0]["name"] == "P6"

    def test_default_month_is_today(self, test_db, product):
        data = reporting_service.build_dashboard(test_db, None, today=date(2025, 3, 15))
        assert data["target_month"] == "2025-03"

    def test_malformed_month(self, test_db):
        with pytest.raises(ValidationError):
            reporting_service.build_dashboard(test_db, "2025-13")

    def test_query_failure_is_unavailable_not_partial(self):
        db = Mock()
        db.query_one.side_effect = PersistenceError("Database query failed")
        with pytest.raises(ReportingUnavailableError):
            reporting_service.build_dashboard(db, "2025-06")
