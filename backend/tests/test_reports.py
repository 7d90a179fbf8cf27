"""
Daily shift report and period analytics tests.

Shift boundaries are 02:00 UTC: an order at 01:30 belongs to the previous
business day.
"""

from datetime import datetime

import pytest

from cafe_pos.services import reporting_service
from cafe_pos.services.reporting_service import ReportError


@pytest.fixture
def menu(make_product):
    return {
        "latte": make_product("Latte", "coffee", "1.250"),
        "tea": make_product("Karak", "tea", "0.300"),
        "chips": make_product("Chips", "snack", "0.500", stock=50),
        "muffin": make_product("Muffin", "bakery", "0.800"),
    }


class TestDailyReport:

    def test_shift_window(self, menu, make_order):
        make_order(datetime(2025, 3, 10, 1, 59), [(menu["latte"], 1)])             # previous shift
        make_order(datetime(2025, 3, 10, 2, 0), [(menu["latte"], 2)], "Cash")      # 2.500
        make_order(datetime(2025, 3, 10, 18, 0), [(menu["chips"], 1)], "Visa")     # 0.500
        make_order(datetime(2025, 3, 11, 1, 59), [(menu["tea"], 1)], "Cash")       # 0.300
        make_order(datetime(2025, 3, 11, 2, 0), [(menu["tea"], 5)])                # next shift

        report = reporting_service.daily_report("2025-03-10")

        assert report["summary"] == {
            "total_revenue_omr": "3.300",
            "total_cash_omr": "2.800",
            "total_visa_omr": "0.500",
        }
        assert report["shift"] == {"start": "2025-03-10T02:00:00Z", "end": "2025-03-11T02:00:00Z"}
        assert [o["created_at"] for o in report["orders"]] == [
            "2025-03-11T01:59:00Z",
            "2025-03-10T18:00:00Z",
            "2025-03-10T02:00:00Z",
        ]

    def test_orders_carry_cashier_and_items(self, menu, make_order, cashier):
        make_order(datetime(2025, 3, 10, 9, 0), [(menu["latte"], 2), (menu["muffin"], 1)])

        order = reporting_service.daily_report("2025-03-10")["orders"][0]

        assert order["cashier_name"] == cashier.full_name
        assert [(i["name"], i["category"], i["quantity"]) for i in order["items"]] == [
            ("Latte", "coffee", 2),
            ("Muffin", "bakery", 1),
        ]

    def test_empty_day(self, db_session):
        report = reporting_service.daily_report("2025-03-10")
        assert report["summary"]["total_revenue_omr"] == "0.000"
        assert report["orders"] == []

    @pytest.mark.parametrize("value", [None, "", "10-03-2025", "2025-13-01"])
    def test_bad_date(self, db_session, value):
        with pytest.raises(ReportError):
            reporting_service.daily_report(value)

    def test_route(self, client, auth_headers, menu, make_order):
        make_order(datetime(2025, 3, 10, 9, 0), [(menu["latte"], 1)])
        response = client.get('/api/reports/daily?date=2025-03-10', headers=auth_headers)
        assert response.status_code == 200
        assert response.get_json()["summary"]["total_revenue_omr"] == "1.250"

        assert client.get('/api/reports/daily', headers=auth_headers).status_code == 400


class TestResolveRange:

    def test_month(self, app):
        mode, start, end = reporting_service.resolve_range(month="2025-12")
        assert mode == "month"
        assert start == datetime(2025, 12, 1, 2, 0)
        assert end == datetime(2026, 1, 1, 2, 0)

    def test_inclusive_range(self, app):
        mode, start, end = reporting_service.resolve_range(start="2025-03-01", end="2025-03-03")
        assert mode == "range"
        assert start == datetime(2025, 3, 1, 2, 0)
        assert end == datetime(2025, 3, 4, 2, 0)

    @pytest.mark.parametrize("kwargs", [
        {},
        {"start": "2025-03-01"},
        {"month": "2025/03"},
        {"start": "2025-03-05", "end": "2025-03-01"},
    ])
    def test_invalid(self, app, kwargs):
        with pytest.raises(ReportError):
            reporting_service.resolve_range(**kwargs)


class TestSalesAnalytics:

    @pytest.fixture
    def march(self, menu, make_order):
        # Mon 3rd: two orders, one rung up after midnight but before the shift change
        make_order(datetime(2025, 3, 3, 9, 15), [(menu["latte"], 2), (menu["chips"], 1)], "Cash")  # 3.000
        make_order(datetime(2025, 3, 4, 1, 30), [(menu["tea"], 1)], "Visa")                        # 0.300
        # Wed 5th
        make_order(datetime(2025, 3, 5, 9, 45), [(menu["latte"], 1)], "Visa")                      # 1.250
        # February, for the month comparison
        make_order(datetime(2025, 2, 20, 12, 0), [(menu["muffin"], 2)], "Cash")                    # 1.600
        return menu

    def test_summary_and_payments(self, march):
        result = reporting_service.sales_analytics(month="2025-03")

        assert result["range"] == {
            "mode": "month",
            "start": "2025-03-01T02:00:00Z",
            "end": "2025-04-01T02:00:00Z",
        }
        assert result["summary"] == {
            "orders_count": 3,
            "total_revenue_omr": "4.550",
            "aov_omr": "1.517",
        }
        payments = result["payments"]
        assert payments["cash_omr"] == "3.000"
        assert payments["visa_omr"] == "1.550"
        assert payments["cash_pct"] == 65.93
        assert payments["visa_pct"] == 34.07

    def test_daily_buckets_use_business_day(self, march):
        daily = reporting_service.sales_analytics(month="2025-03")["daily"]

        assert daily["list"] == [
            {"day": "2025-03-03", "orders": 2, "revenue_omr": "3.300"},
            {"day": "2025-03-05", "orders": 1, "revenue_omr": "1.250"},
        ]
        assert daily["avg_revenue_omr"] == "2.275"
        assert daily["best_day"]["day"] == "2025-03-03"
        assert daily["worst_day"]["day"] == "2025-03-05"

    def test_products_and_categories(self, march):
        result = reporting_service.sales_analytics(month="2025-03")
        top = result["top_products"]

        assert top["top_by_units"]["name"] == "Latte"
        assert top["top_by_units"]["units"] == 3
        assert top["top_by_revenue"]["revenue_omr"] == "3.750"
        assert [p["name"] for p in top["top5"]] == ["Latte", "Chips", "Karak"]
        # Muffin sold only in February
        assert top["slow_movers"][0]["name"] == "Muffin"
        assert top["slow_movers"][0]["units"] == 0

        categories = result["category_performance"]
        assert categories["best_by_revenue"] == "coffee"
        assert categories["best_by_units"] == "coffee"
        assert [r["category"] for r in categories["rows"]] == ["coffee", "snack", "tea"]

        assert result["avg_items_per_order"] == 1.67

    def test_peak(self, march):
        peak = reporting_service.sales_analytics(month="2025-03")["peak"]
        assert peak["peak_hour"] == "09:00"
        assert peak["busiest_hours"][0] == {"hour": "09:00", "orders": 2}
        assert peak["peak_day"] == "Mon"

    def test_month_compare(self, march):
        compare = reporting_service.sales_analytics(month="2025-03")["month_compare"]
        assert compare == {
            "prev_start": "2025-02-01T02:00:00Z",
            "prev_end": "2025-03-01T02:00:00Z",
            "prev_revenue_omr": "1.600",
        }

    def test_range_has_no_month_compare(self, march):
        result = reporting_service.sales_analytics(start="2025-03-05", end="2025-03-05")
        assert result["summary"]["orders_count"] == 1
        assert result["month_compare"] is None

    def test_empty_period(self, db_session):
        result = reporting_service.sales_analytics(month="2024-01")
        assert result["summary"]["orders_count"] == 0
        assert result["payments"]["cash_pct"] == 0.0
        assert result["daily"]["best_day"] is None
        assert result["peak"]["peak_hour"] is None

    def test_route(self, client, auth_headers, march):
        response = client.get('/api/analytics?month=2025-03', headers=auth_headers)
        assert response.status_code == 200
        assert response.get_json()["summary"]["orders_count"] == 3

        assert client.get('/api/analytics', headers=auth_headers).status_code == 400
