"""
Aggregation tests with a pinned clock.

NOW is Saturday 2026-10-17 15:00 UTC.
"""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from salesdesk.permissions import PermissionDeniedError
from salesdesk.services import inventory_service, reporting_service, sales_service

UTC = ZoneInfo("UTC")
NOW = datetime(2026, 10, 17, 15, 0)

PRODUCTS = [
    {"id": 1, "name": "Kettle", "price_cents": 10_000, "cost_cents": 6_000, "stock": 10},
    {"id": 2, "name": "Mug", "price_cents": 1_500, "cost_cents": 500, "stock": 3},
    {"id": 3, "name": "Filter", "price_cents": 200, "cost_cents": 50, "stock": 9},
]


def sale(sale_id, product_id, quantity, total_price_cents, sold_at):
    return {
        "id": sale_id,
        "product_id": product_id,
        "product_name": "x",
        "quantity": quantity,
        "total_price_cents": total_price_cents,
        "sold_at": sold_at,
    }


class TestTotals:

    def test_revenue_and_profit(self):
        sales = [
            sale(1, 1, 4, 40_000, NOW),
            sale(2, 2, 2, 3_000, NOW),
        ]
        assert reporting_service.total_revenue_cents(sales) == 43_000
        # (40000 - 4*6000) + (3000 - 2*500)
        assert reporting_service.total_profit_cents(sales, PRODUCTS) == 16_000 + 2_000

    def test_orphaned_sale_counts_revenue_but_no_profit(self):
        sales = [sale(1, 99, 2, 5_000, NOW), sale(2, 1, 1, 10_000, NOW)]
        assert reporting_service.total_revenue_cents(sales) == 15_000
        assert reporting_service.total_profit_cents(sales, PRODUCTS) == 4_000

    def test_profit_uses_snapshot_total(self):
        # Sold at an old price; profit is against the snapshotted total
        sales = [sale(1, 1, 1, 8_000, NOW)]
        assert reporting_service.total_profit_cents(sales, PRODUCTS) == 2_000

    def test_empty(self):
        assert reporting_service.total_revenue_cents([]) == 0
        assert reporting_service.total_profit_cents([], PRODUCTS) == 0

    def test_low_stock_threshold_is_strict(self):
        assert reporting_service.low_stock_count(PRODUCTS) == 2
        assert reporting_service.low_stock_count([{"stock": 10}, {"stock": 0}]) == 1


class TestSalesByDay:

    def test_seven_entries_oldest_first_ending_today(self):
        series = reporting_service.sales_by_day([], PRODUCTS, now=NOW, tz=UTC)

        assert len(series) == 7
        assert [e["date"] for e in series] == [
            "2026-10-11", "2026-10-12", "2026-10-13", "2026-10-14",
            "2026-10-15", "2026-10-16", "2026-10-17",
        ]
        assert [e["day"] for e in series] == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
        assert all(e["profit_cents"] == 0 for e in series)

    def test_buckets_profit_per_day(self):
        sales = [
            sale(1, 1, 1, 10_000, datetime(2026, 10, 17, 9, 0)),
            sale(2, 1, 1, 10_000, datetime(2026, 10, 17, 11, 0)),
            sale(3, 2, 1, 1_500, datetime(2026, 10, 11, 0, 0)),
            sale(4, 2, 1, 1_500, datetime(2026, 10, 10, 23, 59)),  # outside window
        ]
        series = reporting_service.sales_by_day(sales, PRODUCTS, now=NOW, tz=UTC)

        assert series[-1]["profit_cents"] == 8_000
        assert series[0]["profit_cents"] == 1_000
        assert sum(e["profit_cents"] for e in series) == 9_000

    def test_uses_local_calendar_days(self):
        new_york = ZoneInfo("America/New_York")
        now = datetime(2026, 10, 17, 2, 0)  # 22:00 on the 16th in New York
        sales = [sale(1, 1, 1, 10_000, datetime(2026, 10, 17, 1, 0))]

        series = reporting_service.sales_by_day(sales, PRODUCTS, now=now, tz=new_york)

        assert series[-1]["date"] == "2026-10-16"
        assert series[-1]["profit_cents"] == 4_000
        assert reporting_service.sales_today(sales, now=now, tz=new_york) == 1


class TestPeriodSummary:

    def test_windows(self):
        starts = reporting_service.period_starts(now=NOW, tz=UTC)
        assert starts == {
            "daily": datetime(2026, 10, 17),
            "weekly": datetime(2026, 10, 12),
            "monthly": datetime(2026, 10, 1),
            "yearly": datetime(2026, 1, 1),
        }

    def test_overlapping_totals(self):
        sales = [
            sale(1, 1, 1, 10_000, datetime(2026, 10, 17, 10, 0)),  # all periods
            sale(2, 2, 2, 3_000, datetime(2026, 10, 13, 8, 0)),    # week, month, year
            sale(3, 3, 10, 2_000, datetime(2026, 10, 2, 8, 0)),    # month, year
            sale(4, 99, 1, 700, datetime(2026, 3, 5, 8, 0)),       # year, orphaned
            sale(5, 1, 1, 10_000, datetime(2025, 12, 31, 23, 0)),  # none
        ]
        summary = reporting_service.period_summary(sales, PRODUCTS, now=NOW, tz=UTC)

        assert summary["daily"] == {"sales_cents": 10_000, "profit_cents": 4_000}
        assert summary["weekly"] == {"sales_cents": 13_000, "profit_cents": 6_000}
        assert summary["monthly"] == {"sales_cents": 15_000, "profit_cents": 7_500}
        assert summary["yearly"] == {"sales_cents": 15_700, "profit_cents": 7_500}

    def test_aware_sale_times(self):
        cest = timezone(timedelta(hours=2))
        sales = [
            sale(1, 1, 1, 10_000, datetime(2026, 10, 17, 10, 0, tzinfo=timezone.utc)),
            # 2026-10-16 23:30 UTC, before today's window
            sale(2, 2, 1, 1_500, datetime(2026, 10, 17, 1, 30, tzinfo=cest)),
        ]
        summary = reporting_service.period_summary(sales, PRODUCTS, now=NOW, tz=UTC)

        assert summary["daily"] == {"sales_cents": 10_000, "profit_cents": 4_000}
        assert summary["weekly"] == {"sales_cents": 11_500, "profit_cents": 5_000}


class TestDashboard:

    def test_scenario_from_recorded_sale(self, memory_gateway):
        product = inventory_service.create_product(memory_gateway, payload={
            "name": "Kettle", "price_cents": 10_000, "cost_cents": 6_000, "stock": 10,
        })
        sale_row = sales_service.record_sale(memory_gateway, product_id=product["id"], quantity=4)

        assert sale_row["total_price_cents"] == 40_000
        assert memory_gateway.get("products", product["id"])["stock"] == 6

        stats = reporting_service.dashboard_stats(memory_gateway, role="admin", now=sale_row["sold_at"], tz="UTC")

        assert stats["total_revenue_cents"] == 40_000
        assert stats["total_profit_cents"] == 16_000
        assert stats["sales_today"] == 1
        assert stats["low_stock_items"] == 1
        assert len(stats["sales_by_day"]) == 7
        assert stats["financials_visible"] is True

    def test_staff_sees_no_financials(self, memory_gateway):
        stats = reporting_service.dashboard_stats(memory_gateway, role="sales_staff", now=NOW, tz="UTC")

        assert stats == {"sales_today": 0, "low_stock_items": 0, "financials_visible": False}

    def test_staff_summary_has_sales_only(self, memory_gateway):
        summary = reporting_service.sales_summary(memory_gateway, role="sales_staff", now=NOW, tz="UTC")

        assert set(summary) == set(reporting_service.PERIODS)
        assert summary["daily"] == {"sales_cents": 0}

    def test_unknown_role_denied(self, memory_gateway):
        with pytest.raises(PermissionDeniedError):
            reporting_service.dashboard_stats(memory_gateway, role="guest", now=NOW)

    def test_unknown_timezone_falls_back_to_utc(self, memory_gateway):
        stats = reporting_service.dashboard_stats(memory_gateway, role="admin", now=NOW, tz="Mars/Olympus")
        assert stats["sales_by_day"][-1]["date"] == "2026-10-17"
