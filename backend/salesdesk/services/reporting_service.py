# Overview: Service-layer operations for reporting; dashboard statistics and period summaries.

"""
Aggregation Engine

Every figure is recomputed from product and sale snapshots on each call.
The pure functions take `now` (UTC-naive) and a report timezone so tests
can pin the clock; calendar days are the report timezone's days.

Profit uses the product's current cost. A sale whose product has been
deleted still counts toward revenue but contributes 0 profit.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable
from zoneinfo import ZoneInfo

from ..gateways.base import PersistenceGateway, PRODUCTS, SALES
from ..permissions import has_permission, require_role_permission
from salesdesk.time_utils import (
    local_date,
    resolve_timezone,
    start_of_local_day,
    to_local,
    to_utc_naive,
    trailing_days,
    utcnow,
)

LOW_STOCK_THRESHOLD = 10

SERIES_DAYS = 7

# Fixed labels so output does not depend on the server locale
WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

PERIODS = ("daily", "weekly", "monthly", "yearly")


def _products_by_id(products: Iterable[dict]) -> dict:
    return {p["id"]: p for p in products}


def sale_profit_cents(sale: dict, products_by_id: dict) -> int:
    product = products_by_id.get(sale.get("product_id"))
    if product is None:
        return 0
    return sale["total_price_cents"] - product["cost_cents"] * sale["quantity"]


def total_revenue_cents(sales: Iterable[dict]) -> int:
    return sum(s["total_price_cents"] for s in sales)


def total_profit_cents(sales: Iterable[dict], products: Iterable[dict]) -> int:
    lookup = _products_by_id(products)
    return sum(sale_profit_cents(s, lookup) for s in sales)


def low_stock_count(products: Iterable[dict], threshold: int = LOW_STOCK_THRESHOLD) -> int:
    return sum(1 for p in products if p["stock"] < threshold)


def sales_today(sales: Iterable[dict], *, now: datetime, tz: ZoneInfo) -> int:
    today = local_date(now, tz)
    return sum(1 for s in sales if local_date(s["sold_at"], tz) == today)


def sales_by_day(
    sales: Iterable[dict],
    products: Iterable[dict],
    *,
    now: datetime,
    tz: ZoneInfo,
    days: int = SERIES_DAYS,
) -> list[dict]:
    """
    Profit per local calendar day for the trailing `days` days ending today.

    Always returns exactly `days` entries, oldest first; empty days are 0.
    """
    lookup = _products_by_id(products)
    window = trailing_days(local_date(now, tz), days)
    buckets: dict[date, int] = {d: 0 for d in window}

    for sale in sales:
        day = local_date(sale["sold_at"], tz)
        if day in buckets:
            buckets[day] += sale_profit_cents(sale, lookup)

    return [
        {
            "day": WEEKDAY_LABELS[d.weekday()],
            "date": d.isoformat(),
            "profit_cents": buckets[d],
        }
        for d in window
    ]


def period_starts(*, now: datetime, tz: ZoneInfo) -> dict[str, datetime]:
    """UTC-naive start of the current day, week (Monday), month and year in `tz`."""
    today = to_local(now, tz).date()
    return {
        "daily": start_of_local_day(today, tz),
        "weekly": start_of_local_day(today - timedelta(days=today.weekday()), tz),
        "monthly": start_of_local_day(today.replace(day=1), tz),
        "yearly": start_of_local_day(today.replace(month=1, day=1), tz),
    }


def period_summary(
    sales: Iterable[dict],
    products: Iterable[dict],
    *,
    now: datetime,
    tz: ZoneInfo,
) -> dict[str, dict]:
    """Overlapping windows anchored to now: {period: {sales_cents, profit_cents}}."""
    sales = list(sales)
    lookup = _products_by_id(products)
    summary = {}
    for period, start in period_starts(now=now, tz=tz).items():
        scoped = [s for s in sales if to_utc_naive(s["sold_at"]) >= start]
        summary[period] = {
            "sales_cents": total_revenue_cents(scoped),
            "profit_cents": sum(sale_profit_cents(s, lookup) for s in scoped),
        }
    return summary


def compute_dashboard_stats(
    products: list[dict],
    sales: list[dict],
    *,
    now: datetime,
    tz: ZoneInfo,
) -> dict:
    return {
        "total_revenue_cents": total_revenue_cents(sales),
        "total_profit_cents": total_profit_cents(sales, products),
        "sales_today": sales_today(sales, now=now, tz=tz),
        "low_stock_items": low_stock_count(products),
        "sales_by_day": sales_by_day(sales, products, now=now, tz=tz),
    }


def _load(gateway: PersistenceGateway) -> tuple[list[dict], list[dict]]:
    return gateway.select(PRODUCTS), gateway.select(SALES)


def _resolve(now: datetime | None, tz: ZoneInfo | str | None) -> tuple[datetime, ZoneInfo]:
    if not isinstance(tz, ZoneInfo):
        tz = resolve_timezone(tz)
    return (now or utcnow()), tz


def dashboard_stats(
    gateway: PersistenceGateway,
    *,
    role: str | None,
    now: datetime | None = None,
    tz: ZoneInfo | str | None = None,
) -> dict:
    """
    Dashboard figures for `role`. Revenue, profit and the profit series
    are left out unless the role holds VIEW_FINANCIALS.
    """
    require_role_permission(role, "VIEW_DASHBOARD")
    now, tz = _resolve(now, tz)
    products, sales = _load(gateway)
    stats = compute_dashboard_stats(products, sales, now=now, tz=tz)

    if not has_permission(role, "VIEW_FINANCIALS"):
        for key in ("total_revenue_cents", "total_profit_cents", "sales_by_day"):
            stats.pop(key)
    stats["financials_visible"] = has_permission(role, "VIEW_FINANCIALS")
    return stats


def sales_summary(
    gateway: PersistenceGateway,
    *,
    role: str | None,
    now: datetime | None = None,
    tz: ZoneInfo | str | None = None,
) -> dict:
    require_role_permission(role, "VIEW_DASHBOARD")
    now, tz = _resolve(now, tz)
    products, sales = _load(gateway)
    summary = period_summary(sales, products, now=now, tz=tz)

    if not has_permission(role, "VIEW_FINANCIALS"):
        for figures in summary.values():
            figures.pop("profit_cents")
    return summary
