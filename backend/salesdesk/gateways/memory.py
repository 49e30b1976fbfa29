# Overview: In-process persistence gateway for tests and local demos.

from __future__ import annotations

import copy
import threading
from datetime import datetime
from typing import Any

from salesdesk.time_utils import to_utc_naive, utcnow
from .base import GatewayError, PersistenceGateway, PRODUCTS, SALES, TABLES

# Column defaults applied on insert, mirroring the SQL models
_DEFAULTS = {
    PRODUCTS: {"price_cents": 0, "cost_cents": 0, "stock": 0},
    SALES: {"user_id": None},
}


def _sort_key(value: Any):
    # None sorts first; timestamps compare as UTC-naive, other values natively
    if value is None:
        return (0, 0)
    if isinstance(value, datetime):
        return (1, to_utc_naive(value))
    return (1, value)


class MemoryGateway(PersistenceGateway):
    """
    Dict-backed tables with integer ids.

    Calls can be made to fail on demand with fail_on(), which is how the
    compensation paths of the sale protocol are exercised in tests. Like a
    remote row store, it has no multi-call transactions.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._tables: dict[str, dict[int, dict]] = {t: {} for t in TABLES}
        self._next_id = {t: 1 for t in TABLES}
        self._failures: list[tuple[str, str, int]] = []
        self.calls: list[tuple[str, str]] = []

    def fail_on(self, operation: str, table: str, *, after: int = 0) -> None:
        """Make the (after + 1)-th future `operation` on `table` raise GatewayError."""
        self._failures.append((operation, table, after))

    def _maybe_fail(self, operation: str, table: str) -> None:
        self._check_table(table)
        self.calls.append((operation, table))
        for index, (op, tbl, after) in enumerate(self._failures):
            if op == operation and tbl == table:
                if after == 0:
                    del self._failures[index]
                    raise GatewayError(f"{operation} on {table} failed (injected)", table=table, operation=operation)
                self._failures[index] = (op, tbl, after - 1)
                return

    def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        *,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        self._maybe_fail("select", table)
        with self._lock:
            rows = list(self._tables[table].values())
        if filters:
            rows = [r for r in rows if all(r.get(k) == v for k, v in filters.items())]
        if order_by:
            rows.sort(key=lambda r: (_sort_key(r.get(order_by)), r["id"]), reverse=descending)
        else:
            rows.sort(key=lambda r: r["id"])
        if limit is not None:
            rows = rows[:limit]
        return copy.deepcopy(rows)

    def get(self, table: str, row_id: Any) -> dict | None:
        self._maybe_fail("get", table)
        with self._lock:
            row = self._tables[table].get(row_id)
        return copy.deepcopy(row) if row is not None else None

    def insert(self, table: str, row: dict) -> dict:
        self._maybe_fail("insert", table)
        with self._lock:
            row_id = self._next_id[table]
            self._next_id[table] += 1
            stored = dict(_DEFAULTS[table])
            stored.update(copy.deepcopy(row))
            stored["id"] = row_id
            if table == PRODUCTS:
                now = utcnow()
                stored.setdefault("created_at", now)
                stored.setdefault("updated_at", now)
            else:
                stored.setdefault("sold_at", utcnow())
            self._tables[table][row_id] = stored
            return copy.deepcopy(stored)

    def update(self, table: str, row_id: Any, patch: dict) -> dict | None:
        self._maybe_fail("update", table)
        with self._lock:
            row = self._tables[table].get(row_id)
            if row is None:
                return None
            row.update(copy.deepcopy(patch))
            if table == PRODUCTS:
                row["updated_at"] = utcnow()
            return copy.deepcopy(row)

    def delete(self, table: str, row_id: Any) -> bool:
        self._maybe_fail("delete", table)
        with self._lock:
            return self._tables[table].pop(row_id, None) is not None
