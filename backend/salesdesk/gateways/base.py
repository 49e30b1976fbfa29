# Overview: Persistence gateway contract shared by every storage adapter.

"""
Persistence Gateway

The sale transaction protocol and the reporting engine never talk to a
database directly. They go through this row-level contract so the same
code runs against SQLAlchemy, Supabase or the in-memory store.

Rows are plain dicts. Ids are opaque to callers.

Each single call is atomic on its own. Adapters that can also group calls
into one transaction set supports_transactions=True and honour atomic();
for the others atomic() is a no-op and callers must compensate by hand.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

PRODUCTS = "products"
SALES = "sales"

TABLES = (PRODUCTS, SALES)


class GatewayError(Exception):
    """The backing store rejected or failed a call."""

    def __init__(self, message: str, *, table: str | None = None, operation: str | None = None):
        super().__init__(message)
        self.table = table
        self.operation = operation


class PersistenceGateway:
    """Row-level CRUD over the products and sales tables."""

    supports_transactions = False

    def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        *,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        raise NotImplementedError

    def get(self, table: str, row_id: Any) -> dict | None:
        rows = self.select(table, {"id": row_id}, limit=1)
        return rows[0] if rows else None

    def insert(self, table: str, row: dict) -> dict:
        raise NotImplementedError

    def update(self, table: str, row_id: Any, patch: dict) -> dict | None:
        raise NotImplementedError

    def delete(self, table: str, row_id: Any) -> bool:
        raise NotImplementedError

    @contextmanager
    def atomic(self) -> Iterator["PersistenceGateway"]:
        yield self

    def _check_table(self, table: str) -> None:
        if table not in TABLES:
            raise GatewayError(f"Unknown table: {table}", table=table)
