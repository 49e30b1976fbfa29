# Overview: Persistence gateway backed by a Supabase (PostgREST) project.

from __future__ import annotations

from datetime import datetime
from typing import Any

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from salesdesk.time_utils import parse_iso_datetime, to_utc_z
from .base import GatewayError, PersistenceGateway

# Timestamp columns come back from PostgREST as ISO strings
_DATETIME_COLUMNS = {"created_at", "updated_at", "sold_at"}


def _to_wire(row: dict) -> dict:
    return {k: (to_utc_z(v) if isinstance(v, datetime) else v) for k, v in row.items()}


def _from_wire(row: dict) -> dict:
    out = dict(row)
    for key in _DATETIME_COLUMNS & out.keys():
        if isinstance(out[key], str):
            out[key] = parse_iso_datetime(out[key])
    return out


class SupabaseGateway(PersistenceGateway):
    """
    Each call is one PostgREST round trip. There are no client-side
    transactions, so atomic() stays the inherited no-op and the sale
    protocol compensates by hand.
    """

    def __init__(self, client: Client):
        self.client = client

    @classmethod
    def from_credentials(cls, url: str | None, key: str | None) -> "SupabaseGateway":
        if not url or not key:
            raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be set for the supabase backend")
        return cls(create_client(url, key))

    def _execute(self, query, table: str, operation: str) -> list[dict]:
        try:
            response = query.execute()
        except (APIError, httpx.HTTPError) as exc:
            raise GatewayError(f"{operation} on {table} failed: {exc}", table=table, operation=operation) from exc
        return [_from_wire(r) for r in (response.data or [])]

    def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        *,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        self._check_table(table)
        query = self.client.table(table).select("*")
        for key, value in (filters or {}).items():
            query = query.eq(key, value)
        if order_by:
            query = query.order(order_by, desc=descending)
        else:
            query = query.order("id")
        if limit is not None:
            query = query.limit(limit)
        return self._execute(query, table, "select")

    def insert(self, table: str, row: dict) -> dict:
        self._check_table(table)
        rows = self._execute(self.client.table(table).insert(_to_wire(row)), table, "insert")
        if not rows:
            raise GatewayError(f"insert on {table} returned no row", table=table, operation="insert")
        return rows[0]

    def update(self, table: str, row_id: Any, patch: dict) -> dict | None:
        self._check_table(table)
        query = self.client.table(table).update(_to_wire(patch)).eq("id", row_id)
        rows = self._execute(query, table, "update")
        return rows[0] if rows else None

    def delete(self, table: str, row_id: Any) -> bool:
        self._check_table(table)
        rows = self._execute(self.client.table(table).delete().eq("id", row_id), table, "delete")
        return bool(rows)
