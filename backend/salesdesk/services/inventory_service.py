# Overview: Service-layer operations for the inventory ledger (products and sales reads).

"""
Inventory Ledger

Reads and writes Product rows and reads Sale rows through the persistence
gateway. Stock only changes here when an admin edits a product (manual
correction); sales adjust stock through services/sales_service.py.

Callers that pass actor_role get the central permission check applied.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from ..gateways.base import PersistenceGateway, PRODUCTS, SALES
from ..models import Product
from ..permissions import require_role_permission
from ..validation import (
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    coerce_int,
    enforce_rules_product,
    validate_payload,
)
from salesdesk.time_utils import to_utc_z

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "price_cents", "cost_cents", "stock"},
    required_on_create={"name", "price_cents", "cost_cents", "stock"},
)

MAX_SALES_LIMIT = 1000


def to_json(row: dict) -> dict:
    """Row dict with datetimes rendered as ISO-8601 UTC strings."""
    return {k: (to_utc_z(v) if isinstance(v, datetime) else v) for k, v in row.items()}


def _authorize(actor_role: str | None, permission_code: str) -> None:
    if actor_role is not None:
        require_role_permission(actor_role, permission_code)


def clean_product_payload(payload: dict, *, partial: bool) -> dict:
    """Validate a create (partial=False) or edit (partial=True) payload."""
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=partial)
    enforce_rules_product(patch)
    if partial and not patch:
        raise ValidationError("No fields to update")
    return patch


def list_products(gateway: PersistenceGateway) -> list[dict]:
    """All products, alphabetical by name."""
    return gateway.select(PRODUCTS, order_by="name")


def get_product(gateway: PersistenceGateway, product_id: Any) -> dict:
    product = gateway.get(PRODUCTS, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


def create_product(gateway: PersistenceGateway, *, payload: dict, actor_role: str | None = None) -> dict:
    _authorize(actor_role, "MANAGE_PRODUCTS")
    patch = clean_product_payload(payload, partial=False)
    return gateway.insert(PRODUCTS, patch)


def update_product(
    gateway: PersistenceGateway,
    *,
    product_id: Any,
    payload: dict,
    actor_role: str | None = None,
) -> dict:
    """
    Edit product fields. Setting stock here is a manual correction and
    is not recorded as a sale.

    Past sales keep their snapshotted name and total price.
    """
    _authorize(actor_role, "MANAGE_PRODUCTS")
    patch = clean_product_payload(payload, partial=True)
    updated = gateway.update(PRODUCTS, product_id, patch)
    if updated is None:
        raise NotFoundError("Product not found")
    return updated


def delete_product(gateway: PersistenceGateway, *, product_id: Any, actor_role: str | None = None) -> None:
    """Hard delete. Sales that referenced the product keep their snapshot."""
    _authorize(actor_role, "MANAGE_PRODUCTS")
    if not gateway.delete(PRODUCTS, product_id):
        raise NotFoundError("Product not found")


def list_sales(gateway: PersistenceGateway, *, limit: Any = None) -> list[dict]:
    """Sales ordered by date, newest first."""
    if limit is not None:
        limit = coerce_int("limit", limit)
        if limit <= 0:
            raise ValidationError("limit must be > 0")
        limit = min(limit, MAX_SALES_LIMIT)
    return gateway.select(SALES, order_by="sold_at", descending=True, limit=limit)


def get_sale(gateway: PersistenceGateway, sale_id: Any) -> dict:
    sale = gateway.get(SALES, sale_id)
    if sale is None:
        raise NotFoundError("Sale not found")
    return sale
