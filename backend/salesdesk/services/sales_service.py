# Overview: Service-layer operations for sales; keeps sale rows and product stock consistent.

"""
Sale Transaction Protocol

Record, amend and reverse a sale together with the matching stock change.

Every step is a separate gateway call. The whole body runs inside
gateway.atomic(): on a transactional gateway (SQLAlchemy) that is one
database transaction, elsewhere it is a no-op and the manual compensation
below is the only protection.

Guarantees:
- stock is never decremented below zero by a sale
- no sale row is written unless its stock was reserved first
- amend rolls the old product's restored stock back before raising when
  the new product cannot cover the quantity
- reverse restores stock before deleting the row
- a partial commit is logged at ERROR and raised as ConsistencyError,
  never swallowed
- nothing is retried automatically: a half-applied step retried without a
  transaction could apply a stock change twice
"""

from __future__ import annotations

import logging
from typing import Any

from ..gateways.base import GatewayError, PersistenceGateway, PRODUCTS, SALES
from ..permissions import require_role_permission
from ..validation import NotFoundError, normalize_id, validate_sale_quantity
from salesdesk.time_utils import utcnow

logger = logging.getLogger(__name__)


class SaleError(Exception):
    """Raised for sale operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class InsufficientStockError(SaleError):
    """Requested quantity exceeds the product's stock."""


class ConsistencyError(SaleError):
    """
    A multi-step sale operation stopped half way and left stock and sale
    rows out of step. Needs manual reconciliation.
    """


def _authorize(actor_role: str | None, permission_code: str) -> None:
    if actor_role is not None:
        require_role_permission(actor_role, permission_code)


def _require_stock(product: dict, quantity: int) -> None:
    if product["stock"] < quantity:
        raise InsufficientStockError(
            "Not enough stock",
            details={
                "product_id": product["id"],
                "requested_quantity": quantity,
                "on_hand": product["stock"],
            },
        )


def _set_stock(gateway: PersistenceGateway, product_id: Any, stock: int) -> dict:
    updated = gateway.update(PRODUCTS, product_id, {"stock": stock})
    if updated is None:
        raise NotFoundError("Product not found")
    return updated


def _partial_commit(
    gateway: PersistenceGateway,
    message: str,
    details: dict,
    cause: Exception | None = None,
):
    """
    Raise for a step that failed after an earlier step was committed.

    On a transactional gateway the enclosing atomic() block rolls every
    step back, so the original failure is re-raised as is.
    """
    if gateway.supports_transactions:
        if cause is not None:
            raise cause
        raise GatewayError(message)
    logger.error("CONSISTENCY: %s %s", message, details)
    raise ConsistencyError(message, details=details) from cause


def _snapshot(product: dict, quantity: int) -> dict:
    return {
        "product_id": product["id"],
        "product_name": product["name"],
        "quantity": quantity,
        "total_price_cents": product["price_cents"] * quantity,
    }


def _load_sale_product(gateway: PersistenceGateway, sale: dict) -> dict | None:
    if sale.get("product_id") is None:
        return None
    return gateway.get(PRODUCTS, sale["product_id"])


def record_sale(
    gateway: PersistenceGateway,
    *,
    product_id: Any,
    quantity: Any,
    user_id: int | None = None,
    actor_role: str | None = None,
) -> dict:
    """
    Sell `quantity` units of a product.

    Decrements stock first, then writes the sale row with the product's
    current name and price as a snapshot.

    Raises:
        ValidationError: quantity is not a positive integer
        NotFoundError: product does not exist
        InsufficientStockError: stock < quantity (stock untouched)
        ConsistencyError: stock was decremented but the sale row failed
    """
    _authorize(actor_role, "CREATE_SALE")
    product_id = normalize_id("product_id", product_id)
    qty = validate_sale_quantity(quantity)

    with gateway.atomic():
        product = gateway.get(PRODUCTS, product_id)
        if product is None:
            raise NotFoundError("Product not found")

        _require_stock(product, qty)
        _set_stock(gateway, product["id"], product["stock"] - qty)

        row = _snapshot(product, qty)
        row["sold_at"] = utcnow()
        row["user_id"] = user_id
        try:
            sale = gateway.insert(SALES, row)
        except GatewayError as exc:
            _partial_commit(
                gateway,
                "Stock decremented but the sale row was not written",
                {"product_id": product["id"], "quantity": qty, "step": "insert_sale"},
                exc,
            )

    logger.info("Recorded sale %s: product=%s qty=%s", sale["id"], product["id"], qty)
    return sale


def _undo_restore(
    gateway: PersistenceGateway,
    sale: dict,
    old_product: dict | None,
    cause: Exception,
) -> None:
    """Put the old product's stock back to its value before update_sale ran."""
    if old_product is None:
        return
    if gateway.supports_transactions and isinstance(cause, GatewayError):
        # The session is failed; rolling back the transaction undoes the restore
        return
    try:
        _set_stock(gateway, old_product["id"], old_product["stock"])
    except (GatewayError, NotFoundError) as undo_exc:
        _partial_commit(
            gateway,
            "Stock restored for the amended sale could not be rolled back",
            {
                "sale_id": sale["id"],
                "product_id": old_product["id"],
                "expected_stock": old_product["stock"],
                "step": "rollback_restore",
            },
            undo_exc,
        )


def update_sale(
    gateway: PersistenceGateway,
    *,
    sale_id: Any,
    product_id: Any,
    quantity: Any,
    actor_role: str | None = None,
) -> dict:
    """
    Amend a sale's product and/or quantity.

    Runs as a full reverse + reapply even when the product is unchanged:
    restore the old quantity to the old product, check and decrement the
    new product, then rewrite the sale snapshot. The sale date is kept.

    If the old product no longer exists the restore is skipped (WARNING
    logged) and the amendment proceeds against the new product.

    Raises:
        NotFoundError: sale or new product missing (restore rolled back)
        InsufficientStockError: new product cannot cover quantity (restore rolled back)
        ConsistencyError: a step failed after stock had already moved
    """
    _authorize(actor_role, "MANAGE_SALES")
    sale_id = normalize_id("sale_id", sale_id)
    product_id = normalize_id("product_id", product_id)
    qty = validate_sale_quantity(quantity)

    with gateway.atomic():
        sale = gateway.get(SALES, sale_id)
        if sale is None:
            raise NotFoundError("Sale not found")

        old_product = _load_sale_product(gateway, sale)
        if old_product is None:
            logger.warning(
                "Sale %s references missing product %s; amending without restoring stock",
                sale["id"], sale.get("product_id"),
            )
        else:
            _set_stock(gateway, old_product["id"], old_product["stock"] + sale["quantity"])

        try:
            new_product = gateway.get(PRODUCTS, product_id)
            if new_product is None:
                raise NotFoundError("Product not found")
            _require_stock(new_product, qty)
            _set_stock(gateway, new_product["id"], new_product["stock"] - qty)
        except (NotFoundError, InsufficientStockError, GatewayError) as exc:
            _undo_restore(gateway, sale, old_product, exc)
            raise

        patch = _snapshot(new_product, qty)
        details = {
            "sale_id": sale["id"],
            "old_product_id": sale.get("product_id"),
            "new_product_id": new_product["id"],
            "step": "update_sale",
        }
        try:
            updated = gateway.update(SALES, sale["id"], patch)
        except GatewayError as exc:
            _partial_commit(gateway, "Stock adjusted but the sale row was not updated", details, exc)
        if updated is None:
            _partial_commit(gateway, "Stock adjusted but the sale row disappeared", details)

    logger.info(
        "Amended sale %s: product %s x%s -> product %s x%s",
        sale["id"], sale.get("product_id"), sale["quantity"], new_product["id"], qty,
    )
    return updated


def delete_sale(gateway: PersistenceGateway, *, sale_id: Any, actor_role: str | None = None) -> dict:
    """
    Reverse a sale: restore its quantity to the product, then delete the row.

    Restoring first means a crash can leave extra stock with a sale row
    still present (visible and fixable), never a lost stock count.

    If the product no longer exists there is nothing to restore; the row
    is deleted and a WARNING is logged.

    Returns the deleted sale row.
    """
    _authorize(actor_role, "MANAGE_SALES")
    sale_id = normalize_id("sale_id", sale_id)

    with gateway.atomic():
        sale = gateway.get(SALES, sale_id)
        if sale is None:
            raise NotFoundError("Sale not found")

        product = _load_sale_product(gateway, sale)
        restored = False
        if product is None:
            logger.warning(
                "Sale %s references missing product %s; deleting without restoring stock",
                sale["id"], sale.get("product_id"),
            )
        else:
            _set_stock(gateway, product["id"], product["stock"] + sale["quantity"])
            restored = True

        details = {
            "sale_id": sale["id"],
            "product_id": sale.get("product_id"),
            "restored_quantity": sale["quantity"],
            "step": "delete_sale",
        }
        try:
            deleted = gateway.delete(SALES, sale["id"])
        except GatewayError as exc:
            if not restored:
                raise
            _partial_commit(gateway, "Stock restored but the sale row was not deleted", details, exc)
        if not deleted:
            if not restored:
                raise NotFoundError("Sale not found")
            _partial_commit(gateway, "Stock restored but the sale row had already been removed", details)

    logger.info("Deleted sale %s (restored %s units)", sale["id"], sale["quantity"] if restored else 0)
    return sale
