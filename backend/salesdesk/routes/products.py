# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/salesdesk/routes/products.py
"""
Product catalogue routes.

- Read operations require VIEW_PRODUCTS permission
- Write operations require MANAGE_PRODUCTS permission

Setting stock through PUT is a manual correction, not a sale.
"""
from flask import Blueprint, request, jsonify, g, current_app

from ..gateways import GatewayError, get_gateway
from ..services import inventory_service
from ..services.inventory_service import to_json
from ..validation import ValidationError, NotFoundError
from ..decorators import require_auth, require_permission

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _gateway_failed(e: GatewayError, action: str):
    current_app.logger.error("Failed to %s: %s", action, e)
    return jsonify({"error": "Data store unavailable"}), 503


@products_bp.get("")
@require_auth
@require_permission("VIEW_PRODUCTS")
def list_products():
    try:
        products = inventory_service.list_products(get_gateway())
    except GatewayError as e:
        return _gateway_failed(e, "list products")
    except Exception:
        current_app.logger.exception("Failed to list products")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"items": [to_json(p) for p in products]}), 200


@products_bp.get("/<int:product_id>")
@require_auth
@require_permission("VIEW_PRODUCTS")
def get_product_route(product_id: int):
    try:
        product = inventory_service.get_product(get_gateway(), product_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except GatewayError as e:
        return _gateway_failed(e, "load product")
    except Exception:
        current_app.logger.exception("Failed to load product")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(to_json(product)), 200


@products_bp.post("")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def create_product_route():
    """
    Create a new product.

    Body: name, price_cents, cost_cents, stock (all required).
    """
    payload = request.get_json(silent=True) or {}

    try:
        created = inventory_service.create_product(
            get_gateway(),
            payload=payload,
            actor_role=g.current_user.role,
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except GatewayError as e:
        return _gateway_failed(e, "create product")
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(to_json(created)), 201


@products_bp.put("/<int:product_id>")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def update_product_route(product_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        updated = inventory_service.update_product(
            get_gateway(),
            product_id=product_id,
            payload=payload,
            actor_role=g.current_user.role,
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except GatewayError as e:
        return _gateway_failed(e, "update product")
    except Exception:
        current_app.logger.exception("Failed to update product")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(to_json(updated)), 200


@products_bp.delete("/<int:product_id>")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def delete_product_route(product_id: int):
    """Past sales of the product keep their snapshot."""
    try:
        inventory_service.delete_product(
            get_gateway(),
            product_id=product_id,
            actor_role=g.current_user.role,
        )
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except GatewayError as e:
        return _gateway_failed(e, "delete product")
    except Exception:
        current_app.logger.exception("Failed to delete product")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"ok": True}), 200
