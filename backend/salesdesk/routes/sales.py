# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/salesdesk/routes/sales.py
"""Sales API routes with permission enforcement"""

from flask import Blueprint, request, jsonify, g, current_app

from ..gateways import GatewayError, get_gateway
from ..services import inventory_service, sales_service
from ..services.inventory_service import to_json
from ..services.sales_service import SaleError, InsufficientStockError, ConsistencyError
from ..validation import ValidationError, NotFoundError
from ..decorators import require_auth, require_permission


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


def _sale_error_response(e: SaleError):
    if isinstance(e, InsufficientStockError):
        return jsonify({"error": str(e), "details": e.details}), 409
    if isinstance(e, ConsistencyError):
        # Already logged at ERROR by the service
        return jsonify({
            "error": str(e),
            "details": e.details,
            "message": "Stock and sales are out of step and need manual reconciliation",
        }), 500
    return jsonify({"error": str(e), "details": e.details}), 400


@sales_bp.get("")
@require_auth
@require_permission("VIEW_SALES")
def list_sales_route():
    """Newest first. Query params: limit (optional)."""
    try:
        sales = inventory_service.list_sales(get_gateway(), limit=request.args.get("limit"))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except GatewayError as e:
        current_app.logger.error("Failed to list sales: %s", e)
        return jsonify({"error": "Data store unavailable"}), 503
    except Exception:
        current_app.logger.exception("Failed to list sales")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"items": [to_json(s) for s in sales]}), 200


@sales_bp.get("/<int:sale_id>")
@require_auth
@require_permission("VIEW_SALES")
def get_sale_route(sale_id: int):
    try:
        sale = inventory_service.get_sale(get_gateway(), sale_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except GatewayError as e:
        current_app.logger.error("Failed to load sale %s: %s", sale_id, e)
        return jsonify({"error": "Data store unavailable"}), 503
    except Exception:
        current_app.logger.exception("Failed to load sale %s", sale_id)
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(to_json(sale)), 200


@sales_bp.post("")
@require_auth
@require_permission("CREATE_SALE")
def record_sale_route():
    """
    Record a sale and decrement the product's stock.

    Requires: CREATE_SALE permission
    Available to: admin, sales_staff
    """
    data = request.get_json(silent=True) or {}
    try:
        sale = sales_service.record_sale(
            get_gateway(),
            product_id=data.get("product_id"),
            quantity=data.get("quantity"),
            user_id=g.current_user.id,
            actor_role=g.current_user.role,
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except SaleError as e:
        return _sale_error_response(e)
    except GatewayError as e:
        current_app.logger.error("Failed to record sale: %s", e)
        return jsonify({"error": "Data store unavailable"}), 503
    except Exception:
        current_app.logger.exception("Failed to record sale")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(to_json(sale)), 201


@sales_bp.put("/<int:sale_id>")
@require_auth
@require_permission("MANAGE_SALES")
def update_sale_route(sale_id: int):
    """
    Amend a sale's product and quantity.

    Requires: MANAGE_SALES permission
    Available to: admin
    """
    data = request.get_json(silent=True) or {}
    try:
        sale = sales_service.update_sale(
            get_gateway(),
            sale_id=sale_id,
            product_id=data.get("product_id"),
            quantity=data.get("quantity"),
            actor_role=g.current_user.role,
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except SaleError as e:
        return _sale_error_response(e)
    except GatewayError as e:
        current_app.logger.error("Failed to amend sale %s: %s", sale_id, e)
        return jsonify({"error": "Data store unavailable"}), 503
    except Exception:
        current_app.logger.exception("Failed to amend sale %s", sale_id)
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(to_json(sale)), 200


@sales_bp.delete("/<int:sale_id>")
@require_auth
@require_permission("MANAGE_SALES")
def delete_sale_route(sale_id: int):
    """
    Reverse a sale: restore stock, then delete the row.

    Requires: MANAGE_SALES permission
    Available to: admin
    """
    try:
        sale = sales_service.delete_sale(
            get_gateway(),
            sale_id=sale_id,
            actor_role=g.current_user.role,
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except SaleError as e:
        return _sale_error_response(e)
    except GatewayError as e:
        current_app.logger.error("Failed to delete sale %s: %s", sale_id, e)
        return jsonify({"error": "Data store unavailable"}), 503
    except Exception:
        current_app.logger.exception("Failed to delete sale %s", sale_id)
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"ok": True, "sale": to_json(sale)}), 200
