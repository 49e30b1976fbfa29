# backend/salesdesk/routes/reports.py
from flask import Blueprint, jsonify, g, current_app

from ..decorators import require_auth, require_permission
from ..gateways import GatewayError, get_gateway
from ..services import inventory_service, insights_service, reporting_service
from ..services.inventory_service import to_json


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/dashboard")
@require_auth
@require_permission("VIEW_DASHBOARD")
def dashboard():
    """Financial figures are only included for roles with VIEW_FINANCIALS."""
    try:
        stats = reporting_service.dashboard_stats(
            get_gateway(),
            role=g.current_user.role,
            tz=current_app.config.get("REPORT_TIMEZONE"),
        )
    except GatewayError as exc:
        current_app.logger.error("Failed to build dashboard: %s", exc)
        return jsonify({"error": "Data store unavailable"}), 503
    except Exception:
        current_app.logger.exception("Failed to build dashboard")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(stats), 200


@reports_bp.get("/summary")
@require_auth
@require_permission("VIEW_DASHBOARD")
def summary():
    try:
        report = reporting_service.sales_summary(
            get_gateway(),
            role=g.current_user.role,
            tz=current_app.config.get("REPORT_TIMEZONE"),
        )
    except GatewayError as exc:
        current_app.logger.error("Failed to build sales summary: %s", exc)
        return jsonify({"error": "Data store unavailable"}), 503
    except Exception:
        current_app.logger.exception("Failed to build sales summary")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(report), 200


@reports_bp.get("/insights")
@require_auth
@require_permission("VIEW_INSIGHTS")
def insights():
    gateway = get_gateway()
    try:
        products = inventory_service.list_products(gateway)
        sales = inventory_service.list_sales(gateway)
        text = insights_service.generate_sales_insights(
            [to_json(p) for p in products],
            [to_json(s) for s in sales],
            api_key=current_app.config.get("GEMINI_API_KEY"),
            model_name=current_app.config.get("GEMINI_MODEL"),
        )
    except GatewayError as exc:
        current_app.logger.error("Failed to load data for insights: %s", exc)
        return jsonify({"error": "Data store unavailable"}), 503
    except Exception:
        current_app.logger.exception("Failed to build sales insights")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"insights": text}), 200
