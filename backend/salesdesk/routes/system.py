# backend/salesdesk/routes/system.py
"""
System health endpoint.

Reports database and persistence gateway reachability for deployment
debugging. Public: no authentication.
"""

import time
from flask import Blueprint, current_app
from sqlalchemy import text

from ..extensions import db
from ..gateways import PRODUCTS, get_gateway

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """Users and sessions always live in the SQL database."""
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.time() - start_time) * 1000
        return {"status": "healthy", "latency_ms": round(elapsed_ms, 2)}
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


def check_gateway_health() -> dict:
    start_time = time.time()
    gateway = get_gateway()
    try:
        gateway.select(PRODUCTS, limit=1)
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "backend": type(gateway).__name__,
            "latency_ms": round(elapsed_ms, 2),
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Persistence gateway health check failed")
        return {
            "status": "unhealthy",
            "backend": type(gateway).__name__,
            "latency_ms": round(elapsed_ms, 2),
            "error": "Gateway error",
        }


@system_bp.get("/health")
def health():
    checks = {
        "database": check_database_health(),
        "gateway": check_gateway_health(),
    }
    healthy = all(c["status"] == "healthy" for c in checks.values())
    return {"status": "healthy" if healthy else "unhealthy", "checks": checks}, (200 if healthy else 503)
