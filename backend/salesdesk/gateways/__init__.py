# Overview: Gateway selection and access for the running Flask app.

from flask import Flask, current_app

from .base import GatewayError, PersistenceGateway, PRODUCTS, SALES
from .memory import MemoryGateway
from .sqlalchemy_gateway import SqlAlchemyGateway

EXTENSION_KEY = "salesdesk.gateway"

BACKENDS = ("sqlalchemy", "supabase", "memory")


def build_gateway(app: Flask) -> PersistenceGateway:
    backend = (app.config.get("PERSISTENCE_BACKEND") or "sqlalchemy").lower()
    if backend == "sqlalchemy":
        return SqlAlchemyGateway()
    if backend == "memory":
        return MemoryGateway()
    if backend == "supabase":
        from .supabase_gateway import SupabaseGateway

        return SupabaseGateway.from_credentials(
            app.config.get("SUPABASE_URL"),
            app.config.get("SUPABASE_KEY"),
        )
    raise RuntimeError(f"PERSISTENCE_BACKEND must be one of {', '.join(BACKENDS)}, got {backend!r}")


def init_gateway(app: Flask, gateway: PersistenceGateway | None = None) -> PersistenceGateway:
    gateway = gateway or build_gateway(app)
    app.extensions[EXTENSION_KEY] = gateway
    app.logger.info("Persistence gateway: %s", type(gateway).__name__)
    return gateway


def get_gateway() -> PersistenceGateway:
    return current_app.extensions[EXTENSION_KEY]


__all__ = [
    "GatewayError",
    "PersistenceGateway",
    "MemoryGateway",
    "SqlAlchemyGateway",
    "PRODUCTS",
    "SALES",
    "build_gateway",
    "init_gateway",
    "get_gateway",
]
