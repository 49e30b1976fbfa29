# Overview: Flask API routes for admin operations; parses input and returns JSON responses.

# backend/salesdesk/routes/admin.py
"""
Admin routes for user management.

- VIEW_USERS: list and inspect users
- MANAGE_USERS: create, edit, deactivate and delete users

An admin cannot delete, demote or deactivate their own account.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..services import auth_service, session_service
from ..services.auth_service import PasswordValidationError
from ..validation import ValidationError, ConflictError, NotFoundError
from ..decorators import require_auth, require_permission
from ..permissions import (
    ROLES,
    PermissionCategory,
    get_permission_definition,
    get_permissions_by_category,
    get_role_permissions,
)

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.get("/users")
@require_auth
@require_permission("VIEW_USERS")
def list_users():
    try:
        users = auth_service.list_users(actor_role=g.current_user.role)
        return jsonify({"users": [u.to_dict() for u in users]}), 200
    except Exception:
        current_app.logger.exception("Failed to list users")
        return jsonify({"error": "Internal server error"}), 500


@admin_bp.get("/users/<int:user_id>")
@require_auth
@require_permission("VIEW_USERS")
def get_user(user_id: int):
    try:
        user = auth_service.get_user(user_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to load user %s", user_id)
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"user": user.to_dict()}), 200


@admin_bp.post("/users")
@require_auth
@require_permission("MANAGE_USERS")
def create_user():
    """
    Create a new user.

    Body: name, email, password, role ("admin" or "sales_staff", default sales_staff)
    """
    data = request.get_json(silent=True) or {}

    try:
        user = auth_service.create_user(
            email=data.get("email"),
            name=data.get("name"),
            password=data.get("password"),
            role=data.get("role") or "sales_staff",
            actor_role=g.current_user.role,
        )
    except (ValidationError, PasswordValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to create user")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"user": user.to_dict()}), 201


@admin_bp.put("/users/<int:user_id>")
@require_auth
@require_permission("MANAGE_USERS")
def update_user(user_id: int):
    """
    Edit name, email, role, is_active and optionally password.

    Deactivating a user or changing their password revokes their sessions.
    """
    data = request.get_json(silent=True) or {}

    try:
        user = auth_service.update_user(user_id=user_id, payload=data, actor=g.current_user)
        if data.get("is_active") is False or data.get("password"):
            session_service.revoke_all_user_sessions(user.id)
    except (ValidationError, PasswordValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to update user %s", user_id)
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"user": user.to_dict()}), 200


@admin_bp.delete("/users/<int:user_id>")
@require_auth
@require_permission("MANAGE_USERS")
def delete_user(user_id: int):
    try:
        auth_service.delete_user(user_id=user_id, actor=g.current_user)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to delete user %s", user_id)
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"ok": True}), 200


# =============================================================================
# PERMISSION POLICY
# =============================================================================

@admin_bp.get("/permissions")
@require_auth
@require_permission("VIEW_USERS")
def list_permissions():
    """The role policy table, grouped by category, for the user management UI."""
    try:
        categories = {}
        for category in (PermissionCategory.INVENTORY, PermissionCategory.SALES,
                         PermissionCategory.REPORTS, PermissionCategory.USERS):
            categories[category] = [
                get_permission_definition(perm[0]) for perm in get_permissions_by_category(category)
            ]
        roles = {role: sorted(get_role_permissions(role)) for role in ROLES}
    except Exception:
        current_app.logger.exception("Failed to list permissions")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"categories": categories, "roles": roles}), 200
