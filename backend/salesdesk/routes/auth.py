# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/salesdesk/routes/auth.py
"""
Authentication API routes

- Login by e-mail and password, returns an opaque bearer token
- Self-registration is not offered; admins create users
- Password change revokes the caller's other sessions
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services import session_service
from ..services.auth_service import PasswordValidationError
from ..permissions import get_role_permissions
from ..decorators import require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _user_payload(user) -> dict:
    return {
        "user": user.to_dict(),
        "permissions": sorted(get_role_permissions(user.role)),
    }


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Token must be included in the Authorization header for protected routes.
    """
    try:
        data = request.get_json(silent=True) or {}
        email = data.get("email")
        password = data.get("password")

        if not all([email, password]):
            return jsonify({"error": "email and password required"}), 400

        user = auth_service.authenticate(email, password)
        if not user:
            return jsonify({"error": "Invalid credentials"}), 401

        session, token = session_service.create_session(user.id)

        body = _user_payload(user)
        body.update({
            "token": token,
            "session": session.to_dict(),
            "message": "Login successful",
        })
        return jsonify(body), 200

    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
@require_auth
def logout_route():
    try:
        session_service.revoke_session(g.session_token)
    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"message": "Logged out"}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    try:
        return jsonify(_user_payload(g.current_user)), 200
    except Exception:
        current_app.logger.exception("Failed to load current user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/password")
@require_auth
def change_password_route():
    """Change own password. Other sessions of the user are revoked."""
    data = request.get_json(silent=True) or {}
    try:
        auth_service.change_password(
            g.current_user,
            data.get("password"),
            data.get("confirm_password") or "",
        )
        revoked = session_service.revoke_all_user_sessions(g.current_user.id, keep_token=g.session_token)
    except PasswordValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to change password")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"message": "Password updated", "revoked_sessions": revoked}), 200
