# Overview: Service-layer operations for users and passwords; encapsulates business logic and database work.

"""
Authentication and user management

- Passwords hashed with bcrypt (cost factor 12), minimum 6 characters
- Login is by e-mail (stored lowercased)
- Only admins manage users; an admin cannot delete or demote themselves
- Session tokens are handled in session_service.py
"""

import logging

import bcrypt
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import User
from ..permissions import ROLES, ROLE_ADMIN, require_role_permission
from ..validation import ConflictError, NotFoundError, ValidationError
from salesdesk.time_utils import utcnow

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class PasswordValidationError(Exception):
    """Raised when a password is too short or its confirmation does not match."""
    pass


def validate_password(password: str | None, confirm_password: str | None = None) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if confirm_password is not None and password != confirm_password:
        raise PasswordValidationError("Passwords do not match")


def hash_password(password: str) -> str:
    validate_password(password)
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=12))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe via bcrypt.checkpw. A malformed stored hash never matches."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def _normalize_email(email) -> str:
    if not isinstance(email, str) or "@" not in email.strip():
        raise ValidationError("A valid email is required")
    return email.strip().lower()


def _clean_name(name) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("name is required")
    name = name.strip()
    if len(name) > 120:
        raise ValidationError("name exceeds max length 120")
    return name


def _clean_role(role) -> str:
    if role not in ROLES:
        raise ValidationError(f"role must be one of: {', '.join(ROLES)}")
    return role


def _email_taken(email: str, exclude_user_id: int | None = None) -> bool:
    query = db.session.query(User).filter(User.email == email)
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    return db.session.query(query.exists()).scalar()


def _commit_user(user: User) -> User:
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("A user with this email already exists")
    return user


def authenticate(email: str, password: str) -> User | None:
    """
    Returns the active user for valid credentials, None otherwise.
    Updates last_login_at on success.
    """
    if not email or not password:
        return None
    user = db.session.query(User).filter(
        User.email == email.strip().lower(),
        User.is_active.is_(True),
    ).first()
    if not user or not verify_password(password, user.password_hash):
        return None

    user.last_login_at = utcnow()
    db.session.commit()
    return user


def list_users(*, actor_role: str | None = None) -> list[User]:
    if actor_role is not None:
        require_role_permission(actor_role, "VIEW_USERS")
    return db.session.query(User).order_by(User.name.asc(), User.id.asc()).all()


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def create_user(
    *,
    email: str,
    name: str,
    password: str,
    role: str = "sales_staff",
    actor_role: str | None = None,
) -> User:
    """
    Raises:
        ValidationError: malformed email, name or role
        PasswordValidationError: password too short
        ConflictError: email already in use
    """
    if actor_role is not None:
        require_role_permission(actor_role, "MANAGE_USERS")

    email = _normalize_email(email)
    user = User(
        email=email,
        name=_clean_name(name),
        role=_clean_role(role),
        password_hash=hash_password(password),
        is_active=True,
    )
    if _email_taken(email):
        raise ConflictError("A user with this email already exists")

    db.session.add(user)
    _commit_user(user)
    logger.info("Created user %s (%s)", user.id, user.role)
    return user


def update_user(
    *,
    user_id: int,
    payload: dict,
    actor: User | None = None,
) -> User:
    """
    Admin edit of name, email, role, is_active and optionally password.

    An admin cannot demote or deactivate their own account.
    """
    if actor is not None:
        require_role_permission(actor.role, "MANAGE_USERS")

    allowed = {"name", "email", "role", "is_active", "password"}
    unknown = sorted(set(payload or {}) - allowed)
    if unknown:
        raise ValidationError(f"Field not allowed: {unknown[0]}")
    if not payload:
        raise ValidationError("No fields to update")

    user = get_user(user_id)
    is_self = actor is not None and actor.id == user.id

    if "name" in payload:
        user.name = _clean_name(payload["name"])

    if "email" in payload:
        email = _normalize_email(payload["email"])
        if _email_taken(email, exclude_user_id=user.id):
            raise ConflictError("A user with this email already exists")
        user.email = email

    if "role" in payload:
        role = _clean_role(payload["role"])
        if is_self and user.role == ROLE_ADMIN and role != ROLE_ADMIN:
            raise ConflictError("You cannot remove your own admin role")
        user.role = role

    if "is_active" in payload:
        if not isinstance(payload["is_active"], bool):
            raise ValidationError("is_active must be true or false")
        if is_self and not payload["is_active"]:
            raise ConflictError("You cannot deactivate your own account")
        user.is_active = payload["is_active"]

    if payload.get("password"):
        user.password_hash = hash_password(payload["password"])

    return _commit_user(user)


def delete_user(*, user_id: int, actor: User | None = None) -> None:
    """Sales keep their rows; their user_id is cleared by the foreign key."""
    if actor is not None:
        require_role_permission(actor.role, "MANAGE_USERS")
        if actor.id == user_id:
            raise ConflictError("You cannot delete your own account")

    user = get_user(user_id)
    db.session.delete(user)
    db.session.commit()
    logger.info("Deleted user %s", user_id)


def change_password(user: User, password: str, confirm_password: str) -> None:
    validate_password(password, confirm_password)
    user.password_hash = hash_password(password)
    db.session.commit()
