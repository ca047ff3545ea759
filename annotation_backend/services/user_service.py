# /annotation_backend/services/user_service.py

"""
Registration, login and user administration.

Email and username are unique (case-insensitively at lookup time, and by
column constraint at write time). Users with annotation, evaluation or
assessment history are never hard-deleted; admins deactivate them instead.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError

from ..core import security
from ..core.errors import AuthenticationError, ConflictError, ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from ..db.base_class import utcnow
from ..models import user_model
from .database_service import DatabaseService

logger = logging.getLogger(__name__)


def _ensure_unique(db: DatabaseService, email: Optional[str], username: Optional[str], exclude_id: Optional[int] = None):
    if email:
        existing = db.get_user_by_email(email)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError("Email already registered.")
    if username:
        existing = db.get_user_by_username(username)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError("Username already taken.")


def _create(payload: user_model.UserCreate, db: DatabaseService, **flags):
    _ensure_unique(db, payload.email, payload.username)
    record = payload.model_dump(exclude={"password"})
    record["email"] = record["email"].lower()
    record["username"] = record["username"].strip()
    record["hashed_password"] = security.hash_password(payload.password)
    record.update(flags)
    try:
        return db.add_user(record)
    except IntegrityError:
        raise ConflictError("Email or username already registered.")


# --- Authentication ---

def register(payload: user_model.UserCreate, db: DatabaseService) -> user_model.Token:
    user = _create(payload, db)
    logger.info("Registered user %s (%s)", user.id, user.username)
    return user_model.Token(
        access_token=security.create_access_token(user.id),
        user=user_model.User.model_validate(user),
    )


def authenticate(login: user_model.LoginRequest, db: DatabaseService) -> user_model.Token:
    """
    Verifies credentials and issues a token. Unknown users and wrong passwords
    produce the same error so account names are not revealed.
    """
    identifier = login.login_name()
    if not identifier:
        raise ValidationError("An email or username is required.")
    user = db.get_user_by_login(identifier)
    if user is None or not security.verify_password(login.password, user.hashed_password):
        logger.info("Failed login for '%s'", identifier)
        raise AuthenticationError("Incorrect email/username or password.")
    if not user.is_active:
        raise ForbiddenError("This account has been deactivated.")
    user = db.update_user(user, {"last_login_at": utcnow()})
    return user_model.Token(
        access_token=security.create_access_token(user.id),
        user=user_model.User.model_validate(user),
    )


# --- Self-Service ---

def mark_guidelines_seen(user, db: DatabaseService):
    return db.update_user(user, {"guidelines_seen": True})


def update_profile(user, patch: user_model.ProfileUpdate, db: DatabaseService):
    return db.update_user(user, patch.model_dump(exclude_unset=True))


# --- Administration ---

def list_users(db: DatabaseService, skip: int = 0, limit: int = 100, role: Optional[str] = None, active: Optional[bool] = None, search: Optional[str] = None):
    return db.list_users(skip, limit, role, active, search)


def get_user(user_id: int, db: DatabaseService):
    user = db.get_user_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found.")
    return user


def create_user(admin, payload: user_model.AdminUserCreate, db: DatabaseService):
    flags = {
        "is_active": payload.is_active,
        "is_admin": payload.is_admin,
        "is_evaluator": payload.is_evaluator,
        "skip_onboarding": payload.skip_onboarding,
    }
    base = user_model.UserCreate(**payload.model_dump(include=set(user_model.UserCreate.model_fields)))
    user = _create(base, db, **flags)
    logger.info("Admin %s created user %s (%s)", admin.id, user.id, user.username)
    return user


def update_user(user_id: int, patch: user_model.AdminUserUpdate, db: DatabaseService):
    user = get_user(user_id, db)
    changes = patch.model_dump(exclude_unset=True)
    if changes.get("email"):
        changes["email"] = changes["email"].lower()
    for field in ("email", "username", "is_active", "is_evaluator", "skip_onboarding"):
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be cleared.")
    _ensure_unique(db, changes.get("email"), changes.get("username"), exclude_id=user.id)
    if changes.get("is_active") is True:
        changes["deactivation_reason"] = None
    try:
        return db.update_user(user, changes)
    except IntegrityError:
        raise ConflictError("Email or username already registered.")


def deactivate_user(admin, user_id: int, request: user_model.DeactivateRequest, db: DatabaseService):
    user = get_user(user_id, db)
    if user.id == admin.id:
        raise ValidationError("You cannot deactivate your own account.")
    user = db.update_user(user, {"is_active": False, "deactivation_reason": request.reason})
    logger.info("Admin %s deactivated user %s: %s", admin.id, user.id, request.reason)
    return user


def reset_password(admin, user_id: int, request: user_model.PasswordResetRequest, db: DatabaseService) -> str:
    user = get_user(user_id, db)
    db.update_user(user, {"hashed_password": security.hash_password(request.new_password)})
    logger.info("Admin %s reset the password of user %s", admin.id, user.id)
    return f"Password for {user.username} has been reset."


def delete_user(admin, user_id: int, db: DatabaseService) -> str:
    """Hard-deletes a user who has no history. Anyone with history must be deactivated instead."""
    user = get_user(user_id, db)
    if user.id == admin.id:
        raise ValidationError("You cannot delete your own account.")
    dependencies = db.count_user_dependencies(user.id)
    referenced = {name: count for name, count in dependencies.items() if count}
    if referenced:
        summary = ", ".join(f"{count} {name}" for name, count in referenced.items())
        raise InvalidStateError(f"User {user.username} still has history ({summary}); deactivate the account instead.")
    username = user.username
    db.delete_user(user)
    logger.info("Admin %s deleted user %s (%s)", admin.id, user_id, username)
    return f"User {username} deleted."


def toggle_evaluator(admin, user_id: int, db: DatabaseService):
    user = get_user(user_id, db)
    user = db.update_user(user, {"is_evaluator": not user.is_evaluator})
    logger.info("Admin %s set is_evaluator=%s for user %s", admin.id, user.is_evaluator, user.id)
    return user
