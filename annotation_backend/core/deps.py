# /annotation_backend/core/deps.py

"""
Request-scoped authentication dependencies.

The caller's identity is resolved once per request from the bearer token and
handed to the routers explicitly, either as the `User` row or bundled with
the database facade in a `RequestContext`.
"""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from ..db.models.user_models import User
from ..services.database_service import DatabaseService, get_db_service
from . import security

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/login")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: DatabaseService = Depends(get_db_service),
) -> User:
    subject = security.decode_access_token(token)
    if subject is None:
        raise _unauthorized("Could not validate credentials")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise _unauthorized("Could not validate credentials")
    user = db.get_user_by_id(user_id)
    if user is None:
        raise _unauthorized("Could not validate credentials")
    return user


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")
    return current_user


def require_admin(current_user: User = Depends(get_current_active_user)) -> User:
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin privileges required")
    return current_user


def require_evaluator(current_user: User = Depends(get_current_active_user)) -> User:
    if not (current_user.is_evaluator or current_user.is_admin):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Evaluator privileges required")
    return current_user


@dataclass
class RequestContext:
    """The authenticated caller and the request's database facade."""
    user: User
    db: DatabaseService


def get_request_context(
    current_user: User = Depends(get_current_active_user),
    db: DatabaseService = Depends(get_db_service),
) -> RequestContext:
    return RequestContext(user=current_user, db=db)
