# /annotation_backend/routers/auth_router.py

"""
Authentication and self-service endpoints:
- `/register` and `/login` issue bearer tokens,
- `/me`, `/me/guidelines-seen` and `/me/profile` read and patch the caller,
- `/me/stats` returns the caller's annotation statistics.
"""

from fastapi import APIRouter, Depends, status

from ..core.deps import RequestContext, get_current_active_user, get_request_context
from ..db.models.user_models import User as UserModel
from ..models import dashboard_model, user_model
from ..services import database_service, stats_service, user_service

router = APIRouter()


@router.post("/register", response_model=user_model.Token, status_code=status.HTTP_201_CREATED, summary="Register a New Account")
def register_user(
    user_in: user_model.UserCreate,
    db: database_service.DatabaseService = Depends(database_service.get_db_service),
):
    return user_service.register(user_in, db)


@router.post("/login", response_model=user_model.Token, summary="Log In with Email or Username")
def login(
    credentials: user_model.LoginRequest,
    db: database_service.DatabaseService = Depends(database_service.get_db_service),
):
    return user_service.authenticate(credentials, db)


@router.get("/me", response_model=user_model.User, summary="Get the Current User")
def read_current_user(current_user: UserModel = Depends(get_current_active_user)):
    return current_user


@router.put("/me/guidelines-seen", response_model=user_model.User, summary="Mark the Annotation Guidelines as Seen")
def mark_guidelines_seen(ctx: RequestContext = Depends(get_request_context)):
    return user_service.mark_guidelines_seen(ctx.user, ctx.db)


@router.put("/me/profile", response_model=user_model.User, summary="Update the Current User's Profile")
def update_profile(profile: user_model.ProfileUpdate, ctx: RequestContext = Depends(get_request_context)):
    return user_service.update_profile(ctx.user, profile, ctx.db)


@router.get("/me/stats", response_model=dashboard_model.UserStats, summary="Get the Current User's Annotation Stats")
def my_stats(ctx: RequestContext = Depends(get_request_context)):
    return stats_service.get_user_stats(ctx.user, ctx.db)
