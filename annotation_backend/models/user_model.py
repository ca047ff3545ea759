# /annotation_backend/models/user_model.py

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from ..core.languages import normalize_language, normalize_languages


class UserRole(str, Enum):
    ADMIN = "admin"
    EVALUATOR = "evaluator"
    ANNOTATOR = "annotator"


# --- Auth Contracts ---

class UserCreate(BaseModel):
    """Self-registration payload."""
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=8)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    languages: List[str] = Field(default_factory=list)
    preferred_language: Optional[str] = None

    @field_validator("languages")
    @classmethod
    def _normalize_languages(cls, v):
        return normalize_languages(v)

    @field_validator("preferred_language")
    @classmethod
    def _normalize_preferred(cls, v):
        return normalize_language(v) or None


class LoginRequest(BaseModel):
    """Either the email or the username goes into `identifier`; `email` is accepted as an alias."""
    identifier: Optional[str] = None
    email: Optional[str] = None
    username: Optional[str] = None
    password: str

    def login_name(self) -> Optional[str]:
        return self.identifier or self.email or self.username


class User(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_active: bool
    is_admin: bool
    is_evaluator: bool
    languages: List[str] = Field(default_factory=list)
    preferred_language: Optional[str] = None
    proficiency_levels: Dict[str, str] = Field(default_factory=dict)
    skip_onboarding: bool
    onboarding_completed: bool
    guidelines_seen: bool
    created_at: datetime
    last_login_at: Optional[datetime] = None


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: User


class ProfileUpdate(BaseModel):
    """Partial update of the caller's own profile. Only fields that are sent are applied."""
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    preferred_language: Optional[str] = None
    languages: Optional[List[str]] = None

    @field_validator("languages")
    @classmethod
    def _normalize_languages(cls, v):
        return normalize_languages(v) if v is not None else None

    @field_validator("preferred_language")
    @classmethod
    def _normalize_preferred(cls, v):
        return normalize_language(v) if v is not None else None


# --- Admin Contracts ---

class AdminUserCreate(UserCreate):
    is_active: bool = True
    is_admin: bool = False
    is_evaluator: bool = False
    skip_onboarding: bool = False


class AdminUserUpdate(BaseModel):
    """Admin-side partial update of any user."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    username: Optional[str] = Field(default=None, min_length=3, max_length=50)
    is_active: Optional[bool] = None
    is_evaluator: Optional[bool] = None
    skip_onboarding: Optional[bool] = None
    languages: Optional[List[str]] = None

    @field_validator("languages")
    @classmethod
    def _normalize_languages(cls, v):
        return normalize_languages(v) if v is not None else None


class DeactivateRequest(BaseModel):
    reason: str = Field(default="Admin deactivation", max_length=500)
    notify_user: bool = False


class PasswordResetRequest(BaseModel):
    new_password: str = Field(..., min_length=8)
    force_change: bool = True
    notify_user: bool = False


class MessageResponse(BaseModel):
    message: str
