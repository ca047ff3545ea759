# /annotation_backend/db/models/user_models.py

"""
SQLAlchemy model for platform users: annotators, evaluators and admins.

Users are never physically deleted while annotations, evaluations or
assessments reference them; admins deactivate them instead.
"""

from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, String
from sqlalchemy.orm import relationship, validates

from ...core.languages import normalize_language, normalize_languages
from ..base_class import Base, utcnow


class User(Base):
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    username = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)

    # Role flags.
    is_active = Column(Boolean, nullable=False, default=True)
    is_admin = Column(Boolean, nullable=False, default=False)
    is_evaluator = Column(Boolean, nullable=False, default=False)

    # Declared languages (canonical names) and the proficiency level reached
    # per language through onboarding, e.g. {"French": "advanced"}.
    languages = Column(JSON, nullable=False, default=list)
    preferred_language = Column(String, nullable=True)
    proficiency_levels = Column(JSON, nullable=False, default=dict)

    skip_onboarding = Column(Boolean, nullable=False, default=False)
    onboarding_completed = Column(Boolean, nullable=False, default=False)
    guidelines_seen = Column(Boolean, nullable=False, default=False)
    deactivation_reason = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    annotations = relationship("Annotation", back_populates="annotator", foreign_keys="Annotation.annotator_id")
    evaluations = relationship("Evaluation", back_populates="evaluator")
    onboarding_tests = relationship("OnboardingTest", back_populates="user", cascade="all, delete-orphan")

    @validates("languages")
    def _normalize_languages(self, key, value):
        return normalize_languages(value)

    @validates("preferred_language")
    def _normalize_preferred_language(self, key, value):
        return normalize_language(value) or None
