# /annotation_backend/db/models/onboarding_models.py

"""
SQLAlchemy models backing the proficiency gate: the question bank, the
per-user onboarding tests built from it, and the append-only answers.
"""

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship, validates

from ...core.languages import normalize_language
from ..base_class import Base, utcnow


class LanguageProficiencyQuestion(Base):
    __tablename__ = "language_proficiency_questions"

    id = Column(Integer, primary_key=True, index=True)
    language = Column(String, nullable=False, index=True)
    question = Column(Text, nullable=False)
    options = Column(JSON, nullable=False)
    # Index into `options`.
    correct_answer = Column(Integer, nullable=False)
    explanation = Column(Text, nullable=True)
    difficulty = Column(String, nullable=False, default="intermediate")
    is_active = Column(Boolean, nullable=False, default=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    @validates("language")
    def _normalize_language(self, key, value):
        return normalize_language(value)


class OnboardingTest(Base):
    """
    One user's test for one language. Moves once from 'created' to
    'submitted'; after that its score and answers never change.
    """
    __tablename__ = "onboarding_tests"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    language = Column(String, nullable=False, index=True)
    # Groups the per-language tests recorded by one proficiency-question session.
    session_id = Column(String, nullable=True)
    status = Column(String, nullable=False, default="created")
    question_ids = Column(JSON, nullable=False, default=list)
    score = Column(Float, nullable=True)
    passed = Column(Boolean, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    submitted_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="onboarding_tests")
    answers = relationship("UserQuestionAnswer", back_populates="test", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("user_id", "session_id", "language", name="uq_onboarding_tests_user_session_language"),
    )

    @validates("language")
    def _normalize_language(self, key, value):
        return normalize_language(value)


class UserQuestionAnswer(Base):
    __tablename__ = "user_question_answers"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    test_id = Column(Integer, ForeignKey("onboarding_tests.id"), nullable=False, index=True)
    question_id = Column(Integer, ForeignKey("language_proficiency_questions.id"), nullable=False)
    selected_answer = Column(Integer, nullable=True)
    is_correct = Column(Boolean, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    test = relationship("OnboardingTest", back_populates="answers")
