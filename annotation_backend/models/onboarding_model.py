# /annotation_backend/models/onboarding_model.py

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..core.languages import normalize_language, normalize_languages


class TestStatus(str, Enum):
    CREATED = "created"
    SUBMITTED = "submitted"


class QuestionDifficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


# --- Question Bank ---

class LanguageProficiencyQuestionBase(BaseModel):
    language: str
    question: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=2)
    correct_answer: int = Field(..., ge=0, description="Index into `options`.")
    explanation: Optional[str] = None
    difficulty: QuestionDifficulty = QuestionDifficulty.INTERMEDIATE
    is_active: bool = True

    @field_validator("language")
    @classmethod
    def _normalize_language(cls, v):
        canonical = normalize_language(v)
        if not canonical:
            raise ValueError("Language must not be blank.")
        return canonical

    @model_validator(mode="after")
    def _answer_in_range(self):
        if self.correct_answer >= len(self.options):
            raise ValueError("correct_answer must index one of the options.")
        return self


class LanguageProficiencyQuestionCreate(LanguageProficiencyQuestionBase):
    pass


class LanguageProficiencyQuestionUpdate(BaseModel):
    """Partial update; range of `correct_answer` is re-checked by the service against the merged options."""
    language: Optional[str] = None
    question: Optional[str] = Field(default=None, min_length=1)
    options: Optional[List[str]] = Field(default=None, min_length=2)
    correct_answer: Optional[int] = Field(default=None, ge=0)
    explanation: Optional[str] = None
    difficulty: Optional[QuestionDifficulty] = None
    is_active: Optional[bool] = None

    @field_validator("language")
    @classmethod
    def _normalize_language(cls, v):
        return normalize_language(v) if v is not None else None


class LanguageProficiencyQuestion(LanguageProficiencyQuestionBase):
    """Admin view of a question, including the answer key."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_by_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class PublicQuestion(BaseModel):
    """A question as shown to a test taker: no answer key, no explanation."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    language: str
    question: str
    options: List[str]
    difficulty: QuestionDifficulty


# --- Onboarding Tests ---

class OnboardingTestCreate(BaseModel):
    language: str

    @field_validator("language")
    @classmethod
    def _normalize_language(cls, v):
        canonical = normalize_language(v)
        if not canonical:
            raise ValueError("Language must not be blank.")
        return canonical


class OnboardingTestAnswer(BaseModel):
    question_id: int
    selected_answer: Optional[int] = Field(default=None, ge=0)


class OnboardingTestSubmit(BaseModel):
    test_id: Optional[int] = None
    answers: List[OnboardingTestAnswer] = Field(default_factory=list)


class OnboardingTest(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    language: str
    session_id: Optional[str] = None
    status: TestStatus
    score: Optional[float] = None
    passed: Optional[bool] = None
    created_at: datetime
    submitted_at: Optional[datetime] = None
    questions: List[PublicQuestion] = Field(default_factory=list)


class LanguageResult(BaseModel):
    language: str
    total_questions: int
    correct_answers: int
    score: float
    passed: bool
    proficiency_level: Optional[str] = None


class OnboardingTestResult(BaseModel):
    test_id: Optional[int] = None
    session_id: Optional[str] = None
    total_questions: int
    correct_answers: int
    score: float
    passed: bool
    pass_threshold: float
    language_results: List[LanguageResult] = Field(default_factory=list)


# --- Proficiency-Question Sessions ---

class UserQuestionAnswer(BaseModel):
    question_id: int
    selected_answer: Optional[int] = Field(default=None, ge=0)
    test_session_id: Optional[str] = None


class ProficiencySubmission(BaseModel):
    test_session_id: str = Field(..., min_length=1)
    answers: List[UserQuestionAnswer]
    languages: List[str] = Field(..., min_length=1)

    @field_validator("languages")
    @classmethod
    def _normalize_languages(cls, v):
        return normalize_languages(v)
