# /annotation_backend/models/mt_quality_model.py

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AssessmentStatus(str, Enum):
    PENDING = "pending"
    ASSESSED = "assessed"
    HUMAN_REVIEWED = "human_reviewed"


class ErrorSeverity(str, Enum):
    MINOR = "minor"
    MAJOR = "major"
    CRITICAL = "critical"


# --- Scoring Collaborator Contract ---

class TranslationError(BaseModel):
    type: str = Field(..., description="Error category, e.g. 'mistranslation', 'grammar', 'omission'.")
    severity: ErrorSeverity = ErrorSeverity.MINOR
    description: str = ""

    @field_validator("type")
    @classmethod
    def _normalize_type(cls, v):
        return v.strip().lower().replace(" ", "_") or "other"


class QualityScore(BaseModel):
    """What the automated scorer must return for one sentence. Scores are 0-100."""
    fluency_score: float = Field(..., ge=0, le=100)
    adequacy_score: float = Field(..., ge=0, le=100)
    overall_quality_score: float = Field(..., ge=0, le=100)
    confidence: float = Field(default=0.5, ge=0, le=1)
    explanation: str = ""
    errors: List[TranslationError] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
    model_name: Optional[str] = None


# --- API Contracts ---

class MTQualityCreate(BaseModel):
    sentence_id: int


class BatchAssessRequest(BaseModel):
    sentence_ids: List[int] = Field(..., description="Sentences to assess; duplicates are processed once.")


class MTQualityUpdate(BaseModel):
    human_score: float = Field(..., ge=0, le=100)
    human_feedback: Optional[str] = Field(default=None, max_length=5000)


class MTQualityAssessment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sentence_id: int
    requested_by_id: Optional[int] = None
    status: AssessmentStatus
    fluency_score: Optional[float] = None
    adequacy_score: Optional[float] = None
    overall_quality_score: Optional[float] = None
    confidence: Optional[float] = None
    explanation: Optional[str] = None
    errors: List[TranslationError] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
    model_name: Optional[str] = None
    last_error: Optional[str] = None
    assessed_at: Optional[datetime] = None
    human_score: Optional[float] = None
    human_feedback: Optional[str] = None
    reviewed_by_id: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class BatchFailure(BaseModel):
    sentence_id: int
    reason: str


class BatchAssessResponse(BaseModel):
    """Mixed per-item outcome of a batch; never an all-or-nothing failure."""
    succeeded: List[MTQualityAssessment] = Field(default_factory=list)
    failed: List[BatchFailure] = Field(default_factory=list)


class AssessmentLookup(BaseModel):
    """Distinguishes 'this sentence has no assessment yet' from a failed request."""
    sentence_id: int
    found: bool
    assessment: Optional[MTQualityAssessment] = None
