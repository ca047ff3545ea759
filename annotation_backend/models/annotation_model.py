# /annotation_backend/models/annotation_model.py

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .sentence_model import Sentence


class AnnotationStatus(str, Enum):
    # DRAFT only ever exists on the client; the engine never persists it.
    DRAFT = "draft"
    SUBMITTED = "submitted"
    EVALUATED = "evaluated"
    ARCHIVED = "archived"
    DELETED = "deleted"


class AnnotationCreate(BaseModel):
    sentence_id: int
    final_translation: str = Field(..., description="The annotator's translation or judgment text.")
    fluency_score: Optional[int] = Field(default=None, ge=1, le=5)
    adequacy_score: Optional[int] = Field(default=None, ge=1, le=5)
    overall_quality: Optional[int] = Field(default=None, ge=1, le=5)
    comments: Optional[str] = None
    time_spent_seconds: Optional[int] = Field(default=None, ge=0)
    voice_recording_url: Optional[str] = None
    voice_recording_duration: Optional[float] = Field(default=None, ge=0)

    @field_validator("final_translation")
    @classmethod
    def _content_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("final_translation must not be empty.")
        return v.strip()


class AnnotationUpdate(BaseModel):
    """
    Partial update. Only the fields present in the request body are applied;
    each one is validated on its own.
    """
    final_translation: Optional[str] = None
    fluency_score: Optional[int] = Field(default=None, ge=1, le=5)
    adequacy_score: Optional[int] = Field(default=None, ge=1, le=5)
    overall_quality: Optional[int] = Field(default=None, ge=1, le=5)
    comments: Optional[str] = None
    time_spent_seconds: Optional[int] = Field(default=None, ge=0)
    voice_recording_url: Optional[str] = None
    voice_recording_duration: Optional[float] = Field(default=None, ge=0)

    @field_validator("final_translation")
    @classmethod
    def _content_not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError("final_translation must not be empty.")
        return v.strip() if v is not None else v


class Annotation(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sentence_id: int
    annotator_id: int
    final_translation: str
    fluency_score: Optional[int] = None
    adequacy_score: Optional[int] = None
    overall_quality: Optional[int] = None
    comments: Optional[str] = None
    time_spent_seconds: Optional[int] = None
    voice_recording_url: Optional[str] = None
    voice_recording_duration: Optional[float] = None
    status: AnnotationStatus
    created_at: datetime
    updated_at: datetime
    sentence: Optional[Sentence] = None


class VoiceUploadResponse(BaseModel):
    voice_recording_url: str
    voice_recording_duration: float
    annotation_id: Optional[int] = None
