# /annotation_backend/models/sentence_model.py

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.languages import normalize_language


class SentenceBase(BaseModel):
    source_text: str = Field(..., min_length=1, description="The text to be translated or judged.")
    machine_translation: Optional[str] = Field(default=None, description="MT output to be assessed, if any.")
    source_language: str = Field(..., min_length=1)
    target_language: str = Field(..., min_length=1)
    domain: Optional[str] = None

    @field_validator("source_text")
    @classmethod
    def _strip_text(cls, v):
        if not v.strip():
            raise ValueError("source_text must not be blank.")
        return v.strip()

    @field_validator("source_language", "target_language")
    @classmethod
    def _normalize_language(cls, v):
        canonical = normalize_language(v)
        if not canonical:
            raise ValueError("Language must not be blank.")
        return canonical


class SentenceCreate(SentenceBase):
    pass


class Sentence(SentenceBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    is_active: bool
    created_at: datetime


class BulkSentenceFailure(BaseModel):
    index: int
    reason: str


class BulkSentenceResponse(BaseModel):
    created: List[Sentence]
    failed: List[BulkSentenceFailure] = Field(default_factory=list)


class SentenceImportResponse(BaseModel):
    message: str
    imported_count: int
    skipped_count: int
    total_rows: int
    errors: List[str] = Field(default_factory=list)
