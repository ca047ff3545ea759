# /annotation_backend/models/evaluation_model.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class EvaluationCreate(BaseModel):
    annotation_id: int
    score: float = Field(..., ge=1, le=5, description="Overall quality of the annotation.")
    accuracy_score: Optional[int] = Field(default=None, ge=1, le=5)
    fluency_score: Optional[int] = Field(default=None, ge=1, le=5)
    feedback: Optional[str] = Field(default=None, max_length=5000)
    time_spent_seconds: Optional[int] = Field(default=None, ge=0)


class EvaluationUpdate(BaseModel):
    """Partial update; only fields sent by the evaluator are applied."""
    score: Optional[float] = Field(default=None, ge=1, le=5)
    accuracy_score: Optional[int] = Field(default=None, ge=1, le=5)
    fluency_score: Optional[int] = Field(default=None, ge=1, le=5)
    feedback: Optional[str] = Field(default=None, max_length=5000)
    time_spent_seconds: Optional[int] = Field(default=None, ge=0)


class Evaluation(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    annotation_id: int
    evaluator_id: int
    score: float
    accuracy_score: Optional[int] = None
    fluency_score: Optional[int] = None
    feedback: Optional[str] = None
    time_spent_seconds: Optional[int] = None
    created_at: datetime
    updated_at: datetime
