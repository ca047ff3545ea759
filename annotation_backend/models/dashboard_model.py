# /annotation_backend/models/dashboard_model.py

# Data contracts for the read-only aggregates shown on the annotator,
# evaluator and admin dashboards. Rates are fractions in [0, 1] and every
# count or average falls back to 0 when there is nothing to aggregate.

from typing import Dict

from pydantic import BaseModel, Field


class UserStats(BaseModel):
    total_annotations: int = Field(..., description="Non-deleted annotations owned by the user.")
    evaluated_annotations: int
    average_evaluation_score: float = Field(..., description="Mean peer score received; 0 when none.")
    eligible_sentences: int = Field(..., description="Active sentences in language pairs the user may annotate.")
    completion_rate: float = Field(..., description="total_annotations / eligible_sentences, capped at 1.", examples=[0.42])


class EvaluatorStats(BaseModel):
    total_evaluations: int
    evaluations_today: int
    average_score_given: float
    pending_evaluations: int
    assessments_requested: int
    human_reviews: int
    average_reviewed_quality: float = Field(..., description="Mean automated quality of assessments this user reviewed.")


class AdminStats(BaseModel):
    total_users: int
    active_users: int
    evaluators: int
    admins: int
    onboarded_users: int
    total_sentences: int
    active_sentences: int
    total_annotations: int
    annotations_by_status: Dict[str, int]
    total_evaluations: int
    average_evaluation_score: float
    assessments_by_status: Dict[str, int]
    completion_rate: float = Field(..., description="Share of active sentences with at least one live annotation.")


# --- Analytics (chart-ready series) ---

class UserGrowthPoint(BaseModel):
    month: str
    users: int
    annotations: int


class LanguageActivityPoint(BaseModel):
    language: str
    sentences: int
    annotations: int


class DailyActivityPoint(BaseModel):
    date: str
    annotations: int
    evaluations: int


class RoleCount(BaseModel):
    role: str
    count: int
    color: str


class ErrorTypeCount(BaseModel):
    type: str
    count: int
    color: str
    description: str


class QualityMetrics(BaseModel):
    averageQuality: float
    averageFluency: float
    averageAdequacy: float
    completionRate: float
