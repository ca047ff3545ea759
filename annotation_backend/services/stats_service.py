# /annotation_backend/services/stats_service.py

"""
Read-only aggregates for the annotator, evaluator and admin dashboards, and
the chart-ready analytics series.

All numbers are derived on the fly from plain row dictionaries loaded into
pandas DataFrames. Nothing here takes a lock or writes: a slightly stale
count under heavy write load is acceptable. Every average and rate falls back
to 0 when there is nothing to divide by.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List

import pandas as pd

from ..models import dashboard_model
from .database_service import DatabaseService
from .proficiency_service import eligible_languages

logger = logging.getLogger(__name__)

DELETED = "deleted"

ROLE_COLORS = {"admin": "#ef4444", "evaluator": "#f59e0b", "annotator": "#3b82f6"}

ERROR_TYPE_COLORS = {
    "mistranslation": "#ef4444",
    "omission": "#f97316",
    "addition": "#f59e0b",
    "grammar": "#eab308",
    "terminology": "#84cc16",
    "style": "#22c55e",
    "punctuation": "#06b6d4",
    "untranslated": "#6366f1",
    "other": "#a855f7",
}

ERROR_TYPE_DESCRIPTIONS = {
    "mistranslation": "Meaning of the source rendered incorrectly",
    "omission": "Source content missing from the translation",
    "addition": "Content added that is not in the source",
    "grammar": "Grammatical errors in the target language",
    "terminology": "Wrong or inconsistent domain terminology",
    "style": "Unnatural register or phrasing",
    "punctuation": "Punctuation or spelling problems",
    "untranslated": "Source text left untranslated",
    "other": "Other translation problems",
}


# --- DataFrame Helpers ---

def _frame(rows: List[Dict], columns: Iterable[str]) -> pd.DataFrame:
    """Builds a DataFrame that has `columns` even when `rows` is empty."""
    df = pd.DataFrame(rows)
    for column in columns:
        if column not in df.columns:
            df[column] = pd.Series(dtype="object")
    return df


def _timestamps(series: pd.Series) -> pd.Series:
    # SQLite hands back naive datetimes; they were written as UTC.
    return pd.to_datetime(series, utc=True, errors="coerce")


def _mean(series: pd.Series) -> float:
    values = pd.to_numeric(series, errors="coerce").dropna()
    return round(float(values.mean()), 2) if not values.empty else 0.0


def _rate(numerator: int, denominator: int) -> float:
    return round(min(numerator / denominator, 1.0), 4) if denominator else 0.0


def _live(annotations: pd.DataFrame) -> pd.DataFrame:
    return annotations[annotations["status"] != DELETED]


def _platform_completion_rate(sentences: pd.DataFrame, live_annotations: pd.DataFrame) -> float:
    active = sentences[sentences["is_active"] == True]  # noqa: E712
    covered = active["id"].isin(live_annotations["sentence_id"]).sum()
    return _rate(int(covered), len(active))


# --- Dashboard Stats ---

def get_user_stats(user, db: DatabaseService) -> dashboard_model.UserStats:
    annotations = _live(_frame(db.get_annotations_as_dicts(annotator_id=user.id), ["id", "status"]))
    received = _frame(db.get_received_evaluations_as_dicts(user.id), ["annotation_id", "score"])

    total = len(annotations)
    evaluated = int(annotations["id"].isin(received["annotation_id"]).sum())
    eligible = db.count_active_sentences_in_languages(eligible_languages(user, db))

    return dashboard_model.UserStats(
        total_annotations=total,
        evaluated_annotations=evaluated,
        average_evaluation_score=_mean(received["score"]),
        eligible_sentences=eligible,
        completion_rate=_rate(total, eligible),
    )


def get_evaluator_stats(user, db: DatabaseService) -> dashboard_model.EvaluatorStats:
    evaluations = _frame(db.get_evaluations_as_dicts(evaluator_id=user.id), ["score", "created_at"])
    assessments = _frame(db.get_assessments_as_dicts(), ["requested_by_id", "reviewed_by_id", "overall_quality_score"])

    today = datetime.now(timezone.utc).date()
    created = _timestamps(evaluations["created_at"])
    evaluations_today = int((created.dt.date == today).sum()) if not created.empty else 0

    reviewed = assessments[assessments["reviewed_by_id"] == user.id]
    pending = db.count_pending_annotations_for_evaluator(user.id, eligible_languages(user, db)) if user.is_evaluator else 0

    return dashboard_model.EvaluatorStats(
        total_evaluations=len(evaluations),
        evaluations_today=evaluations_today,
        average_score_given=_mean(evaluations["score"]),
        pending_evaluations=pending,
        assessments_requested=int((assessments["requested_by_id"] == user.id).sum()),
        human_reviews=len(reviewed),
        average_reviewed_quality=_mean(reviewed["overall_quality_score"]),
    )


def get_admin_stats(db: DatabaseService) -> dashboard_model.AdminStats:
    users = _frame(db.get_users_as_dicts(), ["is_active", "is_admin", "is_evaluator", "onboarding_completed"])
    sentences = _frame(db.get_sentences_as_dicts(), ["id", "is_active"])
    annotations = _frame(db.get_annotations_as_dicts(), ["id", "status", "sentence_id"])
    evaluations = _frame(db.get_evaluations_as_dicts(), ["score"])
    assessments = _frame(db.get_assessments_as_dicts(), ["status"])

    live = _live(annotations)
    return dashboard_model.AdminStats(
        total_users=len(users),
        active_users=int((users["is_active"] == True).sum()),  # noqa: E712
        evaluators=int((users["is_evaluator"] == True).sum()),  # noqa: E712
        admins=int((users["is_admin"] == True).sum()),  # noqa: E712
        onboarded_users=int((users["onboarding_completed"] == True).sum()),  # noqa: E712
        total_sentences=len(sentences),
        active_sentences=int((sentences["is_active"] == True).sum()),  # noqa: E712
        total_annotations=len(live),
        annotations_by_status={str(k): int(v) for k, v in annotations["status"].value_counts().items()},
        total_evaluations=len(evaluations),
        average_evaluation_score=_mean(evaluations["score"]),
        assessments_by_status={str(k): int(v) for k, v in assessments["status"].value_counts().items()},
        completion_rate=_platform_completion_rate(sentences, live),
    )


# --- Analytics Series ---

def get_user_growth(db: DatabaseService, months: int = 6) -> List[dashboard_model.UserGrowthPoint]:
    """Per calendar month: cumulative registered users and annotations created that month."""
    months = max(1, min(months, 36))
    users = _frame(db.get_users_as_dicts(), ["created_at"])
    annotations = _live(_frame(db.get_annotations_as_dicts(), ["status", "created_at"]))

    user_months = _timestamps(users["created_at"]).dt.strftime("%Y-%m")
    annotation_months = _timestamps(annotations["created_at"]).dt.strftime("%Y-%m")

    current = pd.Timestamp.now(tz="UTC").tz_localize(None).to_period("M")
    labels = [str(current - offset) for offset in range(months - 1, -1, -1)]

    points = []
    for label in labels:
        points.append(dashboard_model.UserGrowthPoint(
            month=label,
            users=int((user_months <= label).sum()),
            annotations=int((annotation_months == label).sum()),
        ))
    return points


def get_error_distribution(db: DatabaseService) -> List[dashboard_model.ErrorTypeCount]:
    """How often each MT error type appears across all automated assessments."""
    assessments = _frame(db.get_assessments_as_dicts(), ["errors"])
    errors = assessments["errors"].dropna().explode().dropna()
    if errors.empty:
        return []
    types = errors.map(lambda e: (e.get("type") if isinstance(e, dict) else None) or "other")
    counts = types.value_counts()
    return [
        dashboard_model.ErrorTypeCount(
            type=str(error_type),
            count=int(count),
            color=ERROR_TYPE_COLORS.get(error_type, ERROR_TYPE_COLORS["other"]),
            description=ERROR_TYPE_DESCRIPTIONS.get(error_type, ERROR_TYPE_DESCRIPTIONS["other"]),
        )
        for error_type, count in counts.items()
    ]


def get_language_activity(db: DatabaseService) -> List[dashboard_model.LanguageActivityPoint]:
    """Active sentences and live annotations per target language."""
    sentences = _frame(db.get_sentences_as_dicts(), ["id", "is_active", "target_language"])
    annotations = _live(_frame(db.get_annotations_as_dicts(), ["status", "sentence_id"]))
    if sentences.empty:
        return []

    active = sentences[sentences["is_active"] == True]  # noqa: E712
    sentence_counts = active.groupby("target_language")["id"].count()
    if annotations.empty:
        annotation_counts = pd.Series(dtype="int64")
    else:
        joined = annotations.merge(
            sentences[["id", "target_language"]], left_on="sentence_id", right_on="id", how="inner"
        )
        annotation_counts = joined.groupby("target_language")["sentence_id"].count()

    languages = sorted(set(sentence_counts.index) | set(annotation_counts.index))
    return [
        dashboard_model.LanguageActivityPoint(
            language=str(language),
            sentences=int(sentence_counts.get(language, 0)),
            annotations=int(annotation_counts.get(language, 0)),
        )
        for language in languages
    ]


def get_daily_activity(db: DatabaseService, days: int = 7) -> List[dashboard_model.DailyActivityPoint]:
    days = max(1, min(days, 90))
    annotations = _live(_frame(db.get_annotations_as_dicts(), ["status", "created_at"]))
    evaluations = _frame(db.get_evaluations_as_dicts(), ["created_at"])

    annotation_days = _timestamps(annotations["created_at"]).dt.strftime("%Y-%m-%d")
    evaluation_days = _timestamps(evaluations["created_at"]).dt.strftime("%Y-%m-%d")

    today = datetime.now(timezone.utc).date()
    points = []
    for offset in range(days - 1, -1, -1):
        label = (today - timedelta(days=offset)).isoformat()
        points.append(dashboard_model.DailyActivityPoint(
            date=label,
            annotations=int((annotation_days == label).sum()),
            evaluations=int((evaluation_days == label).sum()),
        ))
    return points


def get_user_roles(db: DatabaseService) -> List[dashboard_model.RoleCount]:
    """Each user counted once under their highest role."""
    users = _frame(db.get_users_as_dicts(), ["is_admin", "is_evaluator"])
    if users.empty:
        roles = pd.Series(dtype="object")
    else:
        roles = users.apply(
            lambda row: "admin" if row["is_admin"] else ("evaluator" if row["is_evaluator"] else "annotator"),
            axis=1,
        )
    return [
        dashboard_model.RoleCount(role=role, count=int((roles == role).sum()), color=color)
        for role, color in ROLE_COLORS.items()
    ]


def get_quality_metrics(db: DatabaseService) -> dashboard_model.QualityMetrics:
    """Mean self-reported 1-5 scores of live annotations, plus the platform completion rate."""
    sentences = _frame(db.get_sentences_as_dicts(), ["id", "is_active"])
    annotations = _live(_frame(
        db.get_annotations_as_dicts(),
        ["status", "sentence_id", "overall_quality", "fluency_score", "adequacy_score"],
    ))
    return dashboard_model.QualityMetrics(
        averageQuality=_mean(annotations["overall_quality"]),
        averageFluency=_mean(annotations["fluency_score"]),
        averageAdequacy=_mean(annotations["adequacy_score"]),
        completionRate=_platform_completion_rate(sentences, annotations),
    )
