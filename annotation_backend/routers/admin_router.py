# /annotation_backend/routers/admin_router.py

"""
Admin-only endpoints (`/api/admin/...`): user management, the sentence
corpus, cross-user annotation/evaluation/assessment listings, the
proficiency question bank, platform stats and chart-ready analytics.

Every route depends on `require_admin`.
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from ..core.deps import require_admin
from ..db.models.user_models import User as UserModel
from ..models import (
    annotation_model,
    dashboard_model,
    evaluation_model,
    mt_quality_model,
    onboarding_model,
    sentence_model,
    user_model,
)
from ..services import (
    annotation_service,
    evaluation_service,
    mt_quality_service,
    proficiency_service,
    sentence_service,
    stats_service,
    user_service,
)
from ..services.database_service import DatabaseService, get_db_service

router = APIRouter()

# --- USERS (/api/admin/users) ---

@router.get("/users", response_model=List[user_model.User], summary="List Users")
def list_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    role: Optional[user_model.UserRole] = None,
    active: Optional[bool] = None,
    search: Optional[str] = None,
    admin: UserModel = Depends(require_admin),
    db: DatabaseService = Depends(get_db_service),
):
    return user_service.list_users(db, skip, limit, role.value if role else None, active, search)


@router.post("/users", response_model=user_model.User, status_code=status.HTTP_201_CREATED, summary="Create a User")
def create_user(payload: user_model.AdminUserCreate, admin: UserModel = Depends(require_admin), db: DatabaseService = Depends(get_db_service)):
    return user_service.create_user(admin, payload, db)


@router.get("/users/{user_id}", response_model=user_model.User, summary="Get User Details")
def get_user(user_id: int, admin: UserModel = Depends(require_admin), db: DatabaseService = Depends(get_db_service)):
    return user_service.get_user(user_id, db)


@router.put("/users/{user_id}", response_model=user_model.User, summary="Update a User")
def update_user(
    user_id: int,
    patch: user_model.AdminUserUpdate,
    admin: UserModel = Depends(require_admin),
    db: DatabaseService = Depends(get_db_service),
):
    return user_service.update_user(user_id, patch, db)


@router.put("/users/{user_id}/deactivate", response_model=user_model.User, summary="Deactivate a User")
def deactivate_user(
    user_id: int,
    request: user_model.DeactivateRequest,
    admin: UserModel = Depends(require_admin),
    db: DatabaseService = Depends(get_db_service),
):
    return user_service.deactivate_user(admin, user_id, request, db)


@router.post("/users/{user_id}/reset-password", response_model=user_model.MessageResponse, summary="Reset a User's Password")
def reset_password(
    user_id: int,
    request: user_model.PasswordResetRequest,
    admin: UserModel = Depends(require_admin),
    db: DatabaseService = Depends(get_db_service),
):
    return user_model.MessageResponse(message=user_service.reset_password(admin, user_id, request, db))


@router.delete("/users/{user_id}", response_model=user_model.MessageResponse, summary="Delete a User Without History")
def delete_user(user_id: int, admin: UserModel = Depends(require_admin), db: DatabaseService = Depends(get_db_service)):
    return user_model.MessageResponse(message=user_service.delete_user(admin, user_id, db))


@router.put("/users/{user_id}/toggle-evaluator", response_model=user_model.User, summary="Grant or Revoke the Evaluator Role")
def toggle_evaluator(user_id: int, admin: UserModel = Depends(require_admin), db: DatabaseService = Depends(get_db_service)):
    return user_service.toggle_evaluator(admin, user_id, db)


# --- SENTENCES (/api/admin/sentences) ---

@router.get("/sentences", response_model=List[sentence_model.Sentence], summary="List All Sentences")
def list_sentences(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    source_language: Optional[str] = None,
    target_language: Optional[str] = None,
    admin: UserModel = Depends(require_admin),
    db: DatabaseService = Depends(get_db_service),
):
    return sentence_service.list_for_admin(db, skip, limit, source_language, target_language)


@router.post("/sentences/bulk", response_model=sentence_model.BulkSentenceResponse, status_code=status.HTTP_201_CREATED, summary="Create Sentences in Bulk")
def bulk_create_sentences(payload: List[dict], admin: UserModel = Depends(require_admin), db: DatabaseService = Depends(get_db_service)):
    return sentence_service.bulk_create(payload, db)


@router.post("/sentences/import-csv", response_model=sentence_model.SentenceImportResponse, summary="Import Sentences from CSV")
async def import_sentences_csv(
    file: UploadFile = File(...),
    admin: UserModel = Depends(require_admin),
    db: DatabaseService = Depends(get_db_service),
):
    if file.filename and not file.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only .csv files are supported.")
    file_bytes = await file.read()
    return sentence_service.import_csv(file_bytes, db)


@router.get("/sentences/counts", response_model=Dict[str, int], summary="Count Active Sentences per Language Pair")
def sentence_counts(admin: UserModel = Depends(require_admin), db: DatabaseService = Depends(get_db_service)):
    return sentence_service.counts_by_language_pair(db)


@router.get("/sentences/{sentence_id}/annotations", response_model=List[annotation_model.Annotation], summary="List a Sentence's Annotations")
def sentence_annotations(sentence_id: int, admin: UserModel = Depends(require_admin), db: DatabaseService = Depends(get_db_service)):
    return annotation_service.get_sentence_annotations(sentence_id, db)


@router.delete("/sentences/{sentence_id}", response_model=sentence_model.Sentence, summary="Deactivate a Sentence")
def deactivate_sentence(sentence_id: int, admin: UserModel = Depends(require_admin), db: DatabaseService = Depends(get_db_service)):
    return sentence_service.deactivate(sentence_id, db)


# --- ANNOTATIONS, EVALUATIONS, ASSESSMENTS ---

@router.get("/annotations", response_model=List[annotation_model.Annotation], summary="List All Annotations")
def list_annotations(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    include_deleted: bool = False,
    admin: UserModel = Depends(require_admin),
    db: DatabaseService = Depends(get_db_service),
):
    return annotation_service.get_all_annotations(db, skip, limit, include_deleted)


@router.put("/annotations/{annotation_id}/archive", response_model=annotation_model.Annotation, summary="Archive an Annotation")
def archive_annotation(annotation_id: int, admin: UserModel = Depends(require_admin), db: DatabaseService = Depends(get_db_service)):
    return annotation_service.archive(admin, annotation_id, db)


@router.get("/evaluations", response_model=List[evaluation_model.Evaluation], summary="List All Evaluations")
def list_evaluations(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    admin: UserModel = Depends(require_admin),
    db: DatabaseService = Depends(get_db_service),
):
    return evaluation_service.get_all_evaluations(db, skip, limit)


@router.get("/mt-quality", response_model=List[mt_quality_model.MTQualityAssessment], summary="List All MT Assessments")
def list_assessments(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    admin: UserModel = Depends(require_admin),
    db: DatabaseService = Depends(get_db_service),
):
    return mt_quality_service.get_all_assessments(db, skip, limit)


# --- PROFICIENCY QUESTION BANK (/api/admin/language-proficiency-questions) ---

@router.get("/language-proficiency-questions", response_model=List[onboarding_model.LanguageProficiencyQuestion], summary="List All Proficiency Questions")
def list_questions(admin: UserModel = Depends(require_admin), db: DatabaseService = Depends(get_db_service)):
    return proficiency_service.list_all_questions(db)


@router.post("/language-proficiency-questions", response_model=onboarding_model.LanguageProficiencyQuestion, status_code=status.HTTP_201_CREATED, summary="Create a Proficiency Question")
def create_question(
    question: onboarding_model.LanguageProficiencyQuestionCreate,
    admin: UserModel = Depends(require_admin),
    db: DatabaseService = Depends(get_db_service),
):
    return proficiency_service.create_question(admin, question, db)


@router.put("/language-proficiency-questions/{question_id}", response_model=onboarding_model.LanguageProficiencyQuestion, summary="Update a Proficiency Question")
def update_question(
    question_id: int,
    patch: onboarding_model.LanguageProficiencyQuestionUpdate,
    admin: UserModel = Depends(require_admin),
    db: DatabaseService = Depends(get_db_service),
):
    return proficiency_service.update_question(question_id, patch, db)


@router.delete("/language-proficiency-questions/{question_id}", response_model=user_model.MessageResponse, summary="Delete a Proficiency Question")
def delete_question(question_id: int, admin: UserModel = Depends(require_admin), db: DatabaseService = Depends(get_db_service)):
    return user_model.MessageResponse(message=proficiency_service.delete_question(question_id, db))


# --- STATS & ANALYTICS ---

@router.get("/stats", response_model=dashboard_model.AdminStats, summary="Get Platform Stats")
def admin_stats(admin: UserModel = Depends(require_admin), db: DatabaseService = Depends(get_db_service)):
    return stats_service.get_admin_stats(db)


@router.get("/analytics/user-growth", response_model=List[dashboard_model.UserGrowthPoint], summary="User Growth per Month")
def user_growth(
    months: int = Query(6, ge=1, le=36),
    admin: UserModel = Depends(require_admin),
    db: DatabaseService = Depends(get_db_service),
):
    return stats_service.get_user_growth(db, months)


@router.get("/analytics/error-distribution", response_model=List[dashboard_model.ErrorTypeCount], summary="MT Error Type Distribution")
def error_distribution(admin: UserModel = Depends(require_admin), db: DatabaseService = Depends(get_db_service)):
    return stats_service.get_error_distribution(db)


@router.get("/analytics/language-activity", response_model=List[dashboard_model.LanguageActivityPoint], summary="Activity per Target Language")
def language_activity(admin: UserModel = Depends(require_admin), db: DatabaseService = Depends(get_db_service)):
    return stats_service.get_language_activity(db)


@router.get("/analytics/daily-activity", response_model=List[dashboard_model.DailyActivityPoint], summary="Daily Annotation and Evaluation Counts")
def daily_activity(
    days: int = Query(7, ge=1, le=90),
    admin: UserModel = Depends(require_admin),
    db: DatabaseService = Depends(get_db_service),
):
    return stats_service.get_daily_activity(db, days)


@router.get("/analytics/user-roles", response_model=List[dashboard_model.RoleCount], summary="User Role Distribution")
def user_roles(admin: UserModel = Depends(require_admin), db: DatabaseService = Depends(get_db_service)):
    return stats_service.get_user_roles(db)


@router.get("/analytics/quality-metrics", response_model=dashboard_model.QualityMetrics, summary="Annotation Quality Metrics")
def quality_metrics(admin: UserModel = Depends(require_admin), db: DatabaseService = Depends(get_db_service)):
    return stats_service.get_quality_metrics(db)
