# /annotation_backend/routers/mt_quality_router.py

from typing import List

from fastapi import APIRouter, Depends, Query, Response, status

from ..core.deps import RequestContext, get_request_context, require_evaluator
from ..db.models.user_models import User as UserModel
from ..models import dashboard_model, mt_quality_model, sentence_model
from ..services import database_service, mt_quality_service, stats_service
from ..services.quality_scorer import QualityScorer, get_quality_scorer

router = APIRouter()


@router.get("/pending", response_model=List[sentence_model.Sentence], summary="List Sentences Awaiting MT Assessment")
def list_pending(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    ctx: RequestContext = Depends(get_request_context),
):
    return mt_quality_service.get_pending(ctx.db, skip, limit)


@router.post("/assess", response_model=mt_quality_model.MTQualityAssessment, summary="Assess One Machine Translation")
async def assess_sentence(
    request: mt_quality_model.MTQualityCreate,
    ctx: RequestContext = Depends(get_request_context),
    scorer: QualityScorer = Depends(get_quality_scorer),
):
    return await mt_quality_service.assess(ctx.user, request.sentence_id, ctx.db, scorer)


@router.post("/batch-assess", response_model=mt_quality_model.BatchAssessResponse, summary="Assess a Batch of Machine Translations")
async def batch_assess(
    request: mt_quality_model.BatchAssessRequest,
    response: Response,
    ctx: RequestContext = Depends(get_request_context),
    scorer: QualityScorer = Depends(get_quality_scorer),
):
    result = await mt_quality_service.batch_assess(ctx.user, request.sentence_ids, ctx.db, scorer)
    if result.failed:
        response.status_code = status.HTTP_207_MULTI_STATUS
    return result


@router.get("/my-assessments", response_model=List[mt_quality_model.MTQualityAssessment], summary="List Assessments I Requested or Reviewed")
def my_assessments(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    ctx: RequestContext = Depends(get_request_context),
):
    return mt_quality_service.get_my_assessments(ctx.user, ctx.db, skip, limit)


@router.get("/stats", response_model=dashboard_model.EvaluatorStats, summary="Get My MT Review Stats")
def mt_quality_stats(
    evaluator: UserModel = Depends(require_evaluator),
    db: database_service.DatabaseService = Depends(database_service.get_db_service),
):
    return stats_service.get_evaluator_stats(evaluator, db)


@router.get("/sentence/{sentence_id}", response_model=mt_quality_model.AssessmentLookup, summary="Look Up a Sentence's Assessment")
def assessment_for_sentence(sentence_id: int, ctx: RequestContext = Depends(get_request_context)):
    return mt_quality_service.lookup_by_sentence(sentence_id, ctx.db)


@router.put("/{assessment_id}", response_model=mt_quality_model.MTQualityAssessment, summary="Record a Human Review")
def review_assessment(
    assessment_id: int,
    review: mt_quality_model.MTQualityUpdate,
    ctx: RequestContext = Depends(get_request_context),
):
    return mt_quality_service.update_assessment(ctx.user, assessment_id, review, ctx.db)
