# /annotation_backend/routers/evaluations_router.py

from typing import List

from fastapi import APIRouter, Depends, Query, status

from ..core.deps import RequestContext, get_request_context, require_evaluator
from ..db.models.user_models import User as UserModel
from ..models import annotation_model, dashboard_model, evaluation_model
from ..services import database_service, evaluation_service, stats_service

router = APIRouter()


@router.post("/evaluations", response_model=evaluation_model.Evaluation, status_code=status.HTTP_201_CREATED, summary="Evaluate an Annotation")
def create_evaluation(evaluation_in: evaluation_model.EvaluationCreate, ctx: RequestContext = Depends(get_request_context)):
    return evaluation_service.create_evaluation(ctx.user, evaluation_in, ctx.db)


@router.get("/evaluations", response_model=List[evaluation_model.Evaluation], summary="List My Evaluations")
def list_my_evaluations(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    ctx: RequestContext = Depends(get_request_context),
):
    return evaluation_service.get_my_evaluations(ctx.user, ctx.db, skip, limit)


@router.get("/evaluations/pending", response_model=List[annotation_model.Annotation], summary="List Annotations Awaiting My Evaluation")
def list_pending_evaluations(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    ctx: RequestContext = Depends(get_request_context),
):
    return evaluation_service.get_pending_evaluations(ctx.user, ctx.db, skip, limit)


@router.put("/evaluations/{evaluation_id}", response_model=evaluation_model.Evaluation, summary="Edit My Evaluation")
def update_evaluation(
    evaluation_id: int,
    patch: evaluation_model.EvaluationUpdate,
    ctx: RequestContext = Depends(get_request_context),
):
    return evaluation_service.update_evaluation(ctx.user, evaluation_id, patch, ctx.db)


@router.get("/evaluator/stats", response_model=dashboard_model.EvaluatorStats, summary="Get My Evaluator Stats")
def evaluator_stats(
    evaluator: UserModel = Depends(require_evaluator),
    db: database_service.DatabaseService = Depends(database_service.get_db_service),
):
    return stats_service.get_evaluator_stats(evaluator, db)
