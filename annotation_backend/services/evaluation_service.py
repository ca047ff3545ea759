# /annotation_backend/services/evaluation_service.py

"""
Peer evaluation of annotations.

An evaluator reviews other people's live annotations, at most once each.
The one-evaluation-per-(evaluator, annotation) rule is a database
constraint, and evaluators pass the same language gate as annotators.
The first evaluation of a `submitted` annotation moves it to
`evaluated` in the same commit.
"""

import logging
from typing import List

from sqlalchemy.exc import IntegrityError

from ..core.errors import (
    DuplicateEvaluationError,
    ForbiddenError,
    IneligibleError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from ..db.base_class import utcnow
from ..models import evaluation_model
from ..models.annotation_model import AnnotationStatus
from .database_service import DatabaseService
from .proficiency_service import eligible_languages, is_eligible

logger = logging.getLogger(__name__)


def create_evaluation(evaluator, payload: evaluation_model.EvaluationCreate, db: DatabaseService):
    if not evaluator.is_evaluator:
        raise ForbiddenError("Only evaluators can evaluate annotations.")
    annotation = db.get_annotation(payload.annotation_id)
    if annotation is None or annotation.status == AnnotationStatus.DELETED.value:
        raise NotFoundError("Annotation not found.")
    if annotation.annotator_id == evaluator.id:
        raise ForbiddenError("You cannot evaluate your own annotation.")
    sentence = annotation.sentence
    if not is_eligible(evaluator, (sentence.source_language, sentence.target_language), db):
        raise IneligibleError(f"You are not eligible to evaluate {sentence.target_language} annotations.")

    now = utcnow()
    record = payload.model_dump()
    record.update({"evaluator_id": evaluator.id, "created_at": now, "updated_at": now})
    new_status = AnnotationStatus.EVALUATED.value if annotation.status == AnnotationStatus.SUBMITTED.value else None
    try:
        evaluation = db.add_evaluation(record, annotation=annotation, new_status=new_status)
    except IntegrityError:
        raise DuplicateEvaluationError("You have already evaluated this annotation.")
    logger.info("Evaluator %s evaluated annotation %s (score %.1f)", evaluator.id, annotation.id, evaluation.score)
    return evaluation


def update_evaluation(evaluator, evaluation_id: int, patch: evaluation_model.EvaluationUpdate, db: DatabaseService):
    evaluation = db.get_evaluation(evaluation_id)
    if evaluation is None:
        raise NotFoundError("Evaluation not found.")
    if evaluation.evaluator_id != evaluator.id:
        raise ForbiddenError("You can only edit your own evaluations.")
    annotation = db.get_annotation(evaluation.annotation_id)
    if annotation is None or annotation.status == AnnotationStatus.DELETED.value:
        raise InvalidStateError("The evaluated annotation has been deleted.")

    changes = patch.model_dump(exclude_unset=True)
    if "score" in changes and changes["score"] is None:
        raise ValidationError("score cannot be cleared.")
    for field, value in changes.items():
        setattr(evaluation, field, value)
    evaluation.updated_at = utcnow()
    return db.save_evaluation(evaluation)


def get_my_evaluations(evaluator, db: DatabaseService, skip: int = 0, limit: int = 100) -> List:
    return db.list_evaluations_by_evaluator(evaluator.id, skip, limit)


def get_pending_evaluations(evaluator, db: DatabaseService, skip: int = 0, limit: int = 50) -> List:
    """
    Live annotations awaiting this evaluator, least-reviewed first, limited to
    the target languages the evaluator is eligible for.
    """
    if not evaluator.is_evaluator:
        raise ForbiddenError("Only evaluators have pending evaluations.")
    return db.list_pending_annotations_for_evaluator(evaluator.id, eligible_languages(evaluator, db), skip, limit)


def get_all_evaluations(db: DatabaseService, skip: int = 0, limit: int = 100) -> List:
    return db.list_all_evaluations(skip, limit)
