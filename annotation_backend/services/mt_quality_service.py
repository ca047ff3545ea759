# /annotation_backend/services/mt_quality_service.py

"""
The machine-translation quality pipeline.

Each sentence has at most one assessment row. `assess` first commits that
row as `pending`, then asks the scoring collaborator for a verdict and
writes it as `assessed`. A scorer failure sets `last_error` and puts the
row back in the status it had before: a first assessment stays `pending`,
so the sentence reappears in the pending queue and the call can simply be
retried, while an earlier result survives a failed re-assessment.
`batch_assess` runs the same steps per item and collects per-item
failures instead of aborting.
"""

import logging
from typing import List

from ..core.config import settings
from ..core.errors import DomainError, ForbiddenError, InvalidStateError, NotFoundError, ScoringError, ValidationError
from ..db.base_class import utcnow
from ..models import mt_quality_model
from ..models.mt_quality_model import AssessmentStatus
from .database_service import DatabaseService
from .quality_scorer import QualityScorer

logger = logging.getLogger(__name__)

_HUMAN_REVIEW_CLEARED = {
    "human_score": None,
    "human_feedback": None,
    "reviewed_by_id": None,
    "reviewed_at": None,
}


def _get_assessable_sentence(sentence_id: int, db: DatabaseService):
    sentence = db.get_sentence(sentence_id)
    if sentence is None or not sentence.is_active:
        raise NotFoundError(f"Sentence {sentence_id} not found.")
    if not sentence.machine_translation or not sentence.machine_translation.strip():
        raise ValidationError(f"Sentence {sentence_id} has no machine translation to assess.")
    return sentence


async def assess(actor, sentence_id: int, db: DatabaseService, scorer: QualityScorer):
    """
    Runs one automated assessment. Re-assessing a sentence replaces the
    automated result and clears any earlier human review on the same row,
    but only once the new verdict is in; a failed re-assessment keeps the
    previous result and status.
    """
    sentence = _get_assessable_sentence(sentence_id, db)
    previous = db.get_assessment_by_sentence(sentence.id)
    previous_status = previous.status if previous is not None else AssessmentStatus.PENDING.value
    assessment = db.claim_assessment_for_sentence(sentence.id, {
        "requested_by_id": actor.id,
        "status": AssessmentStatus.PENDING.value,
        "last_error": None,
        "updated_at": utcnow(),
    })

    try:
        score = await scorer.score(sentence)
    except ScoringError as e:
        _record_failure(assessment, previous_status, e.message, db)
        raise
    except Exception as e:
        logger.exception("Scorer crashed on sentence %s", sentence.id)
        _record_failure(assessment, previous_status, str(e) or e.__class__.__name__, db)
        raise ScoringError(f"Automated scoring failed for sentence {sentence.id}.") from e

    now = utcnow()
    for field, value in _HUMAN_REVIEW_CLEARED.items():
        setattr(assessment, field, value)
    assessment.status = AssessmentStatus.ASSESSED.value
    assessment.fluency_score = score.fluency_score
    assessment.adequacy_score = score.adequacy_score
    assessment.overall_quality_score = score.overall_quality_score
    assessment.confidence = score.confidence
    assessment.explanation = score.explanation
    assessment.errors = [error.model_dump(mode="json") for error in score.errors]
    assessment.suggestions = list(score.suggestions)
    assessment.model_name = score.model_name
    assessment.last_error = None
    assessment.assessed_at = now
    assessment.updated_at = now
    assessment = db.save_assessment(assessment)
    logger.info("Assessed sentence %s: overall %.1f (%d errors)", sentence.id, score.overall_quality_score, len(score.errors))
    return assessment


def _record_failure(assessment, previous_status: str, reason: str, db: DatabaseService) -> None:
    assessment.status = previous_status
    assessment.last_error = reason[:1000]
    assessment.updated_at = utcnow()
    db.save_assessment(assessment)


async def batch_assess(actor, sentence_ids: List[int], db: DatabaseService, scorer: QualityScorer) -> mt_quality_model.BatchAssessResponse:
    """
    Assesses each sentence independently; every item commits on its own.
    Duplicate ids are processed once. Re-running the same batch is safe: it
    rewrites the one row per sentence instead of adding rows.
    """
    unique_ids = list(dict.fromkeys(sentence_ids))
    if not unique_ids:
        raise ValidationError("sentence_ids must not be empty.")
    if len(unique_ids) > settings.MAX_BATCH_SIZE:
        raise ValidationError(f"A batch may contain at most {settings.MAX_BATCH_SIZE} sentences.")

    response = mt_quality_model.BatchAssessResponse()
    for sentence_id in unique_ids:
        try:
            assessment = await assess(actor, sentence_id, db, scorer)
        except DomainError as e:
            logger.warning("Batch item %s failed: %s", sentence_id, e.message)
            response.failed.append(mt_quality_model.BatchFailure(sentence_id=sentence_id, reason=e.message))
            continue
        except Exception as e:
            logger.exception("Batch item %s failed unexpectedly", sentence_id)
            db.session.rollback()
            response.failed.append(mt_quality_model.BatchFailure(sentence_id=sentence_id, reason=f"Unexpected error: {e.__class__.__name__}"))
            continue
        response.succeeded.append(mt_quality_model.MTQualityAssessment.model_validate(assessment))

    logger.info("Batch assessment by user %s: %d succeeded, %d failed", actor.id, len(response.succeeded), len(response.failed))
    return response


def update_assessment(reviewer, assessment_id: int, payload: mt_quality_model.MTQualityUpdate, db: DatabaseService):
    """Records a human judgment; the latest review overwrites any earlier one."""
    if not (reviewer.is_evaluator or reviewer.is_admin):
        raise ForbiddenError("Only evaluators and admins can review assessments.")
    assessment = db.get_assessment(assessment_id)
    if assessment is None:
        raise NotFoundError("Assessment not found.")
    if assessment.status == AssessmentStatus.PENDING.value:
        raise InvalidStateError("A pending assessment cannot be reviewed yet.")

    now = utcnow()
    assessment.human_score = payload.human_score
    assessment.human_feedback = payload.human_feedback
    assessment.reviewed_by_id = reviewer.id
    assessment.reviewed_at = now
    assessment.status = AssessmentStatus.HUMAN_REVIEWED.value
    assessment.updated_at = now
    assessment = db.save_assessment(assessment)
    logger.info("User %s reviewed assessment %s (human score %.1f)", reviewer.id, assessment.id, payload.human_score)
    return assessment


# --- Queries ---

def get_pending(db: DatabaseService, skip: int = 0, limit: int = 50) -> List:
    return db.list_sentences_pending_assessment(skip, limit)


def get_my_assessments(user, db: DatabaseService, skip: int = 0, limit: int = 100) -> List:
    return db.list_assessments_for_user(user.id, skip, limit)


def get_all_assessments(db: DatabaseService, skip: int = 0, limit: int = 100) -> List:
    return db.list_all_assessments(skip, limit)


def lookup_by_sentence(sentence_id: int, db: DatabaseService) -> mt_quality_model.AssessmentLookup:
    """An explicit found/not-found result; only an unknown sentence is an error."""
    if db.get_sentence(sentence_id) is None:
        raise NotFoundError("Sentence not found.")
    assessment = db.get_assessment_by_sentence(sentence_id)
    return mt_quality_model.AssessmentLookup(
        sentence_id=sentence_id,
        found=assessment is not None,
        assessment=mt_quality_model.MTQualityAssessment.model_validate(assessment) if assessment is not None else None,
    )
