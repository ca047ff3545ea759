# /annotation_backend/services/annotation_service.py

"""
Business logic for the annotation lifecycle.

Persisted states are `submitted`, `evaluated`, `archived` and `deleted`;
`draft` only ever lives on the client. Owners may edit or delete their own
annotation while it is still `submitted`. Admins may delete or archive any
live annotation. Deletion is soft and terminal, and it never touches the
evaluations that reference the annotation.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from ..core.errors import (
    DuplicateAnnotationError,
    ForbiddenError,
    IneligibleError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from ..db.base_class import utcnow
from ..models import annotation_model
from ..models.annotation_model import AnnotationStatus
from .database_service import DatabaseService
from .proficiency_service import is_eligible
from .storage_service import VoiceStorage

logger = logging.getLogger(__name__)

SUBMITTED = AnnotationStatus.SUBMITTED.value
EVALUATED = AnnotationStatus.EVALUATED.value
ARCHIVED = AnnotationStatus.ARCHIVED.value
DELETED = AnnotationStatus.DELETED.value


def _get_live_annotation(annotation_id: int, db: DatabaseService):
    annotation = db.get_annotation(annotation_id)
    if annotation is None or annotation.status == DELETED:
        raise NotFoundError("Annotation not found.")
    return annotation


# --- Lifecycle Transitions ---

def create(user, payload: annotation_model.AnnotationCreate, db: DatabaseService):
    """
    Creates a `submitted` annotation. The (annotator, sentence) uniqueness of
    live annotations is enforced by the database, so a concurrent duplicate
    surfaces here as DuplicateAnnotationError rather than a second row.
    """
    sentence = db.get_sentence(payload.sentence_id)
    if sentence is None or not sentence.is_active:
        raise NotFoundError("Sentence not found.")
    if not is_eligible(user, (sentence.source_language, sentence.target_language), db):
        raise IneligibleError(f"You are not eligible to annotate {sentence.target_language} sentences.")
    if not payload.final_translation or not payload.final_translation.strip():
        raise ValidationError("final_translation must not be empty.")

    now = utcnow()
    record = payload.model_dump()
    record.update({
        "annotator_id": user.id,
        "status": SUBMITTED,
        "created_at": now,
        "updated_at": now,
    })
    try:
        annotation = db.add_annotation(record)
    except IntegrityError:
        raise DuplicateAnnotationError("You have already annotated this sentence.")
    logger.info("User %s annotated sentence %s (annotation %s)", user.id, sentence.id, annotation.id)
    return annotation


def update(user, annotation_id: int, patch: annotation_model.AnnotationUpdate, db: DatabaseService):
    """
    Owner-only patch of a `submitted` annotation. Any other state, `deleted`
    included, is ForbiddenError.
    """
    annotation = db.get_annotation(annotation_id)
    if annotation is None:
        raise NotFoundError("Annotation not found.")
    if annotation.annotator_id != user.id:
        raise ForbiddenError("You can only edit your own annotations.")
    if annotation.status != SUBMITTED:
        raise ForbiddenError(f"An annotation that is {annotation.status} can no longer be edited.")

    changes = patch.model_dump(exclude_unset=True)
    if "final_translation" in changes and not changes["final_translation"]:
        raise ValidationError("final_translation must not be empty.")
    for field, value in changes.items():
        setattr(annotation, field, value)
    annotation.updated_at = utcnow()
    return db.save_annotation(annotation)


def attach_voice_recording(
    user,
    annotation_id: Optional[int],
    audio_bytes: bytes,
    filename: Optional[str],
    content_type: Optional[str],
    duration: float,
    db: DatabaseService,
    storage: VoiceStorage,
) -> annotation_model.VoiceUploadResponse:
    """
    Stores a recording and, when `annotation_id` is given, links it to that
    annotation. Without an id the reference is only returned, for the client
    to send along with a later create or update.
    """
    if duration is None or duration < 0:
        raise ValidationError("Recording duration must be a non-negative number of seconds.")
    annotation = None
    if annotation_id is not None:
        annotation = _get_live_annotation(annotation_id, db)
        if annotation.annotator_id != user.id:
            raise ForbiddenError("You can only attach recordings to your own annotations.")

    reference = storage.save(user.id, audio_bytes, filename, content_type)

    if annotation is not None:
        annotation.voice_recording_url = reference
        annotation.voice_recording_duration = duration
        annotation.updated_at = utcnow()
        db.save_annotation(annotation)
    return annotation_model.VoiceUploadResponse(
        voice_recording_url=reference,
        voice_recording_duration=duration,
        annotation_id=annotation.id if annotation is not None else None,
    )


def delete(actor, annotation_id: int, db: DatabaseService):
    """
    Soft-deletes an annotation in a single transaction. Evaluations stay in
    place and remain queryable through the annotation id.
    """
    annotation = _get_live_annotation(annotation_id, db)
    if not actor.is_admin:
        if annotation.annotator_id != actor.id:
            raise ForbiddenError("You can only delete your own annotations.")
        if annotation.status != SUBMITTED:
            raise ForbiddenError(f"An annotation that is {annotation.status} can only be deleted by an admin.")
    annotation = db.soft_delete_annotation(annotation, actor.id, utcnow())
    logger.info("User %s deleted annotation %s", actor.id, annotation.id)
    return annotation


def archive(admin, annotation_id: int, db: DatabaseService):
    if not admin.is_admin:
        raise ForbiddenError("Only admins can archive annotations.")
    annotation = _get_live_annotation(annotation_id, db)
    if annotation.status not in (SUBMITTED, EVALUATED):
        raise InvalidStateError(f"An annotation that is {annotation.status} cannot be archived.")
    annotation.status = ARCHIVED
    annotation.updated_at = utcnow()
    annotation = db.save_annotation(annotation)
    logger.info("Admin %s archived annotation %s", admin.id, annotation.id)
    return annotation


# --- Queries ---

def get_annotation(actor, annotation_id: int, db: DatabaseService):
    annotation = _get_live_annotation(annotation_id, db)
    if annotation.annotator_id != actor.id and not (actor.is_admin or actor.is_evaluator):
        raise ForbiddenError("You cannot view this annotation.")
    return annotation


def get_my_annotations(user, db: DatabaseService, skip: int = 0, limit: int = 100) -> List:
    return db.list_annotations_by_annotator(user.id, skip, limit)


def get_all_annotations(db: DatabaseService, skip: int = 0, limit: int = 100, include_deleted: bool = False) -> List:
    return db.list_all_annotations(skip, limit, include_deleted)


def get_sentence_annotations(sentence_id: int, db: DatabaseService) -> List:
    if db.get_sentence(sentence_id) is None:
        raise NotFoundError("Sentence not found.")
    return db.list_annotations_by_sentence(sentence_id)


def get_annotation_evaluations(actor, annotation_id: int, db: DatabaseService) -> List:
    """Evaluations of an annotation. Also served for deleted annotations, whose history is preserved."""
    annotation = db.get_annotation(annotation_id)
    if annotation is None:
        raise NotFoundError("Annotation not found.")
    if annotation.annotator_id != actor.id and not (actor.is_admin or actor.is_evaluator):
        raise ForbiddenError("You cannot view the evaluations of this annotation.")
    return db.list_evaluations_by_annotation(annotation_id)
