# /annotation_backend/services/database_helpers/annotation_repository_sql.py

"""
Raw SQLAlchemy queries for the Annotation and Evaluation tables.

Inserts rely on the database constraints for uniqueness: an IntegrityError is
rolled back and re-raised for the calling service to translate into the
matching domain error. Every multi-row change commits exactly once.
"""

from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ...db.models.annotation_models import Annotation, Evaluation
from ...db.models.sentence_models import Sentence
from .user_repository_sql import _as_dicts

DELETED = "deleted"


class AnnotationRepositorySQL:
    def __init__(self, db_session: Session):
        self.db = db_session

    def _commit(self):
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise

    # --- Annotation Methods ---

    def add_annotation(self, record: Dict) -> Annotation:
        """Inserts an annotation; a live duplicate for (annotator, sentence) raises IntegrityError."""
        new_annotation = Annotation(**record)
        self.db.add(new_annotation)
        self._commit()
        self.db.refresh(new_annotation)
        return new_annotation

    def get_annotation(self, annotation_id: int) -> Optional[Annotation]:
        return self.db.query(Annotation).filter(Annotation.id == annotation_id).first()

    def save_annotation(self, annotation: Annotation) -> Annotation:
        self._commit()
        self.db.refresh(annotation)
        return annotation

    def soft_delete_annotation(self, annotation: Annotation, actor_id: int, when: datetime) -> Annotation:
        """
        Marks the annotation deleted in a single commit. Its evaluations are
        left in place and keep referencing it.
        """
        annotation.status = DELETED
        annotation.deleted_at = when
        annotation.deleted_by_id = actor_id
        annotation.updated_at = when
        self._commit()
        self.db.refresh(annotation)
        return annotation

    def list_by_annotator(self, annotator_id: int, skip: int = 0, limit: int = 100) -> List[Annotation]:
        return (
            self.db.query(Annotation)
            .options(joinedload(Annotation.sentence))
            .filter(Annotation.annotator_id == annotator_id, Annotation.status != DELETED)
            .order_by(Annotation.created_at.desc(), Annotation.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def list_all(self, skip: int = 0, limit: int = 100, include_deleted: bool = False) -> List[Annotation]:
        query = self.db.query(Annotation)
        if not include_deleted:
            query = query.filter(Annotation.status != DELETED)
        return query.order_by(Annotation.id.asc()).offset(skip).limit(limit).all()

    def list_by_sentence(self, sentence_id: int) -> List[Annotation]:
        return (
            self.db.query(Annotation)
            .filter(Annotation.sentence_id == sentence_id, Annotation.status != DELETED)
            .order_by(Annotation.id.asc())
            .all()
        )

    def _pending_for_evaluator(self, query, evaluator_id: int, target_languages: Optional[Sequence[str]]):
        already_reviewed = (
            select(Evaluation.id)
            .where(Evaluation.annotation_id == Annotation.id, Evaluation.evaluator_id == evaluator_id)
            .exists()
        )
        query = query.filter(
            Annotation.status.in_(["submitted", "evaluated"]),
            Annotation.annotator_id != evaluator_id,
            ~already_reviewed,
        )
        if target_languages is not None:
            query = query.join(Sentence, Sentence.id == Annotation.sentence_id).filter(
                Sentence.target_language.in_(list(target_languages))
            )
        return query

    def list_pending_for_evaluator(
        self,
        evaluator_id: int,
        target_languages: Optional[Sequence[str]] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[Annotation]:
        """
        Live annotations the evaluator neither owns nor has evaluated yet, least
        reviewed first. `target_languages` of None means every language.
        """
        evaluation_count = (
            select(func.count(Evaluation.id))
            .where(Evaluation.annotation_id == Annotation.id)
            .correlate(Annotation)
            .scalar_subquery()
        )
        query = self.db.query(Annotation).options(joinedload(Annotation.sentence))
        return (
            self._pending_for_evaluator(query, evaluator_id, target_languages)
            .order_by(evaluation_count.asc(), Annotation.id.asc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_pending_for_evaluator(self, evaluator_id: int, target_languages: Optional[Sequence[str]] = None) -> int:
        query = self.db.query(func.count(Annotation.id))
        return self._pending_for_evaluator(query, evaluator_id, target_languages).scalar() or 0

    # --- Evaluation Methods ---

    def add_evaluation(self, record: Dict, annotation: Optional[Annotation] = None, new_status: Optional[str] = None) -> Evaluation:
        """
        Inserts an evaluation and, in the same commit, moves the annotation to
        `new_status` when given. A duplicate (evaluator, annotation) pair
        raises IntegrityError and nothing is written.
        """
        new_evaluation = Evaluation(**record)
        self.db.add(new_evaluation)
        if annotation is not None and new_status is not None:
            annotation.status = new_status
        self._commit()
        self.db.refresh(new_evaluation)
        return new_evaluation

    def get_evaluation(self, evaluation_id: int) -> Optional[Evaluation]:
        return self.db.query(Evaluation).filter(Evaluation.id == evaluation_id).first()

    def save_evaluation(self, evaluation: Evaluation) -> Evaluation:
        self._commit()
        self.db.refresh(evaluation)
        return evaluation

    def list_evaluations_by_evaluator(self, evaluator_id: int, skip: int = 0, limit: int = 100) -> List[Evaluation]:
        return (
            self.db.query(Evaluation)
            .filter(Evaluation.evaluator_id == evaluator_id)
            .order_by(Evaluation.created_at.desc(), Evaluation.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def list_evaluations_by_annotation(self, annotation_id: int) -> List[Evaluation]:
        return (
            self.db.query(Evaluation)
            .filter(Evaluation.annotation_id == annotation_id)
            .order_by(Evaluation.id.asc())
            .all()
        )

    def list_all_evaluations(self, skip: int = 0, limit: int = 100) -> List[Evaluation]:
        return self.db.query(Evaluation).order_by(Evaluation.id.asc()).offset(skip).limit(limit).all()

    # --- Stats Helpers ---

    def get_annotations_as_dicts(self, annotator_id: Optional[int] = None) -> List[Dict]:
        query = self.db.query(Annotation)
        if annotator_id is not None:
            query = query.filter(Annotation.annotator_id == annotator_id)
        return _as_dicts(query.all())

    def get_evaluations_as_dicts(self, evaluator_id: Optional[int] = None) -> List[Dict]:
        query = self.db.query(Evaluation)
        if evaluator_id is not None:
            query = query.filter(Evaluation.evaluator_id == evaluator_id)
        return _as_dicts(query.all())

    def get_received_evaluations_as_dicts(self, annotator_id: int) -> List[Dict]:
        """Evaluations of the annotator's live annotations."""
        rows = (
            self.db.query(Evaluation)
            .join(Annotation, Evaluation.annotation_id == Annotation.id)
            .filter(Annotation.annotator_id == annotator_id, Annotation.status != DELETED)
            .all()
        )
        return _as_dicts(rows)
