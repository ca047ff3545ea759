# /annotation_backend/services/database_helpers/mt_quality_repository_sql.py

"""
Raw SQLAlchemy queries for MT-quality assessments.

`sentence_id` is unique on the table, so `claim_for_sentence` is an upsert:
it either inserts the one row for a sentence or returns the row that is
already there, also when a concurrent request inserted it first.
"""

from typing import Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...db.models.mt_quality_models import MTQualityAssessment
from ...db.models.sentence_models import Sentence
from .user_repository_sql import _as_dicts


class MTQualityRepositorySQL:
    def __init__(self, db_session: Session):
        self.db = db_session

    def get_assessment(self, assessment_id: int) -> Optional[MTQualityAssessment]:
        return self.db.query(MTQualityAssessment).filter(MTQualityAssessment.id == assessment_id).first()

    def get_by_sentence(self, sentence_id: int) -> Optional[MTQualityAssessment]:
        return self.db.query(MTQualityAssessment).filter(MTQualityAssessment.sentence_id == sentence_id).first()

    def claim_for_sentence(self, sentence_id: int, fields: Dict) -> MTQualityAssessment:
        """
        Writes `fields` onto the single assessment row of a sentence, creating
        it if needed, and commits.
        """
        existing = self.get_by_sentence(sentence_id)
        if existing is None:
            existing = MTQualityAssessment(sentence_id=sentence_id, **fields)
            self.db.add(existing)
            try:
                self.db.commit()
            except IntegrityError:
                # Lost the insert race; fall through to update the winner's row.
                self.db.rollback()
                existing = self.get_by_sentence(sentence_id)
                if existing is None:
                    raise
            else:
                self.db.refresh(existing)
                return existing
        for key, value in fields.items():
            setattr(existing, key, value)
        self.db.commit()
        self.db.refresh(existing)
        return existing

    def save_assessment(self, assessment: MTQualityAssessment) -> MTQualityAssessment:
        self.db.commit()
        self.db.refresh(assessment)
        return assessment

    def list_for_user(self, user_id: int, skip: int = 0, limit: int = 100) -> List[MTQualityAssessment]:
        return (
            self.db.query(MTQualityAssessment)
            .filter(or_(MTQualityAssessment.requested_by_id == user_id, MTQualityAssessment.reviewed_by_id == user_id))
            .order_by(MTQualityAssessment.updated_at.desc(), MTQualityAssessment.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def list_all(self, skip: int = 0, limit: int = 100) -> List[MTQualityAssessment]:
        return self.db.query(MTQualityAssessment).order_by(MTQualityAssessment.id.asc()).offset(skip).limit(limit).all()

    def list_pending_sentences(self, skip: int = 0, limit: int = 50) -> List[Sentence]:
        """Active sentences with a machine translation and no finished assessment."""
        return (
            self.db.query(Sentence)
            .outerjoin(MTQualityAssessment, MTQualityAssessment.sentence_id == Sentence.id)
            .filter(
                Sentence.is_active.is_(True),
                Sentence.machine_translation.isnot(None),
                Sentence.machine_translation != "",
                or_(MTQualityAssessment.id.is_(None), MTQualityAssessment.status == "pending"),
            )
            .order_by(Sentence.id.asc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    # --- Stats Helpers ---

    def get_assessments_as_dicts(self) -> List[Dict]:
        return _as_dicts(self.db.query(MTQualityAssessment).all())
