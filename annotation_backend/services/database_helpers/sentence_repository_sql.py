# /annotation_backend/services/database_helpers/sentence_repository_sql.py

"""
Raw SQLAlchemy queries for the Sentence table, including the candidate query
behind the sentence distributor.
"""

from typing import Dict, List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ...db.models.annotation_models import Annotation
from ...db.models.sentence_models import Sentence
from .user_repository_sql import _as_dicts

DELETED = "deleted"


class SentenceRepositorySQL:
    def __init__(self, db_session: Session):
        self.db = db_session

    def add_sentence(self, record: Dict) -> Sentence:
        new_sentence = Sentence(**record)
        self.db.add(new_sentence)
        self.db.commit()
        self.db.refresh(new_sentence)
        return new_sentence

    def get_sentence(self, sentence_id: int) -> Optional[Sentence]:
        return self.db.query(Sentence).filter(Sentence.id == sentence_id).first()

    def list_active(self, skip: int = 0, limit: int = 100) -> List[Sentence]:
        return (
            self.db.query(Sentence)
            .filter(Sentence.is_active.is_(True))
            .order_by(Sentence.id.asc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def list_for_admin(
        self,
        skip: int = 0,
        limit: int = 100,
        source_language: Optional[str] = None,
        target_language: Optional[str] = None,
    ) -> List[Sentence]:
        query = self.db.query(Sentence)
        if source_language:
            query = query.filter(Sentence.source_language == source_language)
        if target_language:
            query = query.filter(Sentence.target_language == target_language)
        return query.order_by(Sentence.id.asc()).offset(skip).limit(limit).all()

    def find_active_duplicate(self, source_text: str, source_language: str, target_language: str) -> Optional[Sentence]:
        return (
            self.db.query(Sentence)
            .filter(
                Sentence.is_active.is_(True),
                Sentence.source_text == source_text,
                Sentence.source_language == source_language,
                Sentence.target_language == target_language,
            )
            .first()
        )

    def counts_by_language_pair(self) -> List[Dict]:
        rows = (
            self.db.query(Sentence.source_language, Sentence.target_language, func.count(Sentence.id))
            .filter(Sentence.is_active.is_(True))
            .group_by(Sentence.source_language, Sentence.target_language)
            .order_by(Sentence.source_language, Sentence.target_language)
            .all()
        )
        return [{"source_language": s, "target_language": t, "count": c} for s, t, c in rows]

    def set_active(self, sentence: Sentence, is_active: bool) -> Sentence:
        sentence.is_active = is_active
        self.db.commit()
        self.db.refresh(sentence)
        return sentence

    # --- Distribution Queries ---

    def _candidate_query(self, user_id: int, target_languages: Optional[Sequence[str]]):
        live_count = (
            select(func.count(Annotation.id))
            .where(Annotation.sentence_id == Sentence.id, Annotation.status != DELETED)
            .correlate(Sentence)
            .scalar_subquery()
        )
        already_mine = (
            select(Annotation.id)
            .where(
                Annotation.sentence_id == Sentence.id,
                Annotation.annotator_id == user_id,
                Annotation.status != DELETED,
            )
            .exists()
        )
        query = self.db.query(Sentence).filter(Sentence.is_active.is_(True), ~already_mine)
        if target_languages is not None:
            query = query.filter(Sentence.target_language.in_(list(target_languages)))
        # Fewest live annotations first; lowest id breaks ties.
        return query.order_by(live_count.asc(), Sentence.id.asc())

    def get_candidates_for_user(
        self,
        user_id: int,
        target_languages: Optional[Sequence[str]],
        skip: int = 0,
        limit: int = 1,
    ) -> List[Sentence]:
        """
        Active sentences the user has no live annotation for, restricted to
        `target_languages` (None means unrestricted), ordered for load balancing.
        """
        if target_languages is not None and not target_languages:
            return []
        return self._candidate_query(user_id, target_languages).offset(skip).limit(limit).all()

    def count_active_in_languages(self, target_languages: Optional[Sequence[str]]) -> int:
        query = self.db.query(func.count(Sentence.id)).filter(Sentence.is_active.is_(True))
        if target_languages is not None:
            if not target_languages:
                return 0
            query = query.filter(Sentence.target_language.in_(list(target_languages)))
        return query.scalar() or 0

    # --- Stats Helpers ---

    def get_sentences_as_dicts(self) -> List[Dict]:
        return _as_dicts(self.db.query(Sentence).all())
