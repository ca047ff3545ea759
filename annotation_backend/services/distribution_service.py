# /annotation_backend/services/distribution_service.py

"""
Hands out the next sentence to annotate.

Selection is advisory and read-only: two users may be offered the same
sentence, and the annotation write path re-validates eligibility and
uniqueness on its own. Balancing comes from always preferring the sentence
with the fewest live annotations.
"""

from typing import List, Optional

from .database_service import DatabaseService
from .proficiency_service import eligible_languages


def next_sentence_for(user, db: DatabaseService):
    """Returns the best candidate sentence for `user`, or None when nothing is left."""
    candidates = db.get_candidate_sentences(user.id, eligible_languages(user, db), skip=0, limit=1)
    return candidates[0] if candidates else None


def unannotated_for(user, db: DatabaseService, skip: int = 0, limit: int = 100) -> List:
    """The same candidate set as `next_sentence_for`, in the same order, paginated."""
    return db.get_candidate_sentences(user.id, eligible_languages(user, db), skip=skip, limit=limit)
