# /annotation_backend/services/quality_scorer.py

"""
The seam between the MT-quality pipeline and whatever model produces the
scores. The pipeline only knows the `QualityScorer` protocol; the default
implementation asks Gemini for a JSON verdict and validates it against the
`QualityScore` contract before anything is stored.
"""

import logging
from typing import Protocol

from pydantic import ValidationError as PydanticValidationError

from ..core.config import settings
from ..core.errors import ScoringError
from ..db.models.sentence_models import Sentence
from ..models.mt_quality_model import QualityScore
from . import gemini_service
from .prompt_library import MT_QUALITY_ASSESSMENT_PROMPT

logger = logging.getLogger(__name__)


class QualityScorer(Protocol):
    async def score(self, sentence: Sentence) -> QualityScore:
        ...


class GeminiQualityScorer:
    """Scores a sentence's machine translation with a single Gemini JSON-mode call."""

    def __init__(self, model_name: str = None):
        self.model_name = model_name or settings.GEMINI_MODEL

    async def score(self, sentence: Sentence) -> QualityScore:
        prompt = MT_QUALITY_ASSESSMENT_PROMPT.format(
            source_language=sentence.source_language,
            target_language=sentence.target_language,
            domain=sentence.domain or "general",
            source_text=sentence.source_text,
            machine_translation=sentence.machine_translation,
        )
        raw = await gemini_service.generate_json(prompt)
        if not isinstance(raw, dict):
            raise ScoringError("The scoring model did not return a JSON object.")
        raw.setdefault("model_name", self.model_name)
        try:
            return QualityScore.model_validate(raw)
        except PydanticValidationError as e:
            logger.warning("Rejected malformed score for sentence %s: %s", sentence.id, e)
            raise ScoringError(f"The scoring model returned an invalid assessment: {e.error_count()} field error(s).") from e


_default_scorer = None


def get_quality_scorer() -> QualityScorer:
    """FastAPI dependency for the scoring collaborator; overridden in tests."""
    global _default_scorer
    if _default_scorer is None:
        _default_scorer = GeminiQualityScorer()
    return _default_scorer
