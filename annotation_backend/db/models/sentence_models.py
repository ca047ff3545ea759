# /annotation_backend/db/models/sentence_models.py

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import relationship, validates

from ...core.languages import normalize_language
from ..base_class import Base, utcnow


class Sentence(Base):
    """
    An immutable source sentence (plus its optional machine translation) to be
    annotated for one language pair. Sentences are deactivated, never deleted,
    once anyone has annotated them.
    """
    id = Column(Integer, primary_key=True, index=True)
    source_text = Column(Text, nullable=False)
    machine_translation = Column(Text, nullable=True)
    source_language = Column(String, nullable=False, index=True)
    target_language = Column(String, nullable=False, index=True)
    domain = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    annotations = relationship("Annotation", back_populates="sentence")
    mt_assessment = relationship("MTQualityAssessment", back_populates="sentence", uselist=False)

    __table_args__ = (
        Index("ix_sentences_language_pair", "source_language", "target_language"),
    )

    @validates("source_language", "target_language")
    def _normalize_language(self, key, value):
        return normalize_language(value)
