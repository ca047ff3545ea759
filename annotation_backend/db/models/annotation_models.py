# /annotation_backend/db/models/annotation_models.py

"""
SQLAlchemy models for `Annotation` (one user's translation of one sentence)
and `Evaluation` (one evaluator's judgment of one annotation).

Uniqueness invariants are enforced by the database so that concurrent
requests cannot race past a check-then-insert:
- at most one non-deleted annotation per (annotator, sentence), via a partial
  unique index;
- at most one evaluation per (evaluator, annotation), via a unique constraint.
"""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, String, Text, UniqueConstraint, text
from sqlalchemy.orm import relationship

from ..base_class import Base, utcnow


class Annotation(Base):
    id = Column(Integer, primary_key=True, index=True)
    annotator_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    sentence_id = Column(Integer, ForeignKey("sentences.id"), nullable=False, index=True)

    final_translation = Column(Text, nullable=False)
    fluency_score = Column(Integer, nullable=True)
    adequacy_score = Column(Integer, nullable=True)
    overall_quality = Column(Integer, nullable=True)
    comments = Column(Text, nullable=True)
    time_spent_seconds = Column(Integer, nullable=True)

    # Only the storage reference is kept; the audio bytes live in the voice store.
    voice_recording_url = Column(String, nullable=True)
    voice_recording_duration = Column(Float, nullable=True)

    # 'submitted' | 'evaluated' | 'archived' | 'deleted'. 'draft' is client-only.
    status = Column(String, nullable=False, default="submitted", index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    deleted_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    annotator = relationship("User", back_populates="annotations", foreign_keys=[annotator_id])
    sentence = relationship("Sentence", back_populates="annotations")
    # Evaluations outlive a (soft) deleted annotation, so no cascade here.
    evaluations = relationship("Evaluation", back_populates="annotation")

    __table_args__ = (
        Index(
            "uq_annotations_active_annotator_sentence",
            "annotator_id",
            "sentence_id",
            unique=True,
            sqlite_where=text("status != 'deleted'"),
            postgresql_where=text("status != 'deleted'"),
        ),
    )


class Evaluation(Base):
    id = Column(Integer, primary_key=True, index=True)
    annotation_id = Column(Integer, ForeignKey("annotations.id"), nullable=False, index=True)
    evaluator_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    score = Column(Float, nullable=False)
    accuracy_score = Column(Integer, nullable=True)
    fluency_score = Column(Integer, nullable=True)
    feedback = Column(Text, nullable=True)
    time_spent_seconds = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    annotation = relationship("Annotation", back_populates="evaluations")
    evaluator = relationship("User", back_populates="evaluations")

    __table_args__ = (
        UniqueConstraint("evaluator_id", "annotation_id", name="uq_evaluations_evaluator_annotation"),
    )
