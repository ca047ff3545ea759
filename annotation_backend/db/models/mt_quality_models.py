# /annotation_backend/db/models/mt_quality_models.py

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import relationship

from ..base_class import Base, utcnow


class MTQualityAssessment(Base):
    """
    The single assessment of a sentence's machine translation.

    `sentence_id` is unique: re-assessing a sentence rewrites this row, which
    also makes batch re-submission idempotent. The automated fields are
    written by the scoring pass; the human fields hold the latest review only.
    """
    __tablename__ = "mt_quality_assessments"

    id = Column(Integer, primary_key=True, index=True)
    sentence_id = Column(Integer, ForeignKey("sentences.id"), nullable=False, unique=True, index=True)
    requested_by_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    # 'pending' | 'assessed' | 'human_reviewed'
    status = Column(String, nullable=False, default="pending", index=True)

    # Automated scoring pass (0-100 scale).
    fluency_score = Column(Float, nullable=True)
    adequacy_score = Column(Float, nullable=True)
    overall_quality_score = Column(Float, nullable=True)
    confidence = Column(Float, nullable=True)
    explanation = Column(Text, nullable=True)
    errors = Column(JSON, nullable=False, default=list)
    suggestions = Column(JSON, nullable=False, default=list)
    model_name = Column(String, nullable=True)
    last_error = Column(Text, nullable=True)
    assessed_at = Column(DateTime(timezone=True), nullable=True)

    # Latest human review.
    human_score = Column(Float, nullable=True)
    human_feedback = Column(Text, nullable=True)
    reviewed_by_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    sentence = relationship("Sentence", back_populates="mt_assessment")
