# /annotation_backend/db/base.py

# Central registry for all SQLAlchemy models. Importing them here ensures the
# Base metadata knows about every table when `create_all` or Alembic runs.

from .base_class import Base

from .models.user_models import User
from .models.sentence_models import Sentence
from .models.annotation_models import Annotation, Evaluation
from .models.mt_quality_models import MTQualityAssessment
from .models.onboarding_models import LanguageProficiencyQuestion, OnboardingTest, UserQuestionAnswer
