# /annotation_backend/services/database_service.py

from typing import Dict, List, Optional, Sequence

from fastapi import Depends
from sqlalchemy.orm import Session

# --- Core Database Setup ---
from ..db.database import get_db

# --- Repository Imports ---
from .database_helpers.user_repository_sql import UserRepositorySQL
from .database_helpers.sentence_repository_sql import SentenceRepositorySQL
from .database_helpers.annotation_repository_sql import AnnotationRepositorySQL
from .database_helpers.mt_quality_repository_sql import MTQualityRepositorySQL
from .database_helpers.onboarding_repository_sql import OnboardingRepositorySQL


class DatabaseService:
    def __init__(self, db_session: Session):
        """
        Single entry point from the services to persistence. Every repository
        shares the one request-scoped session, so a service call sees its own
        writes.
        """
        if db_session is None:
            raise ValueError("A database session is required.")
        self.session = db_session
        self.user_repo = UserRepositorySQL(db_session)
        self.sentence_repo = SentenceRepositorySQL(db_session)
        self.annotation_repo = AnnotationRepositorySQL(db_session)
        self.mt_quality_repo = MTQualityRepositorySQL(db_session)
        self.onboarding_repo = OnboardingRepositorySQL(db_session)

    # --- USER METHODS (DELEGATED) ---
    def add_user(self, record: Dict): return self.user_repo.add_user(record)
    def get_user_by_id(self, user_id: int): return self.user_repo.get_user_by_id(user_id)
    def get_user_by_email(self, email: str): return self.user_repo.get_user_by_email(email)
    def get_user_by_username(self, username: str): return self.user_repo.get_user_by_username(username)
    def get_user_by_login(self, identifier: str): return self.user_repo.get_user_by_login(identifier)
    def list_users(self, skip: int = 0, limit: int = 100, role: Optional[str] = None, active: Optional[bool] = None, search: Optional[str] = None): return self.user_repo.list_users(skip, limit, role, active, search)
    def update_user(self, user, data: Dict): return self.user_repo.update_user(user, data)
    def count_user_dependencies(self, user_id: int) -> Dict[str, int]: return self.user_repo.count_dependencies(user_id)
    def delete_user(self, user) -> None: self.user_repo.delete_user(user)
    def get_users_as_dicts(self) -> List[Dict]: return self.user_repo.get_users_as_dicts()

    # --- SENTENCE METHODS (DELEGATED) ---
    def add_sentence(self, record: Dict): return self.sentence_repo.add_sentence(record)
    def get_sentence(self, sentence_id: int): return self.sentence_repo.get_sentence(sentence_id)
    def list_active_sentences(self, skip: int = 0, limit: int = 100): return self.sentence_repo.list_active(skip, limit)
    def list_sentences_for_admin(self, skip: int = 0, limit: int = 100, source_language: Optional[str] = None, target_language: Optional[str] = None): return self.sentence_repo.list_for_admin(skip, limit, source_language, target_language)
    def find_active_duplicate_sentence(self, source_text: str, source_language: str, target_language: str): return self.sentence_repo.find_active_duplicate(source_text, source_language, target_language)
    def count_sentences_by_language_pair(self) -> List[Dict]: return self.sentence_repo.counts_by_language_pair()
    def set_sentence_active(self, sentence, is_active: bool): return self.sentence_repo.set_active(sentence, is_active)
    def get_candidate_sentences(self, user_id: int, target_languages: Optional[Sequence[str]], skip: int = 0, limit: int = 1): return self.sentence_repo.get_candidates_for_user(user_id, target_languages, skip, limit)
    def count_active_sentences_in_languages(self, target_languages: Optional[Sequence[str]]) -> int: return self.sentence_repo.count_active_in_languages(target_languages)
    def get_sentences_as_dicts(self) -> List[Dict]: return self.sentence_repo.get_sentences_as_dicts()

    # --- ANNOTATION METHODS (DELEGATED) ---
    def add_annotation(self, record: Dict): return self.annotation_repo.add_annotation(record)
    def get_annotation(self, annotation_id: int): return self.annotation_repo.get_annotation(annotation_id)
    def save_annotation(self, annotation): return self.annotation_repo.save_annotation(annotation)
    def soft_delete_annotation(self, annotation, actor_id: int, when): return self.annotation_repo.soft_delete_annotation(annotation, actor_id, when)
    def list_annotations_by_annotator(self, annotator_id: int, skip: int = 0, limit: int = 100): return self.annotation_repo.list_by_annotator(annotator_id, skip, limit)
    def list_all_annotations(self, skip: int = 0, limit: int = 100, include_deleted: bool = False): return self.annotation_repo.list_all(skip, limit, include_deleted)
    def list_annotations_by_sentence(self, sentence_id: int): return self.annotation_repo.list_by_sentence(sentence_id)
    def list_pending_annotations_for_evaluator(self, evaluator_id: int, target_languages: Optional[Sequence[str]] = None, skip: int = 0, limit: int = 50): return self.annotation_repo.list_pending_for_evaluator(evaluator_id, target_languages, skip, limit)
    def count_pending_annotations_for_evaluator(self, evaluator_id: int, target_languages: Optional[Sequence[str]] = None) -> int: return self.annotation_repo.count_pending_for_evaluator(evaluator_id, target_languages)
    def get_annotations_as_dicts(self, annotator_id: Optional[int] = None) -> List[Dict]: return self.annotation_repo.get_annotations_as_dicts(annotator_id)

    # --- EVALUATION METHODS (DELEGATED) ---
    def add_evaluation(self, record: Dict, annotation=None, new_status: Optional[str] = None): return self.annotation_repo.add_evaluation(record, annotation, new_status)
    def get_evaluation(self, evaluation_id: int): return self.annotation_repo.get_evaluation(evaluation_id)
    def save_evaluation(self, evaluation): return self.annotation_repo.save_evaluation(evaluation)
    def list_evaluations_by_evaluator(self, evaluator_id: int, skip: int = 0, limit: int = 100): return self.annotation_repo.list_evaluations_by_evaluator(evaluator_id, skip, limit)
    def list_evaluations_by_annotation(self, annotation_id: int): return self.annotation_repo.list_evaluations_by_annotation(annotation_id)
    def list_all_evaluations(self, skip: int = 0, limit: int = 100): return self.annotation_repo.list_all_evaluations(skip, limit)
    def get_evaluations_as_dicts(self, evaluator_id: Optional[int] = None) -> List[Dict]: return self.annotation_repo.get_evaluations_as_dicts(evaluator_id)
    def get_received_evaluations_as_dicts(self, annotator_id: int) -> List[Dict]: return self.annotation_repo.get_received_evaluations_as_dicts(annotator_id)

    # --- MT QUALITY METHODS (DELEGATED) ---
    def get_assessment(self, assessment_id: int): return self.mt_quality_repo.get_assessment(assessment_id)
    def get_assessment_by_sentence(self, sentence_id: int): return self.mt_quality_repo.get_by_sentence(sentence_id)
    def claim_assessment_for_sentence(self, sentence_id: int, fields: Dict): return self.mt_quality_repo.claim_for_sentence(sentence_id, fields)
    def save_assessment(self, assessment): return self.mt_quality_repo.save_assessment(assessment)
    def list_assessments_for_user(self, user_id: int, skip: int = 0, limit: int = 100): return self.mt_quality_repo.list_for_user(user_id, skip, limit)
    def list_all_assessments(self, skip: int = 0, limit: int = 100): return self.mt_quality_repo.list_all(skip, limit)
    def list_sentences_pending_assessment(self, skip: int = 0, limit: int = 50): return self.mt_quality_repo.list_pending_sentences(skip, limit)
    def get_assessments_as_dicts(self) -> List[Dict]: return self.mt_quality_repo.get_assessments_as_dicts()

    # --- ONBOARDING METHODS (DELEGATED) ---
    def add_question(self, record: Dict): return self.onboarding_repo.add_question(record)
    def get_question(self, question_id: int): return self.onboarding_repo.get_question(question_id)
    def get_questions_by_ids(self, question_ids: Sequence[int]): return self.onboarding_repo.get_questions_by_ids(question_ids)
    def list_questions(self, languages: Optional[Sequence[str]] = None, active_only: bool = True): return self.onboarding_repo.list_questions(languages, active_only)
    def list_active_question_ids(self, language: str) -> List[int]: return self.onboarding_repo.list_active_question_ids(language)
    def update_question(self, question, data: Dict): return self.onboarding_repo.update_question(question, data)
    def question_has_answers(self, question_id: int) -> bool: return self.onboarding_repo.question_has_answers(question_id)
    def delete_question(self, question) -> None: self.onboarding_repo.delete_question(question)
    def add_onboarding_test(self, record: Dict): return self.onboarding_repo.add_test(record)
    def get_onboarding_test(self, test_id: int): return self.onboarding_repo.get_test(test_id)
    def list_onboarding_tests_by_user(self, user_id: int): return self.onboarding_repo.list_tests_by_user(user_id)
    def proficiency_session_exists(self, user_id: int, session_id: str) -> bool: return self.onboarding_repo.session_exists(user_id, session_id)
    def get_passed_languages(self, user_id: int) -> List[str]: return self.onboarding_repo.get_passed_languages(user_id)
    def submit_onboarding_test(self, user_id: int, test_id: int, result_fields: Dict, answers: List[Dict], user_updates: Dict): return self.onboarding_repo.submit_test(user_id, test_id, result_fields, answers, user_updates)
    def add_submitted_proficiency_session(self, user_id: int, tests: List[Dict], user_updates: Dict): return self.onboarding_repo.add_submitted_session(user_id, tests, user_updates)


# --- DEPENDENCY PROVIDER ---
def get_db_service(db: Session = Depends(get_db)) -> DatabaseService:
    """FastAPI dependency that wraps the request's session in a DatabaseService."""
    return DatabaseService(db_session=db)
