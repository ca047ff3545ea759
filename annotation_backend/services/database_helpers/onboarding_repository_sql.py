# /annotation_backend/services/database_helpers/onboarding_repository_sql.py

from typing import Dict, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...db.models.onboarding_models import LanguageProficiencyQuestion, OnboardingTest, UserQuestionAnswer
from ...db.models.user_models import User


class OnboardingRepositorySQL:
    """Queries for the proficiency question bank, onboarding tests and their answers."""

    def __init__(self, db_session: Session):
        self.db = db_session

    # --- Question Bank ---

    def add_question(self, record: Dict) -> LanguageProficiencyQuestion:
        question = LanguageProficiencyQuestion(**record)
        self.db.add(question)
        self.db.commit()
        self.db.refresh(question)
        return question

    def get_question(self, question_id: int) -> Optional[LanguageProficiencyQuestion]:
        return self.db.query(LanguageProficiencyQuestion).filter(LanguageProficiencyQuestion.id == question_id).first()

    def get_questions_by_ids(self, question_ids: Sequence[int]) -> List[LanguageProficiencyQuestion]:
        if not question_ids:
            return []
        return (
            self.db.query(LanguageProficiencyQuestion)
            .filter(LanguageProficiencyQuestion.id.in_(list(question_ids)))
            .all()
        )

    def list_questions(self, languages: Optional[Sequence[str]] = None, active_only: bool = True) -> List[LanguageProficiencyQuestion]:
        query = self.db.query(LanguageProficiencyQuestion)
        if active_only:
            query = query.filter(LanguageProficiencyQuestion.is_active.is_(True))
        if languages is not None:
            query = query.filter(LanguageProficiencyQuestion.language.in_(list(languages)))
        return query.order_by(LanguageProficiencyQuestion.language, LanguageProficiencyQuestion.id).all()

    def list_active_question_ids(self, language: str) -> List[int]:
        rows = (
            self.db.query(LanguageProficiencyQuestion.id)
            .filter(LanguageProficiencyQuestion.language == language, LanguageProficiencyQuestion.is_active.is_(True))
            .order_by(LanguageProficiencyQuestion.id)
            .all()
        )
        return [row.id for row in rows]

    def update_question(self, question: LanguageProficiencyQuestion, data: Dict) -> LanguageProficiencyQuestion:
        for key, value in data.items():
            setattr(question, key, value)
        self.db.commit()
        self.db.refresh(question)
        return question

    def question_has_answers(self, question_id: int) -> bool:
        count = (
            self.db.query(func.count(UserQuestionAnswer.id))
            .filter(UserQuestionAnswer.question_id == question_id)
            .scalar()
        )
        return bool(count)

    def delete_question(self, question: LanguageProficiencyQuestion) -> None:
        self.db.delete(question)
        self.db.commit()

    # --- Tests ---

    def add_test(self, record: Dict) -> OnboardingTest:
        test = OnboardingTest(**record)
        self.db.add(test)
        self.db.commit()
        self.db.refresh(test)
        return test

    def get_test(self, test_id: int) -> Optional[OnboardingTest]:
        return self.db.query(OnboardingTest).filter(OnboardingTest.id == test_id).first()

    def list_tests_by_user(self, user_id: int) -> List[OnboardingTest]:
        return (
            self.db.query(OnboardingTest)
            .filter(OnboardingTest.user_id == user_id)
            .order_by(OnboardingTest.created_at.desc(), OnboardingTest.id.desc())
            .all()
        )

    def session_exists(self, user_id: int, session_id: str) -> bool:
        return (
            self.db.query(OnboardingTest.id)
            .filter(OnboardingTest.user_id == user_id, OnboardingTest.session_id == session_id)
            .first()
            is not None
        )

    def get_passed_languages(self, user_id: int) -> List[str]:
        rows = (
            self.db.query(OnboardingTest.language)
            .filter(
                OnboardingTest.user_id == user_id,
                OnboardingTest.status == "submitted",
                OnboardingTest.passed.is_(True),
            )
            .distinct()
            .all()
        )
        return sorted(row.language for row in rows)

    def submit_test(
        self,
        user_id: int,
        test_id: int,
        result_fields: Dict,
        answers: List[Dict],
        user_updates: Dict,
    ) -> Optional[OnboardingTest]:
        """
        Atomically performs the one-shot `created -> submitted` transition.

        The status change is a conditional UPDATE so two concurrent submissions
        cannot both succeed; answers and user updates are written in the same
        commit. Returns None, with nothing written, when the test was no longer
        in the `created` state.
        """
        claimed = (
            self.db.query(OnboardingTest)
            .filter(OnboardingTest.id == test_id, OnboardingTest.status == "created")
            .update({**result_fields, "status": "submitted"}, synchronize_session=False)
        )
        if claimed != 1:
            self.db.rollback()
            return None
        for answer in answers:
            self.db.add(UserQuestionAnswer(user_id=user_id, test_id=test_id, **answer))
        if user_updates:
            user = self.db.query(User).filter(User.id == user_id).first()
            for key, value in user_updates.items():
                setattr(user, key, value)
        self.db.commit()
        test = self.get_test(test_id)
        self.db.refresh(test)
        return test

    def add_submitted_session(
        self,
        user_id: int,
        tests: List[Dict],
        user_updates: Dict,
    ) -> List[OnboardingTest]:
        """
        Records the per-language tests of one proficiency session, with their
        answers, in a single commit. A repeated (user, session, language)
        raises IntegrityError after rollback.
        """
        created = []
        try:
            for fields in tests:
                answers = fields.pop("answers")
                test = OnboardingTest(user_id=user_id, status="submitted", **fields)
                self.db.add(test)
                self.db.flush()
                for answer in answers:
                    self.db.add(UserQuestionAnswer(user_id=user_id, test_id=test.id, **answer))
                created.append(test)
            if user_updates:
                user = self.db.query(User).filter(User.id == user_id).first()
                for key, value in user_updates.items():
                    setattr(user, key, value)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise
        for test in created:
            self.db.refresh(test)
        return created
