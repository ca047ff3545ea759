# /tests/test_proficiency_service.py

import pytest
from sqlalchemy.exc import IntegrityError

from annotation_backend.core.errors import ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from annotation_backend.models.onboarding_model import (
    LanguageProficiencyQuestionCreate,
    LanguageProficiencyQuestionUpdate,
    OnboardingTestAnswer,
    ProficiencySubmission,
    UserQuestionAnswer,
)
from annotation_backend.services import proficiency_service


@pytest.fixture
def french_bank(make_question):
    """Five French questions whose correct answer is always option 1."""
    return [make_question(language="French", correct_answer=1) for _ in range(5)]


def _answer_all(test, choice):
    return [OnboardingTestAnswer(question_id=q.id, selected_answer=choice) for q in test.questions]


# --- Eligibility ---

def test_new_user_is_not_eligible_until_passing(make_user, db_service):
    user = make_user()
    assert proficiency_service.eligible_languages(user, db_service) == []
    assert proficiency_service.is_eligible(user, ("English", "French"), db_service) is False


def test_skip_onboarding_without_languages_is_unrestricted(make_user, db_service):
    user = make_user(skip_onboarding=True)
    assert proficiency_service.eligible_languages(user, db_service) is None
    assert proficiency_service.is_eligible(user, ("English", "Swahili"), db_service) is True


def test_skip_onboarding_uses_declared_languages_case_insensitively(make_user, db_service):
    user = make_user(skip_onboarding=True, languages=["french"])
    assert proficiency_service.is_eligible(user, ("english", "FRENCH"), db_service) is True
    assert proficiency_service.is_eligible(user, ("English", "German"), db_service) is False


def test_inactive_user_is_never_eligible(make_user, db_service):
    user = make_user(skip_onboarding=True, is_active=False)
    assert proficiency_service.eligible_languages(user, db_service) == []


# --- Onboarding Tests ---

def test_create_test_samples_active_questions(make_user, db_service, french_bank, make_question):
    make_question(language="French", is_active=False)
    user = make_user()
    test = proficiency_service.create_test(user, "french", db_service)

    assert test.language == "French"
    assert test.status.value == "created"
    assert {q.id for q in test.questions} == {q.id for q in french_bank}
    # The public view never exposes the answer key.
    assert "correct_answer" not in test.questions[0].model_dump()


def test_create_test_without_questions_fails(make_user, db_service):
    with pytest.raises(ValidationError):
        proficiency_service.create_test(make_user(), "Klingon", db_service)


def test_passing_test_grants_eligibility(make_user, db_service, french_bank):
    user = make_user()
    test = proficiency_service.create_test(user, "French", db_service)

    result = proficiency_service.record_test_result(user, test.id, _answer_all(test, 1), db_service)

    assert result.passed is True
    assert result.score == 1.0
    assert result.language_results[0].proficiency_level == "advanced"
    db_service.session.refresh(user)
    assert user.onboarding_completed is True
    assert user.proficiency_levels == {"French": "advanced"}
    assert proficiency_service.is_eligible(user, ("English", "French"), db_service) is True


def test_unanswered_questions_count_as_wrong(make_user, db_service, french_bank):
    user = make_user()
    test = proficiency_service.create_test(user, "French", db_service)
    answers = _answer_all(test, 1)[:2]

    result = proficiency_service.record_test_result(user, test.id, answers, db_service)

    assert result.total_questions == 5
    assert result.correct_answers == 2
    assert result.passed is False
    assert proficiency_service.is_eligible(user, ("English", "French"), db_service) is False


def test_test_can_only_be_submitted_once(make_user, db_service, french_bank):
    user = make_user()
    test = proficiency_service.create_test(user, "French", db_service)
    first = proficiency_service.record_test_result(user, test.id, _answer_all(test, 0), db_service)
    assert first.passed is False

    with pytest.raises(InvalidStateError):
        proficiency_service.record_test_result(user, test.id, _answer_all(test, 1), db_service)

    stored = db_service.get_onboarding_test(test.id)
    assert stored.score == 0.0
    assert stored.passed is False


def test_submitting_someone_elses_test_is_forbidden(make_user, db_service, french_bank):
    owner, other = make_user(), make_user()
    test = proficiency_service.create_test(owner, "French", db_service)
    with pytest.raises(ForbiddenError):
        proficiency_service.record_test_result(other, test.id, [], db_service)


def test_submitting_unknown_test_is_not_found(make_user, db_service):
    with pytest.raises(NotFoundError):
        proficiency_service.record_test_result(make_user(), 999, [], db_service)


def test_answers_outside_the_test_are_rejected(make_user, db_service, french_bank, make_question):
    stray = make_question(language="German")
    user = make_user()
    test = proficiency_service.create_test(user, "French", db_service)
    with pytest.raises(ValidationError):
        proficiency_service.record_test_result(
            user, test.id, [OnboardingTestAnswer(question_id=stray.id, selected_answer=0)], db_service
        )


def test_duplicate_answers_are_rejected(make_user, db_service, french_bank):
    user = make_user()
    test = proficiency_service.create_test(user, "French", db_service)
    qid = test.questions[0].id
    answers = [OnboardingTestAnswer(question_id=qid, selected_answer=1), OnboardingTestAnswer(question_id=qid, selected_answer=0)]
    with pytest.raises(ValidationError):
        proficiency_service.record_test_result(user, test.id, answers, db_service)


def test_get_test_is_owner_or_admin_only(make_user, admin, db_service, french_bank):
    owner, other = make_user(), make_user()
    test = proficiency_service.create_test(owner, "French", db_service)
    assert proficiency_service.get_test(admin, test.id, db_service).id == test.id
    with pytest.raises(ForbiddenError):
        proficiency_service.get_test(other, test.id, db_service)


# --- Proficiency-Question Sessions ---

def test_session_records_one_test_per_language(make_user, make_question, db_service):
    french = [make_question(language="French", correct_answer=2) for _ in range(3)]
    german = [make_question(language="German", correct_answer=0) for _ in range(2)]
    user = make_user()
    answers = [UserQuestionAnswer(question_id=q.id, selected_answer=2) for q in french]
    answers += [UserQuestionAnswer(question_id=q.id, selected_answer=3) for q in german]

    result = proficiency_service.submit_proficiency_answers(
        user, ProficiencySubmission(test_session_id="sess-1", answers=answers, languages=["french", "GERMAN"]), db_service
    )

    by_language = {r.language: r for r in result.language_results}
    assert by_language["French"].passed is True
    assert by_language["German"].passed is False
    assert result.passed is False
    assert result.total_questions == 5
    assert proficiency_service.eligible_languages(user, db_service) == ["French"]
    db_service.session.refresh(user)
    assert "French" in user.languages
    assert len(db_service.list_onboarding_tests_by_user(user.id)) == 2


def test_session_cannot_be_submitted_twice(make_user, make_question, db_service):
    question = make_question(language="French", correct_answer=0)
    user = make_user()
    submission = ProficiencySubmission(
        test_session_id="sess-dup",
        answers=[UserQuestionAnswer(question_id=question.id, selected_answer=0)],
        languages=["French"],
    )
    proficiency_service.submit_proficiency_answers(user, submission, db_service)

    with pytest.raises(InvalidStateError):
        proficiency_service.submit_proficiency_answers(user, submission, db_service)
    assert len(db_service.list_onboarding_tests_by_user(user.id)) == 1


def test_session_id_cannot_be_reused_for_other_languages(make_user, make_question, db_service):
    french, german = make_question(language="French"), make_question(language="German")
    user = make_user()
    proficiency_service.submit_proficiency_answers(
        user,
        ProficiencySubmission(
            test_session_id="s1",
            answers=[UserQuestionAnswer(question_id=french.id, selected_answer=0)],
            languages=["French"],
        ),
        db_service,
    )

    with pytest.raises(InvalidStateError):
        proficiency_service.submit_proficiency_answers(
            user,
            ProficiencySubmission(
                test_session_id="s1",
                answers=[UserQuestionAnswer(question_id=german.id, selected_answer=0)],
                languages=["German"],
            ),
            db_service,
        )
    assert [t.language for t in db_service.list_onboarding_tests_by_user(user.id)] == ["French"]


def test_duplicate_session_insert_leaves_session_usable(make_user, make_question, db_service):
    question = make_question(language="French")
    user = make_user()

    def session_rows():
        return [{
            "language": "French",
            "session_id": "sess-dup",
            "question_ids": [question.id],
            "score": 100.0,
            "passed": True,
            "answers": [{"question_id": question.id, "selected_answer": 0, "is_correct": True}],
        }]

    db_service.add_submitted_proficiency_session(user.id, session_rows(), {})
    with pytest.raises(IntegrityError):
        db_service.add_submitted_proficiency_session(user.id, session_rows(), {"onboarding_completed": True})

    assert len(db_service.list_onboarding_tests_by_user(user.id)) == 1
    assert db_service.get_user_by_id(user.id).onboarding_completed is False


def test_session_rejects_unknown_question_ids(make_user, make_question, db_service):
    make_question(language="French")
    submission = ProficiencySubmission(
        test_session_id="sess-x",
        answers=[UserQuestionAnswer(question_id=12345, selected_answer=0)],
        languages=["French"],
    )
    with pytest.raises(ValidationError):
        proficiency_service.submit_proficiency_answers(make_user(), submission, db_service)


def test_list_questions_hides_answer_keys(make_question, db_service):
    make_question(language="French")
    make_question(language="German")
    questions = proficiency_service.list_questions(["french"], db_service)
    assert len(questions) == 1
    assert questions[0].language == "French"
    assert not hasattr(questions[0], "correct_answer")


# --- Question Bank Administration ---

def test_create_and_update_question(admin, db_service):
    created = proficiency_service.create_question(
        admin,
        LanguageProficiencyQuestionCreate(language="spanish", question="¿Hola?", options=["sí", "no"], correct_answer=0),
        db_service,
    )
    assert created.language == "Spanish"
    assert created.created_by_id == admin.id

    with pytest.raises(ValidationError):
        proficiency_service.update_question(created.id, LanguageProficiencyQuestionUpdate(correct_answer=5), db_service)

    updated = proficiency_service.update_question(
        created.id, LanguageProficiencyQuestionUpdate(options=["sí", "no", "quizás"], correct_answer=2), db_service
    )
    assert updated.correct_answer == 2


def test_answered_question_is_deactivated_not_deleted(make_user, make_question, db_service):
    answered, unused = make_question(language="French"), make_question(language="Italian")
    submission = ProficiencySubmission(
        test_session_id="sess-q",
        answers=[UserQuestionAnswer(question_id=answered.id, selected_answer=0)],
        languages=["French"],
    )
    proficiency_service.submit_proficiency_answers(make_user(), submission, db_service)

    assert "deactivated" in proficiency_service.delete_question(answered.id, db_service)
    assert db_service.get_question(answered.id).is_active is False

    assert proficiency_service.delete_question(unused.id, db_service) == "Question deleted."
    assert db_service.get_question(unused.id) is None
