# /annotation_backend/services/proficiency_service.py

"""
The proficiency gate: decides which target languages a user may annotate and
runs the onboarding tests that grant that eligibility.

Two test flows share one persistence model. An onboarding test is created
with a random sample of questions and submitted exactly once. A
proficiency-question session is answered in one go for several languages and
recorded as one submitted test per language, tagged with the client's session
id. Either way a passing, submitted `OnboardingTest` for a language is what
makes a user eligible for it.
"""

import logging
import random
from collections import OrderedDict
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy.exc import IntegrityError

from ..core.config import settings
from ..core.errors import ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from ..core.languages import normalize_language, normalize_languages
from ..db.base_class import utcnow
from ..models import onboarding_model
from .database_service import DatabaseService

logger = logging.getLogger(__name__)


# --- Eligibility ---

def eligible_languages(user, db: DatabaseService) -> Optional[List[str]]:
    """
    The target languages `user` may annotate, or None when unrestricted.

    Inactive users get an empty list. Users flagged `skip_onboarding` are
    trusted for the languages they declared (all languages if they declared
    none); everyone else needs a passing test per language.
    """
    if not user.is_active:
        return []
    passed = db.get_passed_languages(user.id)
    if user.skip_onboarding:
        if not user.languages:
            return None
        return sorted(set(user.languages) | set(passed))
    return passed


def is_eligible(user, language_pair: Tuple[str, str], db: DatabaseService) -> bool:
    """Whether `user` may annotate sentences of `(source_language, target_language)`."""
    _, target_language = language_pair
    allowed = eligible_languages(user, db)
    if allowed is None:
        return True
    return normalize_language(target_language) in allowed


def _proficiency_level(score: float) -> str:
    return "advanced" if score >= settings.PROFICIENCY_ADVANCED_THRESHOLD else "intermediate"


def _score(correct: int, total: int) -> float:
    return correct / total if total else 0.0


# --- Onboarding Tests ---

def _test_view(test, db: DatabaseService, with_questions: bool = True) -> onboarding_model.OnboardingTest:
    view = onboarding_model.OnboardingTest.model_validate(test)
    if with_questions:
        by_id = {q.id: q for q in db.get_questions_by_ids(test.question_ids or [])}
        view.questions = [
            onboarding_model.PublicQuestion.model_validate(by_id[qid])
            for qid in (test.question_ids or []) if qid in by_id
        ]
    return view


def create_test(user, language: str, db: DatabaseService) -> onboarding_model.OnboardingTest:
    """
    Creates a test for `language` with a random sample of its active
    questions. Fewer questions are used when the bank is small.
    """
    language = normalize_language(language)
    if not language:
        raise ValidationError("Language must not be blank.")
    question_ids = db.list_active_question_ids(language)
    if not question_ids:
        raise ValidationError(f"No proficiency questions are available for {language}.")
    sample_size = min(settings.ONBOARDING_QUESTION_COUNT, len(question_ids))
    chosen = random.sample(question_ids, sample_size)
    test = db.add_onboarding_test({
        "user_id": user.id,
        "language": language,
        "status": onboarding_model.TestStatus.CREATED.value,
        "question_ids": chosen,
    })
    logger.info("Created onboarding test %s for user %s (%s, %d questions)", test.id, user.id, language, sample_size)
    return _test_view(test, db)


def _index_answers(answers: Sequence, allowed_ids: Optional[set] = None) -> Dict[int, Optional[int]]:
    indexed = {}
    for answer in answers:
        if answer.question_id in indexed:
            raise ValidationError(f"Question {answer.question_id} was answered more than once.")
        if allowed_ids is not None and answer.question_id not in allowed_ids:
            raise ValidationError(f"Question {answer.question_id} is not part of this test.")
        indexed[answer.question_id] = answer.selected_answer
    return indexed


def _grade(question_ids: Sequence[int], questions_by_id: Dict, selected: Dict[int, Optional[int]]) -> Tuple[int, List[Dict]]:
    """Grades every question of a test; unanswered questions count as wrong."""
    correct = 0
    rows = []
    for qid in question_ids:
        choice = selected.get(qid)
        question = questions_by_id.get(qid)
        is_correct = question is not None and choice is not None and choice == question.correct_answer
        correct += int(is_correct)
        rows.append({"question_id": qid, "selected_answer": choice, "is_correct": is_correct})
    return correct, rows


def record_test_result(
    user,
    test_id: int,
    answers: Sequence[onboarding_model.OnboardingTestAnswer],
    db: DatabaseService,
) -> onboarding_model.OnboardingTestResult:
    """
    Grades and submits a test. The `created -> submitted` transition happens
    at most once; a second submission fails and leaves the stored result as
    it was.
    """
    test = db.get_onboarding_test(test_id)
    if test is None:
        raise NotFoundError("Onboarding test not found.")
    if test.user_id != user.id:
        raise ForbiddenError("You can only submit your own onboarding test.")
    if test.status != onboarding_model.TestStatus.CREATED.value:
        raise InvalidStateError("This onboarding test has already been submitted.")

    question_ids = list(test.question_ids or [])
    selected = _index_answers(answers, allowed_ids=set(question_ids))
    questions_by_id = {q.id: q for q in db.get_questions_by_ids(question_ids)}
    correct, answer_rows = _grade(question_ids, questions_by_id, selected)

    total = len(question_ids)
    score = _score(correct, total)
    passed = score >= settings.ONBOARDING_PASS_THRESHOLD
    level = _proficiency_level(score) if passed else None

    user_updates = {}
    if passed:
        user_updates = {
            "onboarding_completed": True,
            # Reassigned rather than mutated so the JSON column is flagged dirty.
            "proficiency_levels": {**(user.proficiency_levels or {}), test.language: level},
        }

    submitted = db.submit_onboarding_test(
        user_id=user.id,
        test_id=test.id,
        result_fields={"score": score, "passed": passed, "submitted_at": utcnow()},
        answers=answer_rows,
        user_updates=user_updates,
    )
    if submitted is None:
        raise InvalidStateError("This onboarding test has already been submitted.")

    logger.info("User %s submitted onboarding test %s: %d/%d, passed=%s", user.id, test.id, correct, total, passed)
    return onboarding_model.OnboardingTestResult(
        test_id=submitted.id,
        total_questions=total,
        correct_answers=correct,
        score=score,
        passed=passed,
        pass_threshold=settings.ONBOARDING_PASS_THRESHOLD,
        language_results=[
            onboarding_model.LanguageResult(
                language=submitted.language,
                total_questions=total,
                correct_answers=correct,
                score=score,
                passed=passed,
                proficiency_level=level,
            )
        ],
    )


def get_my_tests(user, db: DatabaseService) -> List[onboarding_model.OnboardingTest]:
    return [_test_view(t, db, with_questions=False) for t in db.list_onboarding_tests_by_user(user.id)]


def get_test(user, test_id: int, db: DatabaseService) -> onboarding_model.OnboardingTest:
    test = db.get_onboarding_test(test_id)
    if test is None:
        raise NotFoundError("Onboarding test not found.")
    if test.user_id != user.id and not user.is_admin:
        raise ForbiddenError("You can only view your own onboarding tests.")
    return _test_view(test, db)


# --- Proficiency-Question Sessions ---

def list_questions(languages: Sequence[str], db: DatabaseService) -> List[onboarding_model.PublicQuestion]:
    """Active questions for the given languages, without their answer keys."""
    canonical = normalize_languages(languages)
    if not canonical:
        return []
    return [onboarding_model.PublicQuestion.model_validate(q) for q in db.list_questions(canonical)]


def submit_proficiency_answers(
    user,
    submission: onboarding_model.ProficiencySubmission,
    db: DatabaseService,
) -> onboarding_model.OnboardingTestResult:
    """
    Grades a multi-language session and records one submitted test per
    language. Each language is graded against all of its active questions,
    so skipped questions count as wrong. Re-submitting a session fails.
    """
    languages = submission.languages
    if not languages:
        raise ValidationError("At least one language is required.")
    if db.proficiency_session_exists(user.id, submission.test_session_id):
        raise InvalidStateError("This proficiency session has already been submitted.")
    selected = _index_answers(submission.answers)
    answered = {q.id: q for q in db.get_questions_by_ids(list(selected))}
    unknown = sorted(set(selected) - set(answered))
    if unknown:
        raise ValidationError(f"Unknown question id(s): {', '.join(str(i) for i in unknown)}.")
    for question in answered.values():
        if question.language not in languages:
            raise ValidationError(f"Question {question.id} is not a {', '.join(languages)} question.")

    per_language = OrderedDict()
    for language in languages:
        ids = db.list_active_question_ids(language)
        ids += sorted(qid for qid, q in answered.items() if q.language == language and qid not in ids)
        if not ids:
            raise ValidationError(f"No proficiency questions are available for {language}.")
        per_language[language] = ids

    now = utcnow()
    tests, results = [], []
    levels = dict(user.proficiency_levels or {})
    for language, question_ids in per_language.items():
        questions_by_id = {q.id: q for q in db.get_questions_by_ids(question_ids)}
        correct, answer_rows = _grade(question_ids, questions_by_id, selected)
        total = len(question_ids)
        score = _score(correct, total)
        passed = score >= settings.ONBOARDING_PASS_THRESHOLD
        level = _proficiency_level(score) if passed else None
        if passed:
            levels[language] = level
        tests.append({
            "language": language,
            "session_id": submission.test_session_id,
            "question_ids": question_ids,
            "score": score,
            "passed": passed,
            "submitted_at": now,
            "answers": [row for row in answer_rows if row["question_id"] in selected],
        })
        results.append(onboarding_model.LanguageResult(
            language=language,
            total_questions=total,
            correct_answers=correct,
            score=score,
            passed=passed,
            proficiency_level=level,
        ))

    passed_languages = [r.language for r in results if r.passed]
    user_updates = {}
    if passed_languages:
        user_updates = {
            "onboarding_completed": True,
            "proficiency_levels": levels,
            "languages": normalize_languages(list(user.languages or []) + passed_languages),
        }

    try:
        db.add_submitted_proficiency_session(user.id, tests, user_updates)
    except IntegrityError:
        raise InvalidStateError("This proficiency session has already been submitted.")

    total = sum(r.total_questions for r in results)
    correct = sum(r.correct_answers for r in results)
    overall_passed = all(r.passed for r in results)
    logger.info(
        "User %s submitted proficiency session %s for %s: %d/%d, passed=%s",
        user.id, submission.test_session_id, ", ".join(languages), correct, total, overall_passed,
    )
    return onboarding_model.OnboardingTestResult(
        session_id=submission.test_session_id,
        total_questions=total,
        correct_answers=correct,
        score=_score(correct, total),
        passed=overall_passed,
        pass_threshold=settings.ONBOARDING_PASS_THRESHOLD,
        language_results=results,
    )


# --- Question Bank Administration ---

def list_all_questions(db: DatabaseService) -> List[onboarding_model.LanguageProficiencyQuestion]:
    return [onboarding_model.LanguageProficiencyQuestion.model_validate(q) for q in db.list_questions(active_only=False)]


def create_question(admin, payload: onboarding_model.LanguageProficiencyQuestionCreate, db: DatabaseService):
    record = payload.model_dump(mode="json")
    record["created_by_id"] = admin.id
    question = db.add_question(record)
    logger.info("Admin %s created proficiency question %s (%s)", admin.id, question.id, question.language)
    return onboarding_model.LanguageProficiencyQuestion.model_validate(question)


def update_question(question_id: int, patch: onboarding_model.LanguageProficiencyQuestionUpdate, db: DatabaseService):
    question = db.get_question(question_id)
    if question is None:
        raise NotFoundError("Question not found.")
    changes = patch.model_dump(mode="json", exclude_unset=True)
    if "language" in changes and not changes["language"]:
        raise ValidationError("Language must not be blank.")
    options = changes.get("options", question.options)
    correct_answer = changes.get("correct_answer", question.correct_answer)
    if correct_answer is None or correct_answer >= len(options):
        raise ValidationError("correct_answer must index one of the options.")
    changes["updated_at"] = utcnow()
    question = db.update_question(question, changes)
    return onboarding_model.LanguageProficiencyQuestion.model_validate(question)


def delete_question(question_id: int, db: DatabaseService) -> str:
    """
    Removes a question from the bank. Questions that already have recorded
    answers are deactivated instead so the answer history stays intact.
    """
    question = db.get_question(question_id)
    if question is None:
        raise NotFoundError("Question not found.")
    if db.question_has_answers(question_id):
        db.update_question(question, {"is_active": False, "updated_at": utcnow()})
        logger.info("Deactivated proficiency question %s (has recorded answers)", question_id)
        return "Question has recorded answers and was deactivated."
    db.delete_question(question)
    logger.info("Deleted proficiency question %s", question_id)
    return "Question deleted."
