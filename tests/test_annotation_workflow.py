# /tests/test_annotation_workflow.py

"""
Sentence distribution, the annotation lifecycle and peer evaluation,
exercised against a real SQLite database through the service layer.
"""

import pytest

from annotation_backend.core.errors import (
    DuplicateAnnotationError,
    DuplicateEvaluationError,
    ForbiddenError,
    IneligibleError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from annotation_backend.models.annotation_model import AnnotationCreate, AnnotationUpdate
from annotation_backend.models.evaluation_model import EvaluationCreate, EvaluationUpdate
from annotation_backend.services import annotation_service, distribution_service, evaluation_service


def _annotate(user, sentence, db_service, text="Une traduction."):
    return annotation_service.create(
        user, AnnotationCreate(sentence_id=sentence.id, final_translation=text, overall_quality=4), db_service
    )


def _evaluate(evaluator, annotation, db_service, score=4.0):
    return evaluation_service.create_evaluation(
        evaluator, EvaluationCreate(annotation_id=annotation.id, score=score), db_service
    )


# --- Distribution ---

def test_next_sentence_skips_already_annotated(annotator, make_sentence, db_service):
    first, second = make_sentence(), make_sentence()
    _annotate(annotator, first, db_service)

    assert distribution_service.next_sentence_for(annotator, db_service).id == second.id


def test_next_sentence_returns_none_when_exhausted(annotator, make_sentence, db_service):
    sentence = make_sentence()
    _annotate(annotator, sentence, db_service)

    assert distribution_service.next_sentence_for(annotator, db_service) is None
    assert distribution_service.unannotated_for(annotator, db_service) == []


def test_next_sentence_prefers_least_annotated(make_user, make_sentence, db_service):
    busy, quiet = make_sentence(), make_sentence()
    for _ in range(2):
        _annotate(make_user(skip_onboarding=True), busy, db_service)

    newcomer = make_user(skip_onboarding=True)
    assert distribution_service.next_sentence_for(newcomer, db_service).id == quiet.id


def test_next_sentence_respects_eligible_languages(annotator, make_sentence, db_service):
    make_sentence(target_language="German")
    french = make_sentence(target_language="french")

    offered = distribution_service.unannotated_for(annotator, db_service)
    assert [s.id for s in offered] == [french.id]


def test_user_without_proficiency_gets_nothing(make_user, make_sentence, db_service):
    make_sentence()
    assert distribution_service.next_sentence_for(make_user(), db_service) is None


def test_inactive_sentences_are_never_offered(annotator, make_sentence, db_service):
    make_sentence(is_active=False)
    assert distribution_service.next_sentence_for(annotator, db_service) is None


# --- Annotation Lifecycle ---

def test_create_annotation(annotator, make_sentence, db_service):
    sentence = make_sentence()
    annotation = _annotate(annotator, sentence, db_service, text="  Bonjour.  ")

    assert annotation.status == "submitted"
    assert annotation.final_translation == "Bonjour."
    assert annotation.annotator_id == annotator.id


def test_duplicate_annotation_is_rejected(annotator, make_sentence, db_service):
    sentence = make_sentence()
    _annotate(annotator, sentence, db_service)

    with pytest.raises(DuplicateAnnotationError):
        _annotate(annotator, sentence, db_service, text="Encore.")
    assert len(db_service.list_annotations_by_sentence(sentence.id)) == 1


def test_ineligible_user_cannot_annotate(make_user, make_sentence, db_service):
    sentence = make_sentence(target_language="German")
    user = make_user(skip_onboarding=True, languages=["French"])
    with pytest.raises(IneligibleError):
        _annotate(user, sentence, db_service)


def test_annotating_inactive_sentence_is_not_found(annotator, make_sentence, db_service):
    sentence = make_sentence(is_active=False)
    with pytest.raises(NotFoundError):
        _annotate(annotator, sentence, db_service)


def test_owner_can_edit_submitted_annotation(annotator, make_sentence, db_service):
    annotation = _annotate(annotator, make_sentence(), db_service)
    updated = annotation_service.update(
        annotator, annotation.id, AnnotationUpdate(comments="Idiomatic."), db_service
    )
    assert updated.comments == "Idiomatic."
    assert updated.final_translation == "Une traduction."


def test_non_owner_cannot_edit(annotator, make_user, make_sentence, db_service):
    annotation = _annotate(annotator, make_sentence(), db_service)
    with pytest.raises(ForbiddenError):
        annotation_service.update(make_user(), annotation.id, AnnotationUpdate(comments="Mine now."), db_service)


def test_evaluated_annotation_is_locked_for_owner(annotator, evaluator, make_sentence, db_service):
    annotation = _annotate(annotator, make_sentence(), db_service)
    _evaluate(evaluator, annotation, db_service)

    with pytest.raises(ForbiddenError):
        annotation_service.update(annotator, annotation.id, AnnotationUpdate(comments="Too late."), db_service)
    with pytest.raises(ForbiddenError):
        annotation_service.delete(annotator, annotation.id, db_service)


def test_update_cannot_clear_the_translation(annotator, make_sentence, db_service):
    annotation = _annotate(annotator, make_sentence(), db_service)
    with pytest.raises(ValidationError):
        annotation_service.update(annotator, annotation.id, AnnotationUpdate(final_translation=None), db_service)


def test_delete_keeps_evaluations(annotator, evaluator, admin, make_sentence, db_service):
    annotation = _annotate(annotator, make_sentence(), db_service)
    evaluation = _evaluate(evaluator, annotation, db_service)

    deleted = annotation_service.delete(admin, annotation.id, db_service)

    assert deleted.status == "deleted"
    assert deleted.deleted_by_id == admin.id
    remaining = annotation_service.get_annotation_evaluations(admin, annotation.id, db_service)
    assert [e.id for e in remaining] == [evaluation.id]
    with pytest.raises(NotFoundError):
        annotation_service.get_annotation(admin, annotation.id, db_service)


def test_sentence_can_be_reannotated_after_delete(annotator, make_sentence, db_service):
    sentence = make_sentence()
    first = _annotate(annotator, sentence, db_service)
    annotation_service.delete(annotator, first.id, db_service)

    assert distribution_service.next_sentence_for(annotator, db_service).id == sentence.id
    second = _annotate(annotator, sentence, db_service, text="Deuxième essai.")
    assert second.id != first.id


def test_deleting_twice_is_not_found(annotator, make_sentence, db_service):
    annotation = _annotate(annotator, make_sentence(), db_service)
    annotation_service.delete(annotator, annotation.id, db_service)
    with pytest.raises(NotFoundError):
        annotation_service.delete(annotator, annotation.id, db_service)


def test_deleted_annotation_cannot_be_edited(annotator, make_sentence, db_service):
    annotation = _annotate(annotator, make_sentence(), db_service)
    annotation_service.delete(annotator, annotation.id, db_service)

    with pytest.raises(ForbiddenError):
        annotation_service.update(annotator, annotation.id, AnnotationUpdate(comments="Too late."), db_service)
    with pytest.raises(NotFoundError):
        annotation_service.update(annotator, 9999, AnnotationUpdate(comments="Nothing here."), db_service)


def test_archive_requires_a_live_reviewable_annotation(annotator, admin, make_sentence, db_service):
    annotation = _annotate(annotator, make_sentence(), db_service)
    archived = annotation_service.archive(admin, annotation.id, db_service)
    assert archived.status == "archived"

    with pytest.raises(InvalidStateError):
        annotation_service.archive(admin, annotation.id, db_service)
    with pytest.raises(ForbiddenError):
        annotation_service.archive(annotator, annotation.id, db_service)


def test_attach_voice_recording(annotator, make_sentence, db_service, mocker):
    annotation = _annotate(annotator, make_sentence(), db_service)
    storage = mocker.Mock()
    storage.save.return_value = f"voice/{annotator.id}/voice_abc_take1.webm"

    response = annotation_service.attach_voice_recording(
        annotator, annotation.id, b"RIFF....", "take1.webm", "audio/webm", 3.5, db_service, storage
    )

    storage.save.assert_called_once_with(annotator.id, b"RIFF....", "take1.webm", "audio/webm")
    assert response.annotation_id == annotation.id
    assert db_service.get_annotation(annotation.id).voice_recording_url == response.voice_recording_url
    assert db_service.get_annotation(annotation.id).voice_recording_duration == 3.5


def test_voice_recording_on_someone_elses_annotation(annotator, make_user, make_sentence, db_service, mocker):
    annotation = _annotate(annotator, make_sentence(), db_service)
    storage = mocker.Mock()
    with pytest.raises(ForbiddenError):
        annotation_service.attach_voice_recording(
            make_user(), annotation.id, b"data", "x.webm", "audio/webm", 1.0, db_service, storage
        )
    storage.save.assert_not_called()


# --- Evaluation ---

def test_first_evaluation_marks_annotation_evaluated(annotator, evaluator, make_sentence, db_service):
    annotation = _annotate(annotator, make_sentence(), db_service)
    evaluation = _evaluate(evaluator, annotation, db_service, score=5.0)

    assert evaluation.score == 5.0
    assert db_service.get_annotation(annotation.id).status == "evaluated"


def test_self_evaluation_is_forbidden(make_user, make_sentence, db_service):
    user = make_user(is_evaluator=True, skip_onboarding=True)
    annotation = _annotate(user, make_sentence(), db_service)
    with pytest.raises(ForbiddenError):
        _evaluate(user, annotation, db_service)


def test_non_evaluator_cannot_evaluate(annotator, make_user, make_sentence, db_service):
    annotation = _annotate(annotator, make_sentence(), db_service)
    with pytest.raises(ForbiddenError):
        _evaluate(make_user(), annotation, db_service)


def test_duplicate_evaluation_is_rejected(annotator, evaluator, make_sentence, db_service):
    annotation = _annotate(annotator, make_sentence(), db_service)
    _evaluate(evaluator, annotation, db_service)
    with pytest.raises(DuplicateEvaluationError):
        _evaluate(evaluator, annotation, db_service, score=2.0)
    assert len(db_service.list_evaluations_by_annotation(annotation.id)) == 1


def test_evaluating_deleted_annotation_is_not_found(annotator, evaluator, make_sentence, db_service):
    annotation = _annotate(annotator, make_sentence(), db_service)
    annotation_service.delete(annotator, annotation.id, db_service)
    with pytest.raises(NotFoundError):
        _evaluate(evaluator, annotation, db_service)


def test_update_evaluation(annotator, evaluator, make_user, make_sentence, db_service):
    annotation = _annotate(annotator, make_sentence(), db_service)
    evaluation = _evaluate(evaluator, annotation, db_service, score=2.0)

    updated = evaluation_service.update_evaluation(evaluator, evaluation.id, EvaluationUpdate(score=3.5, feedback="Better."), db_service)
    assert updated.score == 3.5
    assert updated.feedback == "Better."

    other = make_user(is_evaluator=True)
    with pytest.raises(ForbiddenError):
        evaluation_service.update_evaluation(other, evaluation.id, EvaluationUpdate(score=1.0), db_service)


def test_update_evaluation_of_deleted_annotation(annotator, evaluator, admin, make_sentence, db_service):
    annotation = _annotate(annotator, make_sentence(), db_service)
    evaluation = _evaluate(evaluator, annotation, db_service)
    annotation_service.delete(admin, annotation.id, db_service)

    with pytest.raises(InvalidStateError):
        evaluation_service.update_evaluation(evaluator, evaluation.id, EvaluationUpdate(score=1.0), db_service)


def test_pending_queue_excludes_own_reviewed_and_deleted(make_user, evaluator, make_sentence, db_service):
    annotators = [make_user(skip_onboarding=True) for _ in range(3)]
    sentence = make_sentence()
    reviewed, untouched, removed = [_annotate(a, sentence, db_service) for a in annotators]
    own = _annotate(evaluator, make_sentence(), db_service)
    _evaluate(evaluator, reviewed, db_service)
    annotation_service.delete(annotators[2], removed.id, db_service)

    pending = evaluation_service.get_pending_evaluations(evaluator, db_service)

    assert [a.id for a in pending] == [untouched.id]
    assert own.id not in [a.id for a in pending]
    assert db_service.count_pending_annotations_for_evaluator(evaluator.id) == 1


def test_pending_queue_is_least_reviewed_first(make_user, make_sentence, db_service):
    first_reviewer = make_user(is_evaluator=True, skip_onboarding=True)
    second_reviewer = make_user(is_evaluator=True, skip_onboarding=True)
    writer = make_user(skip_onboarding=True)
    popular = _annotate(writer, make_sentence(), db_service)
    fresh = _annotate(writer, make_sentence(), db_service)
    _evaluate(first_reviewer, popular, db_service)

    pending = evaluation_service.get_pending_evaluations(second_reviewer, db_service)
    assert [a.id for a in pending] == [fresh.id, popular.id]


def test_evaluator_without_proficiency_cannot_evaluate(annotator, make_user, make_sentence, db_service):
    annotation = _annotate(annotator, make_sentence(), db_service)
    untested = make_user(is_evaluator=True)

    with pytest.raises(IneligibleError):
        _evaluate(untested, annotation, db_service)
    assert evaluation_service.get_pending_evaluations(untested, db_service) == []
    assert annotation.status == "submitted"


def test_pending_queue_is_limited_to_eligible_languages(make_user, make_sentence, db_service):
    writer = make_user(skip_onboarding=True)
    french = _annotate(writer, make_sentence(), db_service)
    german = _annotate(writer, make_sentence(target_language="German"), db_service)
    reviewer = make_user(is_evaluator=True, skip_onboarding=True, languages=["German"])

    assert [a.id for a in evaluation_service.get_pending_evaluations(reviewer, db_service)] == [german.id]
    assert db_service.count_pending_annotations_for_evaluator(reviewer.id, ["German"]) == 1
    with pytest.raises(IneligibleError):
        _evaluate(reviewer, french, db_service)
    assert _evaluate(reviewer, german, db_service).annotation_id == german.id
