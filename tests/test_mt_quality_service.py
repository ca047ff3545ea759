# /tests/test_mt_quality_service.py

import pytest
from unittest.mock import AsyncMock

from annotation_backend.core.errors import ForbiddenError, InvalidStateError, NotFoundError, ScoringError, ValidationError
from annotation_backend.models.mt_quality_model import MTQualityUpdate
from annotation_backend.services import mt_quality_service
from annotation_backend.services.quality_scorer import GeminiQualityScorer


# --- Single Assessment ---

@pytest.mark.asyncio
async def test_assess_stores_the_scorer_verdict(admin, make_sentence, db_service, fake_scorer):
    sentence = make_sentence()
    assessment = await mt_quality_service.assess(admin, sentence.id, db_service, fake_scorer)

    assert assessment.status == "assessed"
    assert assessment.overall_quality_score == 80.0
    assert assessment.requested_by_id == admin.id
    assert assessment.errors == [{"type": "grammar", "severity": "minor", "description": "Agreement error."}]
    assert assessment.model_name == "fake-scorer"
    assert assessment.last_error is None


@pytest.mark.asyncio
async def test_reassessing_rewrites_the_single_row(admin, evaluator, make_sentence, db_service, make_scorer):
    sentence = make_sentence()
    first = await mt_quality_service.assess(admin, sentence.id, db_service, make_scorer(overall=40.0))
    mt_quality_service.update_assessment(evaluator, first.id, MTQualityUpdate(human_score=55.0), db_service)

    second = await mt_quality_service.assess(admin, sentence.id, db_service, make_scorer(overall=90.0))

    assert second.id == first.id
    assert second.overall_quality_score == 90.0
    assert second.status == "assessed"
    assert second.human_score is None
    assert len(db_service.list_all_assessments()) == 1


@pytest.mark.asyncio
async def test_failed_reassessment_keeps_the_previous_result(admin, evaluator, make_sentence, db_service, make_scorer):
    sentence = make_sentence()
    first = await mt_quality_service.assess(admin, sentence.id, db_service, make_scorer(overall=40.0))
    mt_quality_service.update_assessment(evaluator, first.id, MTQualityUpdate(human_score=55.0), db_service)

    with pytest.raises(ScoringError):
        await mt_quality_service.assess(admin, sentence.id, db_service, make_scorer(fail_for=[sentence.id]))

    stored = db_service.get_assessment_by_sentence(sentence.id)
    assert stored.status == "human_reviewed"
    assert stored.overall_quality_score == 40.0
    assert stored.human_score == 55.0
    assert stored.reviewed_by_id == evaluator.id
    assert "unavailable" in stored.last_error
    assert mt_quality_service.get_pending(db_service) == []


@pytest.mark.asyncio
async def test_scorer_failure_leaves_row_pending(admin, make_sentence, db_service, make_scorer):
    sentence = make_sentence()
    with pytest.raises(ScoringError):
        await mt_quality_service.assess(admin, sentence.id, db_service, make_scorer(fail_for=[sentence.id]))

    stored = db_service.get_assessment_by_sentence(sentence.id)
    assert stored.status == "pending"
    assert "unavailable" in stored.last_error
    assert [s.id for s in mt_quality_service.get_pending(db_service)] == [sentence.id]


@pytest.mark.asyncio
async def test_unexpected_scorer_crash_becomes_scoring_error(admin, make_sentence, db_service):
    sentence = make_sentence()
    scorer = AsyncMock()
    scorer.score.side_effect = RuntimeError("socket closed")

    with pytest.raises(ScoringError):
        await mt_quality_service.assess(admin, sentence.id, db_service, scorer)
    assert db_service.get_assessment_by_sentence(sentence.id).last_error == "socket closed"


@pytest.mark.asyncio
async def test_sentence_without_machine_translation(admin, make_sentence, db_service, fake_scorer):
    sentence = make_sentence(machine_translation=None)
    with pytest.raises(ValidationError):
        await mt_quality_service.assess(admin, sentence.id, db_service, fake_scorer)
    assert fake_scorer.calls == []


@pytest.mark.asyncio
async def test_unknown_sentence_is_not_found(admin, db_service, fake_scorer):
    with pytest.raises(NotFoundError):
        await mt_quality_service.assess(admin, 4040, db_service, fake_scorer)


# --- Batches ---

@pytest.mark.asyncio
async def test_batch_reports_partial_failure(admin, make_sentence, db_service, make_scorer):
    s1, s2, s3 = make_sentence(), make_sentence(), make_sentence()
    scorer = make_scorer(fail_for=[s2.id])

    result = await mt_quality_service.batch_assess(admin, [s1.id, s2.id, s3.id], db_service, scorer)

    assert [a.sentence_id for a in result.succeeded] == [s1.id, s3.id]
    assert [f.sentence_id for f in result.failed] == [s2.id]
    assert db_service.get_assessment_by_sentence(s2.id).status == "pending"


@pytest.mark.asyncio
async def test_batch_deduplicates_and_is_idempotent(admin, make_sentence, db_service, fake_scorer):
    s1, s2 = make_sentence(), make_sentence()

    await mt_quality_service.batch_assess(admin, [s1.id, s2.id, s1.id], db_service, fake_scorer)
    await mt_quality_service.batch_assess(admin, [s1.id, s2.id], db_service, fake_scorer)

    assert fake_scorer.calls == [s1.id, s2.id, s1.id, s2.id]
    assert len(db_service.list_all_assessments()) == 2


@pytest.mark.asyncio
async def test_batch_collects_unknown_sentences_as_failures(admin, make_sentence, db_service, fake_scorer):
    sentence = make_sentence()
    result = await mt_quality_service.batch_assess(admin, [sentence.id, 999], db_service, fake_scorer)
    assert len(result.succeeded) == 1
    assert result.failed[0].sentence_id == 999


@pytest.mark.asyncio
async def test_batch_limits(admin, db_service, fake_scorer, mocker):
    with pytest.raises(ValidationError):
        await mt_quality_service.batch_assess(admin, [], db_service, fake_scorer)

    mocker.patch("annotation_backend.services.mt_quality_service.settings.MAX_BATCH_SIZE", 2)
    with pytest.raises(ValidationError):
        await mt_quality_service.batch_assess(admin, [1, 2, 3], db_service, fake_scorer)


# --- Human Review & Lookup ---

@pytest.mark.asyncio
async def test_human_review(admin, evaluator, make_user, make_sentence, db_service, fake_scorer):
    sentence = make_sentence()
    assessment = await mt_quality_service.assess(admin, sentence.id, db_service, fake_scorer)

    with pytest.raises(ForbiddenError):
        mt_quality_service.update_assessment(make_user(), assessment.id, MTQualityUpdate(human_score=10.0), db_service)

    reviewed = mt_quality_service.update_assessment(evaluator, assessment.id, MTQualityUpdate(human_score=70.0, human_feedback="Fine."), db_service)
    assert reviewed.status == "human_reviewed"
    assert reviewed.reviewed_by_id == evaluator.id
    assert [a.id for a in mt_quality_service.get_my_assessments(evaluator, db_service)] == [assessment.id]


@pytest.mark.asyncio
async def test_pending_assessment_cannot_be_reviewed(admin, evaluator, make_sentence, db_service, make_scorer):
    sentence = make_sentence()
    with pytest.raises(ScoringError):
        await mt_quality_service.assess(admin, sentence.id, db_service, make_scorer(fail_for=[sentence.id]))
    pending = db_service.get_assessment_by_sentence(sentence.id)

    with pytest.raises(InvalidStateError):
        mt_quality_service.update_assessment(evaluator, pending.id, MTQualityUpdate(human_score=50.0), db_service)


@pytest.mark.asyncio
async def test_lookup_by_sentence(admin, make_sentence, db_service, fake_scorer):
    assessed, fresh = make_sentence(), make_sentence()
    await mt_quality_service.assess(admin, assessed.id, db_service, fake_scorer)

    assert mt_quality_service.lookup_by_sentence(assessed.id, db_service).found is True
    missing = mt_quality_service.lookup_by_sentence(fresh.id, db_service)
    assert missing.found is False
    assert missing.assessment is None
    with pytest.raises(NotFoundError):
        mt_quality_service.lookup_by_sentence(999, db_service)


# --- Gemini Scorer ---

@pytest.mark.asyncio
async def test_gemini_scorer_validates_the_reply(make_sentence, mocker):
    sentence = make_sentence(domain="medical")
    generate = mocker.patch(
        "annotation_backend.services.gemini_service.generate_json",
        new=AsyncMock(return_value={
            "fluency_score": 60,
            "adequacy_score": 70,
            "overall_quality_score": 65,
            "confidence": 0.8,
            "explanation": "Some omissions.",
            "errors": [{"type": "omission", "severity": "major", "description": "Dropped clause."}],
            "suggestions": [],
        }),
    )

    score = await GeminiQualityScorer(model_name="gemini-test").score(sentence)

    assert score.overall_quality_score == 65
    assert score.errors[0].severity.value == "major"
    assert score.model_name == "gemini-test"
    prompt = generate.call_args.args[0]
    assert sentence.source_text in prompt
    assert "medical" in prompt


@pytest.mark.asyncio
async def test_gemini_scorer_rejects_malformed_reply(make_sentence, mocker):
    mocker.patch(
        "annotation_backend.services.gemini_service.generate_json",
        new=AsyncMock(return_value={"fluency_score": 250}),
    )
    with pytest.raises(ScoringError):
        await GeminiQualityScorer().score(make_sentence())
