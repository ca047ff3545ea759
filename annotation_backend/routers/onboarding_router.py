# /annotation_backend/routers/onboarding_router.py

"""
Endpoints of the proficiency gate: onboarding tests (`/onboarding-tests`)
and multi-language proficiency sessions (`/language-proficiency-questions`).
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ..core.deps import RequestContext, get_request_context
from ..core.errors import ValidationError
from ..core.languages import parse_language_list
from ..models import onboarding_model
from ..services import proficiency_service

router = APIRouter()

# --- ONBOARDING TESTS (/api/onboarding-tests) ---

@router.post("/onboarding-tests", response_model=onboarding_model.OnboardingTest, status_code=status.HTTP_201_CREATED, summary="Start an Onboarding Test")
def create_test(request: onboarding_model.OnboardingTestCreate, ctx: RequestContext = Depends(get_request_context)):
    return proficiency_service.create_test(ctx.user, request.language, ctx.db)


@router.get("/onboarding-tests/my-tests", response_model=List[onboarding_model.OnboardingTest], summary="List My Onboarding Tests")
def my_tests(ctx: RequestContext = Depends(get_request_context)):
    return proficiency_service.get_my_tests(ctx.user, ctx.db)


@router.get("/onboarding-tests/{test_id}", response_model=onboarding_model.OnboardingTest, summary="Get an Onboarding Test")
def get_test(test_id: int, ctx: RequestContext = Depends(get_request_context)):
    return proficiency_service.get_test(ctx.user, test_id, ctx.db)


@router.post("/onboarding-tests/{test_id}/submit", response_model=onboarding_model.OnboardingTestResult, summary="Submit an Onboarding Test")
def submit_test(
    test_id: int,
    submission: onboarding_model.OnboardingTestSubmit,
    ctx: RequestContext = Depends(get_request_context),
):
    if submission.test_id is not None and submission.test_id != test_id:
        raise ValidationError("test_id in the body does not match the URL.")
    return proficiency_service.record_test_result(ctx.user, test_id, submission.answers, ctx.db)


# --- PROFICIENCY QUESTIONS (/api/language-proficiency-questions) ---

@router.get("/language-proficiency-questions", response_model=List[onboarding_model.PublicQuestion], summary="Get Proficiency Questions by Language")
def list_questions(
    languages: Optional[str] = Query(None, description="Comma-separated language names."),
    ctx: RequestContext = Depends(get_request_context),
):
    return proficiency_service.list_questions(parse_language_list(languages), ctx.db)


@router.post("/language-proficiency-questions/submit", response_model=onboarding_model.OnboardingTestResult, summary="Submit Proficiency Answers")
def submit_answers(submission: onboarding_model.ProficiencySubmission, ctx: RequestContext = Depends(get_request_context)):
    return proficiency_service.submit_proficiency_answers(ctx.user, submission, ctx.db)
