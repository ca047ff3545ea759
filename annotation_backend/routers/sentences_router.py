# /annotation_backend/routers/sentences_router.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ..core.deps import RequestContext, get_request_context, require_admin
from ..db.models.user_models import User as UserModel
from ..models import sentence_model
from ..services import database_service, distribution_service, sentence_service

router = APIRouter()

# --- SENTENCE COLLECTION ENDPOINTS (/api/sentences) ---

@router.get("", response_model=List[sentence_model.Sentence], summary="List Active Sentences")
def list_sentences(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    ctx: RequestContext = Depends(get_request_context),
):
    return sentence_service.list_active(ctx.db, skip, limit)


@router.post("", response_model=sentence_model.Sentence, status_code=status.HTTP_201_CREATED, summary="Create a Sentence")
def create_sentence(
    sentence_in: sentence_model.SentenceCreate,
    admin: UserModel = Depends(require_admin),
    db: database_service.DatabaseService = Depends(database_service.get_db_service),
):
    return sentence_service.create_sentence(sentence_in, db)


# Exhaustion is a normal outcome: 200 with a null body, never 404.
@router.get("/next", response_model=Optional[sentence_model.Sentence], summary="Get the Next Sentence to Annotate")
def next_sentence(ctx: RequestContext = Depends(get_request_context)):
    return distribution_service.next_sentence_for(ctx.user, ctx.db)


@router.get("/unannotated", response_model=List[sentence_model.Sentence], summary="List Sentences Still to Annotate")
def unannotated_sentences(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    ctx: RequestContext = Depends(get_request_context),
):
    return distribution_service.unannotated_for(ctx.user, ctx.db, skip, limit)


# --- INDIVIDUAL SENTENCE ENDPOINTS (/api/sentences/{sentence_id}) ---

@router.get("/{sentence_id}", response_model=sentence_model.Sentence, summary="Get a Single Sentence")
def get_sentence(sentence_id: int, ctx: RequestContext = Depends(get_request_context)):
    return sentence_service.get_sentence(sentence_id, ctx.db)
