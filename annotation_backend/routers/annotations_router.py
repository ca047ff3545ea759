# /annotation_backend/routers/annotations_router.py

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from ..core.deps import RequestContext, get_request_context
from ..models import annotation_model, evaluation_model, user_model
from ..services import annotation_service
from ..services.storage_service import VoiceStorage, get_voice_storage

router = APIRouter()

# --- ANNOTATION COLLECTION ENDPOINTS (/api/annotations) ---

@router.post("", response_model=annotation_model.Annotation, status_code=status.HTTP_201_CREATED, summary="Submit an Annotation")
def create_annotation(annotation_in: annotation_model.AnnotationCreate, ctx: RequestContext = Depends(get_request_context)):
    return annotation_service.create(ctx.user, annotation_in, ctx.db)


@router.get("", response_model=List[annotation_model.Annotation], summary="List My Annotations")
def list_my_annotations(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    ctx: RequestContext = Depends(get_request_context),
):
    return annotation_service.get_my_annotations(ctx.user, ctx.db, skip, limit)


@router.post("/upload-voice", response_model=annotation_model.VoiceUploadResponse, summary="Upload a Voice Recording")
async def upload_voice_recording(
    audio_file: UploadFile = File(...),
    annotation_id: Optional[int] = Form(None),
    duration: Optional[float] = Form(None),
    ctx: RequestContext = Depends(get_request_context),
    storage: VoiceStorage = Depends(get_voice_storage),
):
    audio_bytes = await audio_file.read()
    return annotation_service.attach_voice_recording(
        ctx.user,
        annotation_id,
        audio_bytes,
        audio_file.filename,
        audio_file.content_type,
        duration if duration is not None else 0.0,
        ctx.db,
        storage,
    )


# --- INDIVIDUAL ANNOTATION ENDPOINTS (/api/annotations/{annotation_id}) ---

@router.get("/{annotation_id}", response_model=annotation_model.Annotation, summary="Get a Single Annotation")
def get_annotation(annotation_id: int, ctx: RequestContext = Depends(get_request_context)):
    return annotation_service.get_annotation(ctx.user, annotation_id, ctx.db)


@router.put("/{annotation_id}", response_model=annotation_model.Annotation, summary="Edit a Submitted Annotation")
def update_annotation(
    annotation_id: int,
    patch: annotation_model.AnnotationUpdate,
    ctx: RequestContext = Depends(get_request_context),
):
    return annotation_service.update(ctx.user, annotation_id, patch, ctx.db)


@router.delete("/{annotation_id}", response_model=user_model.MessageResponse, summary="Delete an Annotation")
def delete_annotation(annotation_id: int, ctx: RequestContext = Depends(get_request_context)):
    annotation_service.delete(ctx.user, annotation_id, ctx.db)
    return user_model.MessageResponse(message="Annotation deleted.")


@router.get("/{annotation_id}/evaluations", response_model=List[evaluation_model.Evaluation], summary="List an Annotation's Evaluations")
def list_annotation_evaluations(annotation_id: int, ctx: RequestContext = Depends(get_request_context)):
    return annotation_service.get_annotation_evaluations(ctx.user, annotation_id, ctx.db)
