# blog_api/routers/media_router.py
import json
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from .deps import get_current_claims, get_media_service, read_upload
from ..application.services.media_service import MediaService
from ..core.security import Claims
from ..exceptions import ValidationError, create_success_response
from ..schemas import MediaResponse, MediaUploadResponse, MessageResponse, UpdateMediaRequest

router = APIRouter(prefix="/api/media", tags=["Media"])


def _dump(media) -> dict:
    return MediaResponse.model_validate(media).model_dump(mode="json")


def _parse_tags(raw: Optional[str]):
    if raw is None or raw == "":
        return None
    try:
        tags = json.loads(raw)
    except json.JSONDecodeError:
        tags = [t.strip() for t in raw.split(",") if t.strip()]
    if not isinstance(tags, list):
        raise ValidationError("tags must be a list")
    return [str(t) for t in tags]


@router.post("", status_code=201)
async def upload_media(
    file: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    alt_text: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    claims: Claims = Depends(get_current_claims),
    service: MediaService = Depends(get_media_service),
):
    upload = await read_upload(file)
    if upload is None:
        raise ValidationError("No file provided")
    metadata = {"title": title, "description": description, "alt_text": alt_text, "tags": _parse_tags(tags)}
    outcome = service.upload(claims.subject_id, upload, metadata)
    response = MediaUploadResponse(media=MediaResponse.model_validate(outcome.media), warnings=outcome.warnings)
    return create_success_response(response.model_dump(mode="json"))


@router.get("")
def list_media(claims: Claims = Depends(get_current_claims), service: MediaService = Depends(get_media_service)):
    return create_success_response([_dump(m) for m in service.list_for_owner(claims.subject_id)])


@router.get("/{media_id}")
def get_media(media_id: str, claims: Claims = Depends(get_current_claims), service: MediaService = Depends(get_media_service)):
    return create_success_response(_dump(service.get(media_id)))


@router.put("/{media_id}")
def update_media(
    media_id: str,
    body: UpdateMediaRequest,
    claims: Claims = Depends(get_current_claims),
    service: MediaService = Depends(get_media_service),
):
    media = service.update_metadata(claims.subject_id, media_id, body.model_dump(exclude_unset=True))
    return create_success_response(_dump(media))


@router.delete("/{media_id}")
def delete_media(media_id: str, claims: Claims = Depends(get_current_claims), service: MediaService = Depends(get_media_service)):
    service.delete(claims.subject_id, media_id)
    return create_success_response(MessageResponse(message="Media deleted").model_dump())
