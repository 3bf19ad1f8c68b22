# blog_api/routers/profiles_router.py
import json
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from .deps import get_current_claims, get_profile_service, read_upload
from ..application.services.profile_service import ProfileService
from ..core.security import Claims
from ..exceptions import ValidationError, create_success_response
from ..schemas import ProfileResponse, WarningsResponse

router = APIRouter(prefix="/api/profiles", tags=["Profiles"])


def _dump(view) -> dict:
    return ProfileResponse.from_view(view).model_dump(mode="json")


@router.get("/me")
def get_my_profile(claims: Claims = Depends(get_current_claims), service: ProfileService = Depends(get_profile_service)):
    return create_success_response(_dump(service.get_mine(claims.subject_id)))


@router.put("/me")
async def update_my_profile(
    full_name: Optional[str] = Form(None),
    bio: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    website: Optional[str] = Form(None),
    social_links: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    cover_image: Optional[UploadFile] = File(None),
    claims: Claims = Depends(get_current_claims),
    service: ProfileService = Depends(get_profile_service),
):
    changes = {"full_name": full_name, "bio": bio, "location": location, "website": website}
    if social_links:
        try:
            links = json.loads(social_links)
        except json.JSONDecodeError:
            raise ValidationError("social_links must be a JSON object")
        if not isinstance(links, dict):
            raise ValidationError("social_links must be a JSON object")
        changes["social_links"] = links
    view = service.update_mine(
        claims.subject_id,
        changes,
        avatar=await read_upload(avatar),
        cover_image=await read_upload(cover_image),
    )
    return create_success_response(_dump(view))


@router.delete("/me")
def delete_my_profile(claims: Claims = Depends(get_current_claims), service: ProfileService = Depends(get_profile_service)):
    warnings = service.delete_mine(claims.subject_id)
    return create_success_response(WarningsResponse(message="Profile deleted", warnings=warnings).model_dump())


@router.get("/{user_id}")
def get_profile(user_id: str, claims: Claims = Depends(get_current_claims), service: ProfileService = Depends(get_profile_service)):
    return create_success_response(_dump(service.get_for_user(user_id)))
