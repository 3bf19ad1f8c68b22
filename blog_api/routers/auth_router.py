# blog_api/routers/auth_router.py
import json
import logging
from typing import Optional

import pydantic
from fastapi import APIRouter, Depends, File, Form, UploadFile

from .deps import get_auth_service, get_profile_service, read_upload
from ..application.services.auth_service import AuthService, Registration
from ..application.services.profile_service import ProfileService
from ..exceptions import ValidationError, create_success_response
from ..schemas import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    ProfileResponse,
    RegisterRequest,
    RegisterResponse,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def _parse_social_links(raw: Optional[str]) -> dict:
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationError("social_links must be a JSON object")
    if not isinstance(value, dict):
        raise ValidationError("social_links must be a JSON object")
    return value


@router.post("/register", status_code=201)
async def register(
    username: str = Form(...),
    email: str = Form(...),
    password: str = Form(...),
    full_name: str = Form(...),
    bio: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    website: Optional[str] = Form(None),
    social_links: Optional[str] = Form(None),
    role: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    cover_image: Optional[UploadFile] = File(None),
    auth_service: AuthService = Depends(get_auth_service),
    profile_service: ProfileService = Depends(get_profile_service),
):
    try:
        form = RegisterRequest(
            username=username,
            email=email,
            password=password,
            full_name=full_name,
            bio=bio,
            location=location,
            website=website,
            social_links=_parse_social_links(social_links),
            role=role,
        )
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        raise ValidationError(f"{field}: {first.get('msg')}" if field else first.get("msg"))

    result = auth_service.register(
        Registration(**form.model_dump()),
        avatar=await read_upload(avatar),
        cover_image=await read_upload(cover_image),
    )
    view = profile_service.get_for_user(result.user.id)
    response = RegisterResponse(
        user=UserResponse.model_validate(result.user),
        profile=ProfileResponse.from_view(view),
        warnings=result.warnings,
    )
    return create_success_response(response.model_dump(mode="json"))


@router.post("/login")
def login(body: LoginRequest, auth_service: AuthService = Depends(get_auth_service)):
    result = auth_service.login(body.email, body.password)
    response = LoginResponse(access_token=result.token, user=UserResponse.model_validate(result.user))
    return create_success_response(response.model_dump(mode="json"))


@router.post("/password-reset/request")
def request_password_reset(body: PasswordResetRequest, auth_service: AuthService = Depends(get_auth_service)):
    message = auth_service.request_password_reset(body.email)
    return create_success_response(MessageResponse(message=message).model_dump())


@router.post("/password-reset/reset")
def reset_password(body: PasswordResetConfirm, auth_service: AuthService = Depends(get_auth_service)):
    auth_service.reset_password(body.token, body.new_password)
    return create_success_response(MessageResponse(message="Password has been reset").model_dump())
