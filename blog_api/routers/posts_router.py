# blog_api/routers/posts_router.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from .deps import get_current_claims, get_post_service
from ..application.services.post_service import PostService
from ..core.security import Claims
from ..exceptions import create_success_response
from ..schemas import CreatePostRequest, PostResponse, PostUpdateResponse, UpdatePostRequest, WarningsResponse

router = APIRouter(prefix="/api/posts", tags=["Posts"])


def _dump(post) -> dict:
    return PostResponse.model_validate(post).model_dump(mode="json")


@router.get("")
def list_posts(
    status: Optional[str] = Query(None, description="Filter by draft or published"),
    claims: Claims = Depends(get_current_claims),
    service: PostService = Depends(get_post_service),
):
    return create_success_response([_dump(p) for p in service.list(status)])


@router.post("", status_code=201)
def create_post(
    body: CreatePostRequest,
    claims: Claims = Depends(get_current_claims),
    service: PostService = Depends(get_post_service),
):
    post = service.create(claims, **body.model_dump())
    return create_success_response(_dump(post))


@router.get("/{post_id}")
def get_post(post_id: str, claims: Claims = Depends(get_current_claims), service: PostService = Depends(get_post_service)):
    return create_success_response(_dump(service.get(post_id)))


@router.put("/{post_id}")
def update_post(
    post_id: str,
    body: UpdatePostRequest,
    claims: Claims = Depends(get_current_claims),
    service: PostService = Depends(get_post_service),
):
    result = service.update(claims, post_id, body.model_dump(exclude_unset=True))
    response = PostUpdateResponse(post=PostResponse.model_validate(result.post), warnings=result.warnings)
    return create_success_response(response.model_dump(mode="json"))


@router.delete("/{post_id}")
def delete_post(post_id: str, claims: Claims = Depends(get_current_claims), service: PostService = Depends(get_post_service)):
    result = service.delete(claims, post_id)
    return create_success_response(WarningsResponse(message="Post deleted", warnings=result.warnings).model_dump())
