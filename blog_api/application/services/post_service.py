from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging

from ..ports.post_repo import PostDto, PostRepository
from .media_references import MediaReferences
from .media_service import MediaService
from ...core.authorization import require_owner_or_role, require_role
from ...core.roles import Role
from ...core.security import Claims
from ...exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

POST_STATUSES = ("draft", "published")
EDITABLE_FIELDS = ("title", "content", "status", "tags", "featured_image_id", "gallery")


@dataclass
class PostDeletion:
    post_id: str
    warnings: List[str] = field(default_factory=list)


@dataclass
class PostUpdate:
    post: PostDto
    warnings: List[str] = field(default_factory=list)


def _check_status(status: str) -> str:
    if status not in POST_STATUSES:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(POST_STATUSES)}")
    return status


def _media_refs(featured_image_id: Optional[str], gallery: List[str]) -> List[str]:
    refs = [featured_image_id] if featured_image_id else []
    return refs + [m for m in gallery if m]


@dataclass
class PostService:
    post_repo: PostRepository
    media_service: MediaService
    references: MediaReferences

    def list(self, status: Optional[str] = None) -> List[PostDto]:
        if status:
            _check_status(status)
        return self.post_repo.list(status)

    def get(self, post_id: str) -> PostDto:
        post = self.post_repo.get(post_id)
        if not post:
            raise NotFoundError("Post not found")
        return post

    def create(
        self,
        claims: Optional[Claims],
        title: str,
        content: str,
        status: str = "draft",
        tags: Optional[List[str]] = None,
        featured_image_id: Optional[str] = None,
        gallery: Optional[List[str]] = None,
    ) -> PostDto:
        claims = require_role(claims, Role.AUTHOR)
        _check_status(status)
        gallery = list(gallery or [])
        self.media_service.ensure_usable(_media_refs(featured_image_id, gallery), [claims.subject_id])

        post = self.post_repo.create(
            author_id=claims.subject_id,
            title=title,
            content=content,
            status=status,
            tags=list(tags or []),
            featured_image_id=featured_image_id,
            gallery=gallery,
        )
        logger.info(f"Post {post.id} created by {claims.subject_id}")
        return post

    def update(self, claims: Optional[Claims], post_id: str, changes: Dict[str, Any]) -> PostUpdate:
        """
        Apply ``changes`` (only the keys present are touched).

        Media dropped from the post by this edit are deleted after the new
        values are saved; deletion problems come back as warnings.
        """
        post = self.get(post_id)
        claims = require_owner_or_role(claims, post.author_id, Role.ADMIN)

        fields = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
        if "status" in fields:
            _check_status(fields["status"])
        if "tags" in fields and fields["tags"] is None:
            fields["tags"] = []
        if "gallery" in fields and fields["gallery"] is None:
            fields["gallery"] = []

        new_featured = fields.get("featured_image_id", post.featured_image_id)
        new_gallery = fields.get("gallery", post.gallery)
        added = [
            m for m in _media_refs(new_featured, new_gallery)
            if m not in _media_refs(post.featured_image_id, post.gallery)
        ]
        self.media_service.ensure_usable(added, {post.author_id, claims.subject_id})

        updated = self.post_repo.update(post_id, fields)
        if not updated:
            raise NotFoundError("Post not found")

        still_used = set(_media_refs(updated.featured_image_id, updated.gallery))
        superseded = [m for m in _media_refs(post.featured_image_id, post.gallery) if m not in still_used]
        warnings = self.media_service.purge(self.references.unreferenced(superseded))
        return PostUpdate(post=updated, warnings=warnings)

    def delete(self, claims: Optional[Claims], post_id: str) -> PostDeletion:
        claims = require_role(claims, Role.ADMIN)
        post = self.get(post_id)

        # Media shared with another post or a profile stays
        attached = _media_refs(post.featured_image_id, post.gallery)
        warnings = self.media_service.purge(self.references.unreferenced(attached, exclude_post_id=post_id))
        if not self.post_repo.delete(post_id):
            raise NotFoundError("Post not found")
        logger.info(f"Post {post_id} deleted by {claims.subject_id}")
        return PostDeletion(post_id=post_id, warnings=warnings)
