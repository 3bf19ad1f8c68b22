from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlmodel import Session, select

from .....db.models import Post
from .....application.ports.post_repo import PostRepository, PostDto
from ._session import commit_or_rollback

UPDATABLE_FIELDS = ("title", "content", "status", "tags", "featured_image_id", "gallery")


class SqlPostRepository(PostRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, post: Post) -> PostDto:
        return PostDto(
            id=post.id,
            title=post.title,
            content=post.content,
            author_id=post.author_id,
            featured_image_id=post.featured_image_id,
            status=post.status,
            created_at=post.created_at,
            updated_at=post.updated_at,
            gallery=list(post.gallery or []),
            tags=list(post.tags or []),
        )

    def _get(self, post_id: str) -> Optional[Post]:
        return self.session.exec(select(Post).where(Post.id == post_id)).first()

    def create(self, author_id: str, title: str, content: str, status: str, tags: List[str],
               featured_image_id: Optional[str], gallery: List[str]) -> PostDto:
        post = Post(
            author_id=author_id,
            title=title,
            content=content,
            status=status,
            tags=list(tags),
            featured_image_id=featured_image_id,
            gallery=list(gallery),
        )
        self.session.add(post)
        commit_or_rollback(self.session)
        self.session.refresh(post)
        return self._to_dto(post)

    def get(self, post_id: str) -> Optional[PostDto]:
        post = self._get(post_id)
        return self._to_dto(post) if post else None

    def list(self, status: Optional[str] = None) -> List[PostDto]:
        query = select(Post)
        if status:
            query = query.where(Post.status == status)
        posts = self.session.exec(query.order_by(Post.created_at.desc())).all()
        return [self._to_dto(p) for p in posts]

    def update(self, post_id: str, fields: Dict[str, Any]) -> Optional[PostDto]:
        post = self._get(post_id)
        if not post:
            return None
        for key, value in fields.items():
            if key not in UPDATABLE_FIELDS:
                continue
            if key in ("tags", "gallery"):
                # JSON columns only notice reassignment
                value = list(value or [])
            setattr(post, key, value)
        post.updated_at = datetime.utcnow()
        self.session.add(post)
        commit_or_rollback(self.session)
        self.session.refresh(post)
        return self._to_dto(post)

    def delete(self, post_id: str) -> bool:
        post = self._get(post_id)
        if not post:
            return False
        self.session.delete(post)
        commit_or_rollback(self.session)
        return True

    def references(self, media_id: str, exclude_post_id: Optional[str] = None) -> bool:
        query = select(Post)
        if exclude_post_id:
            query = query.where(Post.id != exclude_post_id)
        for post in self.session.exec(query):
            if post.featured_image_id == media_id or media_id in (post.gallery or []):
                return True
        return False
