from typing import Any, Dict, List, Optional, Protocol
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class PostDto:
    id: str
    title: str
    content: str
    author_id: str
    featured_image_id: Optional[str]
    status: str
    created_at: datetime
    updated_at: datetime
    gallery: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)


class PostRepository(Protocol):
    def create(self, author_id: str, title: str, content: str, status: str, tags: List[str],
               featured_image_id: Optional[str], gallery: List[str]) -> PostDto:
        ...

    def get(self, post_id: str) -> Optional[PostDto]:
        ...

    def list(self, status: Optional[str] = None) -> List[PostDto]:
        ...

    def update(self, post_id: str, fields: Dict[str, Any]) -> Optional[PostDto]:
        ...

    def delete(self, post_id: str) -> bool:
        ...

    def references(self, media_id: str, exclude_post_id: Optional[str] = None) -> bool:
        """True when any post other than ``exclude_post_id`` uses the media as featured image or in its gallery."""
        ...
