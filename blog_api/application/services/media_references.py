from dataclasses import dataclass
from typing import Iterable, List, Optional
import logging

from ..ports.post_repo import PostRepository
from ..ports.profile_repo import ProfileRepository

logger = logging.getLogger(__name__)


@dataclass
class MediaReferences:
    """Answers whether a media record is still attached to a post or a profile."""
    post_repo: PostRepository
    profile_repo: ProfileRepository

    def in_use(
        self,
        media_id: str,
        exclude_post_id: Optional[str] = None,
        exclude_user_id: Optional[str] = None,
    ) -> bool:
        return (
            self.post_repo.references(media_id, exclude_post_id)
            or self.profile_repo.references(media_id, exclude_user_id)
        )

    def unreferenced(
        self,
        media_ids: Iterable[Optional[str]],
        exclude_post_id: Optional[str] = None,
        exclude_user_id: Optional[str] = None,
    ) -> List[str]:
        """Deduplicated ids from ``media_ids`` that nothing else points at."""
        free: List[str] = []
        for media_id in dict.fromkeys(m for m in media_ids if m):
            if self.in_use(media_id, exclude_post_id, exclude_user_id):
                logger.info(f"Keeping media {media_id}: still referenced")
                continue
            free.append(media_id)
        return free
