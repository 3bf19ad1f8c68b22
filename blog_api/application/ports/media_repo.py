from typing import List, Optional, Protocol
from dataclasses import dataclass, field
from datetime import datetime

from .media_store import Thumbnail


@dataclass
class MediaMetadata:
    width: Optional[int] = None
    height: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    alt_text: Optional[str] = None
    tags: List[str] = field(default_factory=list)


@dataclass
class MediaDto:
    id: str
    user_id: str
    file_name: str
    file_type: str
    mime_type: str
    size: int
    path: str
    url: str
    created_at: datetime
    updated_at: datetime
    thumbnails: List[Thumbnail] = field(default_factory=list)
    metadata: MediaMetadata = field(default_factory=MediaMetadata)


class MediaRepository(Protocol):
    def create(self, user_id: str, file_name: str, file_type: str, mime_type: str, size: int,
               path: str, url: str, metadata: MediaMetadata) -> MediaDto:
        ...

    def set_thumbnails(self, media_id: str, thumbnails: List[Thumbnail]) -> Optional[MediaDto]:
        ...

    def get(self, media_id: str) -> Optional[MediaDto]:
        ...

    def get_for_owner(self, media_id: str, owner_id: str) -> Optional[MediaDto]:
        ...

    def list_for_owner(self, owner_id: str) -> List[MediaDto]:
        ...

    def update_metadata(self, media_id: str, owner_id: str, metadata: MediaMetadata) -> Optional[MediaDto]:
        ...

    def delete(self, media_id: str) -> bool:
        ...
