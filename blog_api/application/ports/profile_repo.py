from typing import Any, Dict, Optional, Protocol
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class ProfileDto:
    id: str
    user_id: str
    full_name: str
    bio: Optional[str]
    location: Optional[str]
    website: Optional[str]
    avatar_media_id: Optional[str]
    cover_media_id: Optional[str]
    created_at: datetime
    updated_at: datetime
    social_links: Dict[str, str] = field(default_factory=dict)


class ProfileRepository(Protocol):
    def get_for_user(self, user_id: str) -> Optional[ProfileDto]:
        ...

    def create(self, user_id: str, **fields: Any) -> ProfileDto:
        ...

    def update(self, user_id: str, fields: Dict[str, Any]) -> Optional[ProfileDto]:
        ...

    def delete(self, user_id: str) -> bool:
        ...

    def references(self, media_id: str, exclude_user_id: Optional[str] = None) -> bool:
        """True when any profile other than ``exclude_user_id``'s uses the media as avatar or cover."""
        ...
