# blog_api/schemas/profiles/profile.py
from pydantic import BaseModel, ConfigDict
from typing import Dict, List, Optional
from datetime import datetime

from ..media.media import MediaResponse


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    full_name: str
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    social_links: Dict[str, str] = {}
    avatar: Optional[MediaResponse] = None
    cover_image: Optional[MediaResponse] = None
    created_at: datetime
    updated_at: datetime
    warnings: List[str] = []

    @classmethod
    def from_view(cls, view) -> "ProfileResponse":
        p = view.profile
        return cls(
            id=p.id,
            user_id=p.user_id,
            full_name=p.full_name,
            bio=p.bio,
            location=p.location,
            website=p.website,
            social_links=p.social_links,
            avatar=MediaResponse.model_validate(view.avatar) if view.avatar else None,
            cover_image=MediaResponse.model_validate(view.cover_image) if view.cover_image else None,
            created_at=p.created_at,
            updated_at=p.updated_at,
            warnings=view.warnings,
        )
