from datetime import datetime
from typing import Any, Dict, Optional
from sqlmodel import Session, or_, select

from .....db.models import Profile
from .....application.ports.profile_repo import ProfileRepository, ProfileDto
from ._session import commit_or_rollback

UPDATABLE_FIELDS = (
    "full_name",
    "bio",
    "location",
    "website",
    "social_links",
    "avatar_media_id",
    "cover_media_id",
)


class SqlProfileRepository(ProfileRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, profile: Profile) -> ProfileDto:
        return ProfileDto(
            id=profile.id,
            user_id=profile.user_id,
            full_name=profile.full_name,
            bio=profile.bio,
            location=profile.location,
            website=profile.website,
            avatar_media_id=profile.avatar_media_id,
            cover_media_id=profile.cover_media_id,
            created_at=profile.created_at,
            updated_at=profile.updated_at,
            social_links=dict(profile.social_links or {}),
        )

    def _get(self, user_id: str) -> Optional[Profile]:
        return self.session.exec(select(Profile).where(Profile.user_id == user_id)).first()

    def get_for_user(self, user_id: str) -> Optional[ProfileDto]:
        profile = self._get(user_id)
        return self._to_dto(profile) if profile else None

    def create(self, user_id: str, **fields: Any) -> ProfileDto:
        values = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
        values["social_links"] = dict(values.get("social_links") or {})
        values.setdefault("full_name", "")
        profile = Profile(user_id=user_id, **values)
        self.session.add(profile)
        commit_or_rollback(self.session)
        self.session.refresh(profile)
        return self._to_dto(profile)

    def update(self, user_id: str, fields: Dict[str, Any]) -> Optional[ProfileDto]:
        profile = self._get(user_id)
        if not profile:
            return None
        for key, value in fields.items():
            if key not in UPDATABLE_FIELDS:
                continue
            if key == "social_links":
                value = dict(value or {})
            setattr(profile, key, value)
        profile.updated_at = datetime.utcnow()
        self.session.add(profile)
        commit_or_rollback(self.session)
        self.session.refresh(profile)
        return self._to_dto(profile)

    def delete(self, user_id: str) -> bool:
        profile = self._get(user_id)
        if not profile:
            return False
        self.session.delete(profile)
        commit_or_rollback(self.session)
        return True

    def references(self, media_id: str, exclude_user_id: Optional[str] = None) -> bool:
        query = select(Profile).where(
            or_(Profile.avatar_media_id == media_id, Profile.cover_media_id == media_id)
        )
        if exclude_user_id:
            query = query.where(Profile.user_id != exclude_user_id)
        return self.session.exec(query).first() is not None
