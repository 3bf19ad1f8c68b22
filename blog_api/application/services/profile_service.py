from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging

from ..ports.media_repo import MediaDto
from ..ports.media_store import MediaRejectedError
from ..ports.profile_repo import ProfileDto, ProfileRepository
from .media_references import MediaReferences
from .media_service import IncomingFile, MediaService
from ...exceptions import NotFoundError

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("full_name", "bio", "location", "website", "social_links")


@dataclass
class ProfileView:
    profile: ProfileDto
    avatar: Optional[MediaDto] = None
    cover_image: Optional[MediaDto] = None
    warnings: List[str] = field(default_factory=list)


@dataclass
class ProfileService:
    profile_repo: ProfileRepository
    media_service: MediaService
    references: MediaReferences

    def _view(self, profile: ProfileDto, warnings: Optional[List[str]] = None) -> ProfileView:
        return ProfileView(
            profile=profile,
            avatar=self.media_service.find(profile.avatar_media_id),
            cover_image=self.media_service.find(profile.cover_media_id),
            warnings=list(warnings or []),
        )

    def get_for_user(self, user_id: str) -> ProfileView:
        profile = self.profile_repo.get_for_user(user_id)
        if not profile:
            raise NotFoundError("Profile not found")
        return self._view(profile)

    def get_mine(self, user_id: str) -> ProfileView:
        profile = self.profile_repo.get_for_user(user_id)
        if not profile:
            profile = self.profile_repo.create(user_id, full_name="", social_links={})
            logger.info(f"Created empty profile for user {user_id}")
        return self._view(profile)

    def update_mine(
        self,
        user_id: str,
        changes: Dict[str, Any],
        avatar: Optional[IncomingFile] = None,
        cover_image: Optional[IncomingFile] = None,
    ) -> ProfileView:
        current = self.get_mine(user_id).profile

        for label, upload in (("avatar", avatar), ("cover image", cover_image)):
            if upload is not None:
                try:
                    self.media_service.validate(upload)
                except MediaRejectedError as e:
                    raise MediaRejectedError(e.reason, f"Invalid {label}: {e.detail}") from e

        fields = {k: v for k, v in changes.items() if k in TEXT_FIELDS and v is not None}
        warnings: List[str] = []
        new_media: List[str] = []
        try:
            if avatar is not None:
                outcome = self.media_service.upload(user_id, avatar)
                fields["avatar_media_id"] = outcome.media.id
                new_media.append(outcome.media.id)
                warnings.extend(outcome.warnings)
            if cover_image is not None:
                outcome = self.media_service.upload(user_id, cover_image)
                fields["cover_media_id"] = outcome.media.id
                new_media.append(outcome.media.id)
                warnings.extend(outcome.warnings)

            updated = self.profile_repo.update(user_id, fields)
            if not updated:
                raise NotFoundError("Profile not found")
        except Exception:
            self.media_service.purge(new_media)
            raise

        superseded = []
        if "avatar_media_id" in fields and current.avatar_media_id:
            superseded.append(current.avatar_media_id)
        if "cover_media_id" in fields and current.cover_media_id:
            superseded.append(current.cover_media_id)
        warnings.extend(self.media_service.purge(self.references.unreferenced(superseded)))
        return self._view(updated, warnings)

    def delete_mine(self, user_id: str) -> List[str]:
        profile = self.profile_repo.get_for_user(user_id)
        if not profile:
            raise NotFoundError("Profile not found")
        attached = [profile.avatar_media_id, profile.cover_media_id]
        warnings = self.media_service.purge(self.references.unreferenced(attached, exclude_user_id=user_id))
        self.profile_repo.delete(user_id)
        logger.info(f"Deleted profile for user {user_id}")
        return warnings
