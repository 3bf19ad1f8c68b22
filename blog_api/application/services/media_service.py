from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional
import logging
import os

from ..ports.media_repo import MediaDto, MediaMetadata, MediaRepository
from ..ports.media_store import MediaStore, SniffedImage
from ...exceptions import NotFoundError, StorageError, ValidationError

logger = logging.getLogger(__name__)

EDITABLE_METADATA_FIELDS = ("title", "description", "alt_text", "tags")


@dataclass
class IncomingFile:
    filename: str
    data: bytes


@dataclass
class UploadOutcome:
    media: MediaDto
    warnings: List[str] = field(default_factory=list)


@dataclass
class MediaService:
    media_repo: MediaRepository
    store: MediaStore

    def validate(self, upload: IncomingFile) -> SniffedImage:
        return self.store.validate(upload.data)

    def upload(self, owner_id: str, upload: IncomingFile, metadata: Optional[Dict[str, Any]] = None) -> UploadOutcome:
        sniffed = self.store.validate(upload.data)

        primary_path = self.store.save_primary(upload.data, owner_id, sniffed.mime_type)

        meta = MediaMetadata(width=sniffed.width, height=sniffed.height)
        for key, value in (metadata or {}).items():
            if key in EDITABLE_METADATA_FIELDS and value is not None:
                setattr(meta, key, value)

        try:
            media = self.media_repo.create(
                user_id=owner_id,
                file_name=os.path.basename(upload.filename or ""),
                file_type=os.path.splitext(primary_path)[1],
                mime_type=sniffed.mime_type,
                size=len(upload.data),
                path=primary_path,
                url=self.store.url_for(primary_path),
                metadata=meta,
            )
        except Exception as e:
            logger.error(f"Error saving media record for {primary_path}: {e}")
            self._discard_files(primary_path)
            raise StorageError("Failed to save media record") from e

        outcome = self.store.generate_thumbnails(primary_path)
        warnings = list(outcome.errors)
        if outcome.thumbnails:
            thumbnails = [replace(t, url=self.store.url_for(t.path)) for t in outcome.thumbnails]
            try:
                media = self.media_repo.set_thumbnails(media.id, thumbnails) or media
            except Exception as e:
                logger.warning(f"Could not record thumbnails for media {media.id}: {e}")
                warnings.append("Thumbnails were generated but could not be recorded")

        return UploadOutcome(media=media, warnings=warnings)

    def _discard_files(self, primary_path: str) -> None:
        try:
            self.store.delete(primary_path)
        except Exception as e:
            logger.error(f"Could not remove orphaned upload {primary_path}: {e}")

    def find(self, media_id: Optional[str]) -> Optional[MediaDto]:
        if not media_id:
            return None
        return self.media_repo.get(media_id)

    def get(self, media_id: str) -> MediaDto:
        media = self.media_repo.get(media_id)
        if not media:
            raise NotFoundError("Media not found")
        return media

    def list_for_owner(self, owner_id: str) -> List[MediaDto]:
        return self.media_repo.list_for_owner(owner_id)

    def update_metadata(self, owner_id: str, media_id: str, changes: Dict[str, Any]) -> MediaDto:
        media = self.media_repo.get_for_owner(media_id, owner_id)
        if not media:
            raise NotFoundError("Media not found")
        meta = replace(media.metadata)
        for key in EDITABLE_METADATA_FIELDS:
            if key in changes:
                value = changes[key]
                if key == "tags" and value is None:
                    value = []
                setattr(meta, key, value)
        updated = self.media_repo.update_metadata(media_id, owner_id, meta)
        if not updated:
            raise NotFoundError("Media not found")
        return updated

    def delete(self, owner_id: str, media_id: str) -> None:
        media = self.media_repo.get_for_owner(media_id, owner_id)
        if not media:
            raise NotFoundError("Media not found")
        # Files go first; the record stays when they cannot be removed so the delete can be retried.
        self.store.delete(media.path)
        self.media_repo.delete(media.id)
        logger.info(f"Deleted media {media.id} for owner {owner_id}")

    def purge(self, media_ids: Iterable[Optional[str]]) -> List[str]:
        """Delete media best-effort and return the errors hit along the way."""
        errors: List[str] = []
        for media_id in media_ids:
            if not media_id:
                continue
            try:
                media = self.media_repo.get(media_id)
                if media is None:
                    continue
                self.store.delete(media.path)
                self.media_repo.delete(media.id)
            except Exception as e:
                logger.warning(f"Could not delete media {media_id}: {e}")
                errors.append(f"Media {media_id} could not be deleted")
        return errors

    def ensure_usable(self, media_ids: Iterable[Optional[str]], allowed_owner_ids: Iterable[str]) -> None:
        owners = set(allowed_owner_ids)
        for media_id in media_ids:
            if not media_id:
                continue
            media = self.media_repo.get(media_id)
            if media is None or media.user_id not in owners:
                raise ValidationError(f"Media {media_id} not found")
