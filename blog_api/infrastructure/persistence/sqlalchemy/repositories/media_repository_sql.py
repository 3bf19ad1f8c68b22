from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlmodel import Session, select

from .....db.models import Media
from .....application.ports.media_repo import MediaDto, MediaMetadata, MediaRepository
from .....application.ports.media_store import Thumbnail
from ._session import commit_or_rollback


def _thumbnail_from_row(row: Dict[str, Any]) -> Thumbnail:
    return Thumbnail(
        size=row.get("size", ""),
        width=int(row.get("width") or 0),
        height=int(row.get("height") or 0),
        path=row.get("path", ""),
        url=row.get("url"),
    )


def _metadata_from_row(row: Optional[Dict[str, Any]]) -> MediaMetadata:
    row = row or {}
    return MediaMetadata(
        width=row.get("width"),
        height=row.get("height"),
        title=row.get("title"),
        description=row.get("description"),
        alt_text=row.get("alt_text"),
        tags=list(row.get("tags") or []),
    )


class SqlMediaRepository(MediaRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, media: Media) -> MediaDto:
        return MediaDto(
            id=media.id,
            user_id=media.user_id,
            file_name=media.file_name,
            file_type=media.file_type,
            mime_type=media.mime_type,
            size=media.size,
            path=media.path,
            url=media.url,
            created_at=media.created_at,
            updated_at=media.updated_at,
            thumbnails=[_thumbnail_from_row(t) for t in (media.thumbnails or [])],
            metadata=_metadata_from_row(media.meta),
        )

    def _get(self, media_id: str) -> Optional[Media]:
        return self.session.exec(select(Media).where(Media.id == media_id)).first()

    def _get_owned(self, media_id: str, owner_id: str) -> Optional[Media]:
        return self.session.exec(
            select(Media).where(Media.id == media_id, Media.user_id == owner_id)
        ).first()

    def _save(self, media: Media) -> MediaDto:
        media.updated_at = datetime.utcnow()
        self.session.add(media)
        commit_or_rollback(self.session)
        self.session.refresh(media)
        return self._to_dto(media)

    def create(self, user_id: str, file_name: str, file_type: str, mime_type: str, size: int,
               path: str, url: str, metadata: MediaMetadata) -> MediaDto:
        media = Media(
            user_id=user_id,
            file_name=file_name,
            file_type=file_type,
            mime_type=mime_type,
            size=size,
            path=path,
            url=url,
            thumbnails=[],
            meta=asdict(metadata),
        )
        self.session.add(media)
        commit_or_rollback(self.session)
        self.session.refresh(media)
        return self._to_dto(media)

    def set_thumbnails(self, media_id: str, thumbnails: List[Thumbnail]) -> Optional[MediaDto]:
        media = self._get(media_id)
        if not media:
            return None
        media.thumbnails = [asdict(t) for t in thumbnails]
        return self._save(media)

    def get(self, media_id: str) -> Optional[MediaDto]:
        media = self._get(media_id)
        return self._to_dto(media) if media else None

    def get_for_owner(self, media_id: str, owner_id: str) -> Optional[MediaDto]:
        media = self._get_owned(media_id, owner_id)
        return self._to_dto(media) if media else None

    def list_for_owner(self, owner_id: str) -> List[MediaDto]:
        rows = self.session.exec(
            select(Media).where(Media.user_id == owner_id).order_by(Media.created_at.desc())
        ).all()
        return [self._to_dto(m) for m in rows]

    def update_metadata(self, media_id: str, owner_id: str, metadata: MediaMetadata) -> Optional[MediaDto]:
        media = self._get_owned(media_id, owner_id)
        if not media:
            return None
        media.meta = asdict(metadata)
        return self._save(media)

    def delete(self, media_id: str) -> bool:
        media = self._get(media_id)
        if not media:
            return False
        self.session.delete(media)
        commit_or_rollback(self.session)
        return True
