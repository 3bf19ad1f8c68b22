from typing import List, Optional, Protocol
from dataclasses import dataclass, field
from enum import Enum

from ...exceptions import ValidationError


class RejectionReason(str, Enum):
    TOO_LARGE = "too_large"
    UNSUPPORTED_TYPE = "unsupported_type"


class MediaRejectedError(ValidationError):
    def __init__(self, reason: RejectionReason, detail: Optional[str] = None):
        super().__init__(detail or reason.value)
        self.reason = reason


@dataclass
class SniffedImage:
    mime_type: str
    width: int
    height: int


@dataclass
class Thumbnail:
    size: str
    width: int
    height: int
    path: str
    url: Optional[str] = None


@dataclass
class ThumbnailOutcome:
    thumbnails: List[Thumbnail] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


@dataclass
class StoreResult:
    """Primary write succeeded; thumbnails may be partial."""
    primary_path: str
    thumbnails: List[Thumbnail] = field(default_factory=list)
    thumbnail_errors: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.thumbnail_errors


class MediaStore(Protocol):
    def validate(self, data: bytes) -> SniffedImage:
        ...

    def save_primary(self, data: bytes, owner_id: str, mime_type: str) -> str:
        ...

    def generate_thumbnails(self, primary_path: str) -> ThumbnailOutcome:
        ...

    def store(self, data: bytes, owner_id: str, mime_type: str) -> StoreResult:
        ...

    def delete(self, primary_path: str) -> None:
        ...

    def url_for(self, path: str) -> str:
        ...
