# blog_api/infrastructure/storage/local_media_store.py
import io
import os
import secrets
import time
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from PIL import Image

from ...application.ports.media_store import (
    MediaRejectedError,
    MediaStore,
    RejectionReason,
    SniffedImage,
    StoreResult,
    Thumbnail,
    ThumbnailOutcome,
)
from ...exceptions import StorageError, ValidationError

logger = logging.getLogger(__name__)

# Sniffed MIME type -> extension written to disk
EXTENSIONS: Dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

# Pillow reports some JPEG variants under their own format name
_FORMAT_ALIASES = {"MPO": "image/jpeg"}

_LOSSY_EXTENSIONS = {".jpg", ".jpeg", ".webp"}


class LocalMediaStore(MediaStore):
    """Validates uploads and keeps originals plus thumbnails under ``<upload_dir>/<owner_id>/``."""

    def __init__(
        self,
        upload_dir: str,
        max_file_size: int,
        allowed_types: Iterable[str],
        thumbnail_sizes: Dict[str, Tuple[int, int]],
        base_url: str = "",
        url_prefix: str = "/media",
    ) -> None:
        self.upload_dir = upload_dir
        self.max_file_size = max_file_size
        self.allowed_types = list(allowed_types)
        self.thumbnail_sizes = dict(thumbnail_sizes)
        self.base_url = base_url.rstrip("/")
        self.url_prefix = "/" + url_prefix.strip("/") if url_prefix.strip("/") else ""
        os.makedirs(self.upload_dir, exist_ok=True)

    @classmethod
    def from_settings(cls, settings) -> "LocalMediaStore":
        return cls(
            upload_dir=settings.UPLOAD_DIR,
            max_file_size=settings.MAX_FILE_SIZE,
            allowed_types=settings.ALLOWED_IMAGE_TYPES,
            thumbnail_sizes=settings.THUMBNAIL_SIZES,
            base_url=settings.BASE_URL,
            url_prefix=settings.MEDIA_URL_PREFIX,
        )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def sniff(self, data: bytes) -> Optional[SniffedImage]:
        """Identify the image type from its header bytes. None when not an image.

        Raises MediaRejectedError(TOO_LARGE) when the declared dimensions exceed
        Pillow's decompression-bomb limit.
        """
        try:
            with Image.open(io.BytesIO(data)) as img:
                mime_type = _FORMAT_ALIASES.get(img.format) or Image.MIME.get(img.format)
                if not mime_type:
                    return None
                width, height = img.size
                return SniffedImage(mime_type=mime_type, width=width, height=height)
        except Image.DecompressionBombError as e:
            logger.warning(f"Rejected oversized image: {e}")
            raise MediaRejectedError(RejectionReason.TOO_LARGE, "Image dimensions too large") from e
        except Exception as e:
            logger.debug(f"Content sniffing failed: {e}")
            return None

    def validate(self, data: bytes) -> SniffedImage:
        if len(data) > self.max_file_size:
            raise MediaRejectedError(
                RejectionReason.TOO_LARGE,
                f"File size exceeds maximum allowed size of {self.max_file_size} bytes",
            )
        sniffed = self.sniff(data)
        if sniffed is None or sniffed.mime_type not in self.allowed_types:
            detected = sniffed.mime_type if sniffed else "unknown"
            raise MediaRejectedError(
                RejectionReason.UNSUPPORTED_TYPE,
                f"File type {detected} is not allowed. Allowed: {', '.join(self.allowed_types)}",
            )
        return sniffed

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------
    def _owner_dir(self, owner_id: str) -> str:
        if not owner_id or owner_id in (".", "..") or "/" in owner_id or os.sep in owner_id:
            raise ValidationError("Invalid owner id")
        return os.path.join(self.upload_dir, owner_id)

    def _new_filename(self, mime_type: str) -> str:
        return f"{time.time_ns()}_{secrets.token_hex(4)}{EXTENSIONS.get(mime_type, '')}"

    def save_primary(self, data: bytes, owner_id: str, mime_type: str) -> str:
        owner_dir = self._owner_dir(owner_id)
        try:
            os.makedirs(owner_dir, exist_ok=True)
            for _ in range(3):
                path = os.path.join(owner_dir, self._new_filename(mime_type))
                try:
                    # "x" never truncates an existing file
                    with open(path, "xb") as f:
                        f.write(data)
                    logger.info(f"Stored upload {path} ({len(data)} bytes)")
                    return path
                except FileExistsError:
                    continue
        except OSError as e:
            logger.error(f"Error saving upload for owner {owner_id}: {e}")
            raise StorageError("Failed to save file") from e
        raise StorageError("Could not allocate a unique filename")

    def thumbnail_path(self, primary_path: str, size: str) -> str:
        base, ext = os.path.splitext(primary_path)
        return f"{base}_{size}{ext}"

    def thumbnail_paths(self, primary_path: str) -> List[str]:
        return [self.thumbnail_path(primary_path, size) for size in self.thumbnail_sizes]

    def _render_thumbnail(self, source: Image.Image, box: Tuple[int, int], path: str) -> Tuple[int, int]:
        image = source.copy()
        # Fits within the box, keeps the aspect ratio and never upscales
        image.thumbnail(box, Image.Resampling.LANCZOS)
        ext = os.path.splitext(path)[1].lower()
        save_kwargs = {}
        if ext in _LOSSY_EXTENSIONS:
            save_kwargs["quality"] = 85
        if ext in (".jpg", ".jpeg") and image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
        image.save(path, **save_kwargs)
        return image.size

    def generate_thumbnails(self, primary_path: str) -> ThumbnailOutcome:
        outcome = ThumbnailOutcome()
        try:
            with Image.open(primary_path) as source:
                source.load()
                for size, box in self.thumbnail_sizes.items():
                    path = self.thumbnail_path(primary_path, size)
                    try:
                        width, height = self._render_thumbnail(source, box, path)
                        outcome.thumbnails.append(Thumbnail(size=size, width=width, height=height, path=path))
                    except Exception as e:
                        logger.warning(f"Error creating {size} thumbnail for {primary_path}: {e}")
                        outcome.errors.append(f"Thumbnail '{size}' could not be generated")
        except Exception as e:
            logger.warning(f"Error opening {primary_path} for thumbnails: {e}")
            outcome.errors.append("Thumbnails could not be generated")
        return outcome

    def store(self, data: bytes, owner_id: str, mime_type: str) -> StoreResult:
        primary_path = self.save_primary(data, owner_id, mime_type)
        outcome = self.generate_thumbnails(primary_path)
        return StoreResult(
            primary_path=primary_path,
            thumbnails=outcome.thumbnails,
            thumbnail_errors=outcome.errors,
        )

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------
    def _ensure_within_root(self, path: str) -> None:
        root = os.path.realpath(self.upload_dir)
        target = os.path.realpath(path)
        if target == root or os.path.commonpath([root, target]) != root:
            raise ValidationError("Invalid media path")

    def delete(self, primary_path: str) -> None:
        """Remove the primary file and every thumbnail. Missing files count as deleted."""
        self._ensure_within_root(primary_path)
        errors: List[str] = []
        for path in [primary_path] + self.thumbnail_paths(primary_path):
            try:
                os.remove(path)
            except FileNotFoundError:
                logger.info(f"Media file already absent: {path}")
            except OSError as e:
                logger.error(f"Error deleting media file {path}: {e}")
                errors.append(f"{path}: {e}")
        if errors:
            raise StorageError("Failed to delete media files", errors=errors)

    # ------------------------------------------------------------------
    # URLs
    # ------------------------------------------------------------------
    def url_for(self, path: str) -> str:
        root = os.path.normpath(self.upload_dir)
        normalized = os.path.normpath(path)
        if normalized.startswith(root + os.sep):
            relative = normalized[len(root) + 1:]
        else:
            relative = normalized.lstrip(os.sep)
        relative = relative.replace(os.sep, "/")
        return f"{self.base_url}{self.url_prefix}/{relative}"
