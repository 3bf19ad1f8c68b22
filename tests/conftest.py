import os
import tempfile

# Settings are read at import time
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="blog-uploads-"))
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest

from blog_api.application.services.media_references import MediaReferences
from blog_api.application.services.media_service import MediaService
from blog_api.infrastructure.storage.local_media_store import LocalMediaStore

from fakes import THUMBNAIL_SIZES, FakeMediaRepo, FakePostRepo, FakeProfileRepo


@pytest.fixture
def store(tmp_path):
    return LocalMediaStore(
        upload_dir=str(tmp_path / "uploads"),
        max_file_size=10 * 1024 * 1024,
        allowed_types=["image/jpeg", "image/png", "image/gif", "image/webp"],
        thumbnail_sizes=THUMBNAIL_SIZES,
        base_url="http://cdn.test",
    )


@pytest.fixture
def media_repo():
    return FakeMediaRepo()


@pytest.fixture
def media_service(media_repo, store):
    return MediaService(media_repo=media_repo, store=store)


@pytest.fixture
def posts():
    return FakePostRepo()


@pytest.fixture
def profiles():
    return FakeProfileRepo()


@pytest.fixture
def references(posts, profiles):
    return MediaReferences(post_repo=posts, profile_repo=profiles)
