from datetime import datetime, timezone

import os
import pytest

from blog_api.application.services.media_service import IncomingFile
from blog_api.application.services.post_service import PostService
from blog_api.core.security import Claims
from blog_api.exceptions import AuthenticationError, AuthorizationError, NotFoundError, StorageError, ValidationError

from fakes import image_bytes


def claims(role, subject_id):
    return Claims(subject_id=subject_id, email=f"{subject_id}@blog.io", role=role, expires_at=datetime.now(timezone.utc))


AUTHOR = claims("author", "author-1")
OTHER_AUTHOR = claims("author", "author-2")
ADMIN = claims("admin", "admin-1")
READER = claims("reader", "reader-1")


@pytest.fixture
def svc(posts, media_service, references):
    return PostService(post_repo=posts, media_service=media_service, references=references)


def media_for(media_service, owner):
    return media_service.upload(owner, IncomingFile("p.jpg", image_bytes(size=(320, 240)))).media


def test_author_creates_post(svc):
    post = svc.create(AUTHOR, "Hello", "Body", status="published", tags=["intro"])
    assert post.author_id == "author-1"
    assert post.status == "published"
    assert svc.get(post.id) == post


def test_reader_cannot_create(svc):
    with pytest.raises(AuthorizationError):
        svc.create(READER, "Hello", "Body")


def test_anonymous_cannot_create(svc):
    with pytest.raises(AuthenticationError):
        svc.create(None, "Hello", "Body")


def test_invalid_status_rejected(svc):
    with pytest.raises(ValidationError):
        svc.create(AUTHOR, "Hello", "Body", status="archived")


def test_create_requires_own_media(svc, media_service):
    theirs = media_for(media_service, "author-2")
    with pytest.raises(ValidationError):
        svc.create(AUTHOR, "Hello", "Body", featured_image_id=theirs.id)
    mine = media_for(media_service, "author-1")
    post = svc.create(AUTHOR, "Hello", "Body", featured_image_id=mine.id, gallery=[mine.id])
    assert post.featured_image_id == mine.id


def test_list_filters_by_status(svc):
    svc.create(AUTHOR, "Draft", "Body")
    svc.create(AUTHOR, "Live", "Body", status="published")
    assert [p.title for p in svc.list("published")] == ["Live"]
    assert len(svc.list()) == 2


def test_get_missing_post(svc):
    with pytest.raises(NotFoundError):
        svc.get("nope")


def test_owner_and_admin_can_update(svc):
    post = svc.create(AUTHOR, "Hello", "Body")
    assert svc.update(AUTHOR, post.id, {"title": "Edited"}).post.title == "Edited"
    assert svc.update(ADMIN, post.id, {"status": "published"}).post.status == "published"


def test_other_author_cannot_update(svc):
    post = svc.create(AUTHOR, "Hello", "Body")
    with pytest.raises(AuthorizationError):
        svc.update(OTHER_AUTHOR, post.id, {"title": "Mine now"})


def test_swapping_featured_image_deletes_old_one(svc, media_service, media_repo):
    old = media_for(media_service, "author-1")
    new = media_for(media_service, "author-1")
    post = svc.create(AUTHOR, "Hello", "Body", featured_image_id=old.id)
    result = svc.update(AUTHOR, post.id, {"featured_image_id": new.id})
    assert result.post.featured_image_id == new.id
    assert result.warnings == []
    assert old.id not in media_repo.items
    assert not os.path.exists(old.path)
    assert new.id in media_repo.items


def test_media_moved_into_gallery_is_kept(svc, media_service, media_repo):
    featured = media_for(media_service, "author-1")
    post = svc.create(AUTHOR, "Hello", "Body", featured_image_id=featured.id)
    result = svc.update(AUTHOR, post.id, {"featured_image_id": None, "gallery": [featured.id]})
    assert result.post.featured_image_id is None
    assert featured.id in media_repo.items


def test_update_survives_failed_media_cleanup(svc, media_service, store, monkeypatch):
    old = media_for(media_service, "author-1")
    post = svc.create(AUTHOR, "Hello", "Body", gallery=[old.id])

    def fail(path):
        raise StorageError("Failed to delete media files")

    monkeypatch.setattr(store, "delete", fail)
    result = svc.update(AUTHOR, post.id, {"gallery": []})
    assert result.post.gallery == []
    assert result.warnings == [f"Media {old.id} could not be deleted"]


def test_only_admin_deletes(svc):
    post = svc.create(AUTHOR, "Hello", "Body")
    with pytest.raises(AuthorizationError):
        svc.delete(AUTHOR, post.id)
    assert svc.delete(ADMIN, post.id).warnings == []
    with pytest.raises(NotFoundError):
        svc.get(post.id)


def test_delete_cascades_to_media(svc, media_service, media_repo):
    featured = media_for(media_service, "author-1")
    extra = media_for(media_service, "author-1")
    post = svc.create(AUTHOR, "Hello", "Body", featured_image_id=featured.id, gallery=[featured.id, extra.id])
    svc.delete(ADMIN, post.id)
    assert media_repo.items == {}


def test_delete_reports_media_failures_and_still_removes_post(svc, media_service, posts, store, monkeypatch):
    featured = media_for(media_service, "author-1")
    post = svc.create(AUTHOR, "Hello", "Body", featured_image_id=featured.id)

    def fail(path):
        raise StorageError("Failed to delete media files")

    monkeypatch.setattr(store, "delete", fail)
    result = svc.delete(ADMIN, post.id)
    assert result.warnings == [f"Media {featured.id} could not be deleted"]
    assert post.id not in posts.posts


def test_delete_keeps_media_shared_with_another_post(svc, media_service, media_repo):
    shared = media_for(media_service, "author-1")
    first = svc.create(AUTHOR, "First", "Body", featured_image_id=shared.id)
    second = svc.create(AUTHOR, "Second", "Body", featured_image_id=shared.id)
    assert svc.delete(ADMIN, first.id).warnings == []
    assert shared.id in media_repo.items
    assert os.path.exists(shared.path)
    assert svc.get(second.id).featured_image_id == shared.id


def test_delete_keeps_media_used_as_avatar(svc, media_service, media_repo, profiles):
    avatar = media_for(media_service, "author-1")
    profiles.create("author-1", full_name="Ann", avatar_media_id=avatar.id)
    post = svc.create(AUTHOR, "Hello", "Body", gallery=[avatar.id])
    svc.delete(ADMIN, post.id)
    assert avatar.id in media_repo.items


def test_swapping_featured_image_keeps_media_in_other_gallery(svc, media_service, media_repo):
    old = media_for(media_service, "author-1")
    new = media_for(media_service, "author-1")
    post = svc.create(AUTHOR, "Hello", "Body", featured_image_id=old.id)
    svc.create(AUTHOR, "Other", "Body", gallery=[old.id])
    result = svc.update(AUTHOR, post.id, {"featured_image_id": new.id})
    assert result.warnings == []
    assert old.id in media_repo.items
    assert os.path.exists(old.path)
