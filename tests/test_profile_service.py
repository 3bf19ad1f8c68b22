import pytest

from blog_api.application.ports.media_store import MediaRejectedError
from blog_api.application.services.media_service import IncomingFile
from blog_api.application.services.profile_service import ProfileService
from blog_api.exceptions import NotFoundError

from fakes import image_bytes


@pytest.fixture
def svc(profiles, media_service, references):
    return ProfileService(profile_repo=profiles, media_service=media_service, references=references)


def png():
    return IncomingFile("a.png", image_bytes("PNG", size=(400, 400)))


def test_get_mine_creates_empty_profile(svc, profiles):
    view = svc.get_mine("user-1")
    assert view.profile.user_id == "user-1"
    assert view.profile.full_name == ""
    assert view.avatar is None
    assert profiles.get_for_user("user-1") is not None


def test_get_for_unknown_user(svc):
    with pytest.raises(NotFoundError):
        svc.get_for_user("ghost")


def test_update_text_fields(svc):
    view = svc.update_mine("user-1", {"full_name": "Ann", "bio": None, "social_links": {"x": "@ann"}})
    assert view.profile.full_name == "Ann"
    assert view.profile.social_links == {"x": "@ann"}


def test_new_avatar_replaces_old(svc, media_repo):
    first = svc.update_mine("user-1", {}, avatar=png())
    second = svc.update_mine("user-1", {}, avatar=png())
    assert second.avatar is not None
    assert second.avatar.id != first.avatar.id
    assert first.avatar.id not in media_repo.items
    assert second.avatar.user_id == "user-1"


def test_invalid_upload_leaves_profile_untouched(svc, media_repo):
    svc.update_mine("user-1", {"full_name": "Ann"})
    with pytest.raises(MediaRejectedError):
        svc.update_mine("user-1", {"full_name": "Changed"}, cover_image=IncomingFile("c.jpg", b"text"))
    assert svc.get_mine("user-1").profile.full_name == "Ann"
    assert media_repo.items == {}


def test_delete_mine_purges_images(svc, profiles, media_repo):
    svc.update_mine("user-1", {}, avatar=png(), cover_image=png())
    assert svc.delete_mine("user-1") == []
    assert profiles.get_for_user("user-1") is None
    assert media_repo.items == {}


def test_delete_missing_profile(svc):
    with pytest.raises(NotFoundError):
        svc.delete_mine("ghost")


def test_new_avatar_keeps_old_one_when_a_post_uses_it(svc, media_repo, posts):
    first = svc.update_mine("user-1", {}, avatar=png())
    posts.create("user-1", "Hello", "Body", "draft", [], first.avatar.id, [])
    svc.update_mine("user-1", {}, avatar=png())
    assert first.avatar.id in media_repo.items


def test_delete_mine_keeps_images_used_by_posts(svc, media_repo, posts):
    view = svc.update_mine("user-1", {}, avatar=png(), cover_image=png())
    posts.create("user-1", "Hello", "Body", "draft", [], None, [view.cover_image.id])
    assert svc.delete_mine("user-1") == []
    assert list(media_repo.items) == [view.cover_image.id]
