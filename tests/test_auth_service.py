from datetime import datetime, timedelta

import pytest

from blog_api.application.ports.media_store import MediaRejectedError
from blog_api.application.services.auth_service import (
    RESET_REQUEST_MESSAGE,
    AuthService,
    Registration,
)
from blog_api.application.services.media_service import IncomingFile
from blog_api.core.security import verify_token
from blog_api.exceptions import AuthenticationError, ConflictError, StorageError, ValidationError

from fakes import FakeHasher, FakeMailer, FakeResetTokenRepo, FakeUserRepo, image_bytes


@pytest.fixture
def users():
    return FakeUserRepo()


@pytest.fixture
def resets():
    return FakeResetTokenRepo()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def svc(users, profiles, resets, mailer, media_service):
    return AuthService(
        user_repo=users,
        profile_repo=profiles,
        reset_repo=resets,
        hasher=FakeHasher(),
        mailer=mailer,
        media_service=media_service,
        base_url="https://blog.test",
    )


def registration(**overrides):
    data = dict(username="ann", email="Ann@Blog.io", password="secret1", full_name="Ann Lee")
    data.update(overrides)
    return Registration(**data)


def test_register_defaults_to_reader_and_creates_profile(svc, users, profiles):
    result = svc.register(registration())
    assert result.user.role == "reader"
    assert result.user.email == "ann@blog.io"
    assert result.user.password_hash == "hashed:secret1"
    assert profiles.get_for_user(result.user.id).full_name == "Ann Lee"


def test_register_accepts_valid_role(svc):
    assert svc.register(registration(role="author")).user.role == "author"


def test_register_rejects_unknown_role(svc, users):
    with pytest.raises(ValidationError):
        svc.register(registration(role="owner"))
    assert users.users == {}


def test_register_rejects_short_password(svc):
    with pytest.raises(ValidationError):
        svc.register(registration(password="12345"))


def test_register_conflicts(svc):
    svc.register(registration())
    with pytest.raises(ConflictError):
        svc.register(registration(email="other@blog.io"))
    with pytest.raises(ConflictError):
        svc.register(registration(username="ann2", email="ANN@blog.io"))


def test_register_stores_avatar_under_new_user(svc, profiles, media_repo):
    result = svc.register(registration(), avatar=IncomingFile("me.png", image_bytes("PNG")))
    profile = profiles.get_for_user(result.user.id)
    avatar = media_repo.get(profile.avatar_media_id)
    assert avatar.user_id == result.user.id
    assert profile.cover_media_id is None


def test_bad_cover_rejects_before_any_write(svc, users, media_repo):
    with pytest.raises(MediaRejectedError):
        svc.register(
            registration(),
            avatar=IncomingFile("me.png", image_bytes("PNG")),
            cover_image=IncomingFile("cover.jpg", b"not an image"),
        )
    assert users.users == {}
    assert media_repo.items == {}


def test_failed_user_write_purges_uploaded_media(svc, users, media_repo, monkeypatch):
    def boom(**kwargs):
        raise RuntimeError("db down")

    monkeypatch.setattr(users, "create", boom)
    with pytest.raises(StorageError):
        svc.register(registration(), avatar=IncomingFile("me.png", image_bytes("PNG")))
    assert media_repo.items == {}


def test_login_issues_token_with_role(svc, users):
    users.add("bob", "bob@blog.io", role="author")
    result = svc.login("bob@blog.io", "secret1")
    claims = verify_token(result.token)
    assert claims.subject_id == result.user.id
    assert claims.role == "author"


def test_login_failures_are_indistinguishable(svc, users):
    users.add("bob", "bob@blog.io")
    with pytest.raises(AuthenticationError) as unknown:
        svc.login("nobody@blog.io", "secret1")
    with pytest.raises(AuthenticationError) as wrong:
        svc.login("bob@blog.io", "wrong-password")
    assert unknown.value.detail == wrong.value.detail == "Invalid credentials"


def test_reset_request_response_does_not_reveal_accounts(svc, users, mailer, resets):
    users.add("bob", "bob@blog.io")
    assert svc.request_password_reset("nobody@blog.io") == RESET_REQUEST_MESSAGE
    assert svc.request_password_reset("bob@blog.io") == RESET_REQUEST_MESSAGE
    assert len(mailer.sent) == 1
    token = next(iter(resets.tokens.values()))
    assert mailer.sent[0]["link"] == f"https://blog.test/reset-password?token={token.token}"
    assert not token.used
    assert timedelta(minutes=59) < token.expires_at - datetime.utcnow() <= timedelta(hours=1)


def test_reset_request_mail_failure_keeps_token(svc, users, mailer, resets):
    users.add("bob", "bob@blog.io")
    mailer.fail = True
    with pytest.raises(StorageError):
        svc.request_password_reset("bob@blog.io")
    assert len(resets.tokens) == 1


def test_reset_password_updates_hash_and_consumes_token(svc, users, resets):
    user = users.add("bob", "bob@blog.io")
    resets.create(user.id, "tok-1", datetime.utcnow() + timedelta(hours=1))
    svc.reset_password("tok-1", "newpass")
    assert users.get_by_id(user.id).password_hash == "hashed:newpass"
    with pytest.raises(ValidationError):
        svc.reset_password("tok-1", "another")


def test_reset_password_rejects_expired_and_unknown(svc, users, resets):
    user = users.add("bob", "bob@blog.io")
    resets.create(user.id, "old", datetime.utcnow() - timedelta(seconds=1))
    for token in ("old", "never-issued"):
        with pytest.raises(ValidationError) as exc:
            svc.reset_password(token, "newpass")
        assert exc.value.detail == "Invalid or expired reset token"
    assert users.get_by_id(user.id).password_hash == "hashed:secret1"


def test_mark_used_failure_is_logged_only(svc, users, resets, caplog):
    user = users.add("bob", "bob@blog.io")
    resets.create(user.id, "tok-1", datetime.utcnow() + timedelta(hours=1))
    resets.fail_mark_used = True
    svc.reset_password("tok-1", "newpass")
    assert users.get_by_id(user.id).password_hash == "hashed:newpass"
    assert "could not be marked used" in caplog.text
