from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from blog_api.db import models  # noqa: F401
from blog_api.db.session import get_session
from blog_api.infrastructure.storage.local_media_store import LocalMediaStore
from blog_api.main import app
from blog_api.routers.deps import get_mailer, get_media_store, get_password_hasher

from fakes import THUMBNAIL_SIZES, FakeHasher, FakeMailer, image_bytes


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(tmp_path, mailer):
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)

    def _get_session() -> Generator[Session, None, None]:
        with Session(engine) as session:
            yield session

    store = LocalMediaStore(
        upload_dir=str(tmp_path / "uploads"),
        max_file_size=10 * 1024 * 1024,
        allowed_types=["image/jpeg", "image/png", "image/gif", "image/webp"],
        thumbnail_sizes=THUMBNAIL_SIZES,
        base_url="http://testserver",
    )
    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[get_media_store] = lambda: store
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_password_hasher] = lambda: FakeHasher()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        engine.dispose()


def _error(response, status):
    assert response.status_code == status, response.text
    payload = response.json()
    assert payload["success"] is False
    assert payload["data"] is None
    return payload["error"]


def _data(response, status=200):
    assert response.status_code == status, response.text
    payload = response.json()
    assert payload["success"] is True
    assert payload["error"] is None
    return payload["data"]


def register(client, username, role=None, **files):
    form = {
        "username": username,
        "email": f"{username}@blog.io",
        "password": "secret1",
        "full_name": username.title(),
    }
    if role:
        form["role"] = role
    return client.post("/api/auth/register", data=form, files=files or None)


def login(client, username) -> dict:
    data = _data(client.post("/api/auth/login", json={"email": f"{username}@blog.io", "password": "secret1"}))
    return {"Authorization": f"Bearer {data['access_token']}"}


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


def test_register_and_login(client):
    data = _data(register(client, "ann"), 201)
    assert data["user"]["role"] == "reader"
    assert "password_hash" not in data["user"]
    assert data["profile"]["full_name"] == "Ann"

    headers = login(client, "ann")
    me = _data(client.get("/api/profiles/me", headers=headers))
    assert me["user_id"] == data["user"]["id"]


def test_register_with_avatar(client):
    data = _data(register(client, "ann", avatar=("me.png", image_bytes("PNG"), "image/png")), 201)
    avatar = data["profile"]["avatar"]
    assert avatar["mime_type"] == "image/png"
    assert len(avatar["thumbnails"]) == 3


def test_register_rejects_text_avatar(client):
    error = _error(register(client, "ann", avatar=("me.jpg", b"hello", "image/jpeg")), 400)
    assert "avatar" in error
    _error(client.post("/api/auth/login", json={"email": "ann@blog.io", "password": "secret1"}), 401)


def test_register_duplicate_username(client):
    register(client, "ann")
    _error(register(client, "ann"), 409)


def test_register_invalid_role(client):
    _error(register(client, "ann", role="superuser"), 400)


def test_login_bad_password(client):
    register(client, "ann")
    error = _error(client.post("/api/auth/login", json={"email": "ann@blog.io", "password": "nope!!"}), 401)
    assert error == "Invalid credentials"


def test_request_validation_errors_are_400(client):
    _error(client.post("/api/auth/login", json={"email": "not-an-email", "password": "x"}), 400)


@pytest.mark.parametrize("header", [None, "Token abc", "Bearer", "Bearer not.a.jwt"])
def test_protected_route_requires_bearer_token(client, header):
    headers = {"Authorization": header} if header else {}
    response = client.get("/api/posts", headers=headers)
    _error(response, 401)
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_reader_cannot_create_post(client):
    register(client, "rita")
    headers = login(client, "rita")
    _error(client.post("/api/posts", json={"title": "Hi", "content": "Body"}, headers=headers), 403)


def test_post_lifecycle(client):
    register(client, "alex", role="author")
    register(client, "root", role="admin")
    author = login(client, "alex")
    admin = login(client, "root")

    post = _data(client.post("/api/posts", json={"title": "Hi", "content": "Body"}, headers=author), 201)
    assert post["status"] == "draft"

    updated = _data(client.put(f"/api/posts/{post['id']}", json={"status": "published"}, headers=author))
    assert updated["post"]["status"] == "published"
    assert updated["post"]["title"] == "Hi"

    listed = _data(client.get("/api/posts", params={"status": "published"}, headers=author))
    assert [p["id"] for p in listed] == [post["id"]]

    _error(client.delete(f"/api/posts/{post['id']}", headers=author), 403)
    _data(client.delete(f"/api/posts/{post['id']}", headers=admin))
    _error(client.get(f"/api/posts/{post['id']}", headers=author), 404)


def test_media_upload_requires_file(client):
    register(client, "ann")
    headers = login(client, "ann")
    error = _error(client.post("/api/media", data={"title": "nothing"}, headers=headers), 400)
    assert error == "No file provided"


def test_media_upload_list_and_edit(client):
    register(client, "ann")
    headers = login(client, "ann")
    files = {"file": ("photo.jpg", image_bytes(size=(1200, 800)), "image/jpeg")}
    upload = _data(client.post("/api/media", files=files, data={"title": "Sunset", "tags": "a,b"}, headers=headers), 201)
    media = upload["media"]
    assert media["metadata"]["title"] == "Sunset"
    assert media["metadata"]["tags"] == ["a", "b"]
    assert {t["size"] for t in media["thumbnails"]} == {"small", "medium", "large"}
    assert media["path"].endswith(".jpg")
    assert all(t["path"].startswith(media["path"][:-4]) for t in media["thumbnails"])

    assert [m["id"] for m in _data(client.get("/api/media", headers=headers))] == [media["id"]]

    edited = _data(client.put(f"/api/media/{media['id']}", json={"alt_text": "sky"}, headers=headers))
    assert edited["metadata"]["alt_text"] == "sky"
    assert edited["metadata"]["title"] == "Sunset"


def test_media_upload_rejects_disguised_text(client):
    register(client, "ann")
    headers = login(client, "ann")
    files = {"file": ("photo.jpg", b"definitely not a jpeg", "image/jpeg")}
    _error(client.post("/api/media", files=files, headers=headers), 400)


def test_only_owner_edits_or_deletes_media(client):
    register(client, "ann")
    register(client, "bob")
    ann = login(client, "ann")
    bob = login(client, "bob")
    files = {"file": ("photo.png", image_bytes("PNG"), "image/png")}
    media = _data(client.post("/api/media", files=files, headers=ann), 201)["media"]

    _error(client.put(f"/api/media/{media['id']}", json={"title": "mine"}, headers=bob), 404)
    _error(client.delete(f"/api/media/{media['id']}", headers=bob), 404)
    _data(client.delete(f"/api/media/{media['id']}", headers=ann))
    _error(client.get(f"/api/media/{media['id']}", headers=ann), 404)


def test_admin_user_management(client):
    reader = _data(register(client, "rita"), 201)["user"]
    register(client, "root", role="admin")
    admin = login(client, "root")

    _error(client.get("/api/users", headers=login(client, "rita")), 403)
    assert {u["username"] for u in _data(client.get("/api/users", headers=admin))} == {"rita", "root"}

    _error(client.put(f"/api/users/{reader['id']}/role", json={"role": "owner"}, headers=admin), 400)
    _error(client.put("/api/users/ghost/role", json={"role": "author"}, headers=admin), 404)
    promoted = _data(client.put(f"/api/users/{reader['id']}/role", json={"role": "author"}, headers=admin))
    assert promoted["role"] == "author"

    _data(client.delete(f"/api/users/{reader['id']}", headers=admin))
    _error(client.post("/api/auth/login", json={"email": "rita@blog.io", "password": "secret1"}), 401)


def test_password_reset_flow(client, mailer):
    register(client, "ann")
    known = client.post("/api/auth/password-reset/request", json={"email": "ann@blog.io"})
    unknown = client.post("/api/auth/password-reset/request", json={"email": "ghost@blog.io"})
    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json()
    assert len(mailer.sent) == 1

    token = mailer.sent[0]["link"].split("token=", 1)[1]
    body = {"token": token, "new_password": "brandnew"}
    _data(client.post("/api/auth/password-reset/reset", json=body))
    _error(client.post("/api/auth/password-reset/reset", json=body), 400)
    _data(client.post("/api/auth/login", json={"email": "ann@blog.io", "password": "brandnew"}))


def test_profile_update_and_public_view(client):
    reg = _data(register(client, "ann"), 201)
    headers = login(client, "ann")
    updated = _data(client.put(
        "/api/profiles/me",
        data={"bio": "Writer", "social_links": '{"x": "@ann"}'},
        headers=headers,
    ))
    assert updated["bio"] == "Writer"
    assert updated["social_links"] == {"x": "@ann"}

    register(client, "bob")
    public = _data(client.get(f"/api/profiles/{reg['user']['id']}", headers=login(client, "bob")))
    assert public["bio"] == "Writer"

    _data(client.delete("/api/profiles/me", headers=headers))
    _error(client.get(f"/api/profiles/{reg['user']['id']}", headers=headers), 404)
