# blog_api/routers/deps.py
from datetime import timedelta
from functools import lru_cache
from typing import Optional, Union

from fastapi import Depends, Request, UploadFile
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from ..application.ports.mailer import Mailer
from ..application.ports.media_store import MediaStore
from ..application.ports.password_hasher import PasswordHasher
from ..application.services.auth_service import AuthService
from ..application.services.media_references import MediaReferences
from ..application.services.media_service import IncomingFile, MediaService
from ..application.services.post_service import PostService
from ..application.services.profile_service import ProfileService
from ..application.services.user_service import UserService
from ..core.authorization import require_role
from ..core.config import settings
from ..core.roles import Role
from ..core.security import Claims, parse_bearer, verify_token
from ..db.session import get_session
from ..infrastructure.mail.smtp_mailer import SmtpMailer
from ..infrastructure.persistence.sqlalchemy.repositories.media_repository_sql import SqlMediaRepository
from ..infrastructure.persistence.sqlalchemy.repositories.post_repository_sql import SqlPostRepository
from ..infrastructure.persistence.sqlalchemy.repositories.profile_repository_sql import SqlProfileRepository
from ..infrastructure.persistence.sqlalchemy.repositories.reset_token_repository_sql import SqlResetTokenRepository
from ..infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from ..infrastructure.security.bcrypt_hasher import BcryptPasswordHasher
from ..infrastructure.storage.local_media_store import LocalMediaStore

# Registered for the OpenAPI security scheme; the header itself is parsed strictly below
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_claims(
    request: Request,
    _credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Claims:
    """Verify the bearer token and attach the claims to the request."""
    token = parse_bearer(request.headers.get("Authorization"))
    claims = verify_token(token)
    request.state.claims = claims
    return claims


def role_required(required: Union[Role, str]):
    def dependency(claims: Claims = Depends(get_current_claims)) -> Claims:
        return require_role(claims, required)
    return dependency


@lru_cache()
def get_media_store() -> MediaStore:
    return LocalMediaStore.from_settings(settings)


@lru_cache()
def get_mailer() -> Mailer:
    return SmtpMailer.from_settings(settings)


@lru_cache()
def get_password_hasher() -> PasswordHasher:
    return BcryptPasswordHasher()


def get_media_service(
    session: Session = Depends(get_session),
    store: MediaStore = Depends(get_media_store),
) -> MediaService:
    return MediaService(media_repo=SqlMediaRepository(session), store=store)


def get_media_references(session: Session = Depends(get_session)) -> MediaReferences:
    return MediaReferences(post_repo=SqlPostRepository(session), profile_repo=SqlProfileRepository(session))


def get_auth_service(
    session: Session = Depends(get_session),
    hasher: PasswordHasher = Depends(get_password_hasher),
    mailer: Mailer = Depends(get_mailer),
    media_service: MediaService = Depends(get_media_service),
) -> AuthService:
    return AuthService(
        user_repo=SqlUserRepository(session),
        profile_repo=SqlProfileRepository(session),
        reset_repo=SqlResetTokenRepository(session),
        hasher=hasher,
        mailer=mailer,
        media_service=media_service,
        base_url=settings.BASE_URL,
        min_password_length=settings.MIN_PASSWORD_LENGTH,
        reset_token_ttl=timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES),
    )


def get_user_service(
    session: Session = Depends(get_session),
    media_service: MediaService = Depends(get_media_service),
    references: MediaReferences = Depends(get_media_references),
) -> UserService:
    return UserService(
        user_repo=SqlUserRepository(session),
        profile_repo=SqlProfileRepository(session),
        media_service=media_service,
        references=references,
    )


def get_post_service(
    session: Session = Depends(get_session),
    media_service: MediaService = Depends(get_media_service),
    references: MediaReferences = Depends(get_media_references),
) -> PostService:
    return PostService(
        post_repo=SqlPostRepository(session),
        media_service=media_service,
        references=references,
    )


def get_profile_service(
    session: Session = Depends(get_session),
    media_service: MediaService = Depends(get_media_service),
    references: MediaReferences = Depends(get_media_references),
) -> ProfileService:
    return ProfileService(
        profile_repo=SqlProfileRepository(session),
        media_service=media_service,
        references=references,
    )


async def read_upload(upload: Optional[UploadFile]) -> Optional[IncomingFile]:
    """Read a multipart file. An omitted or empty file part counts as absent."""
    if upload is None or not upload.filename:
        return None
    data = await upload.read()
    return IncomingFile(filename=upload.filename, data=data)
