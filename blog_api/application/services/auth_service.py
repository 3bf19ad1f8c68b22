from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional
import logging
import secrets
import uuid

from ..ports.mailer import Mailer
from ..ports.media_store import MediaRejectedError
from ..ports.password_hasher import PasswordHasher
from ..ports.profile_repo import ProfileDto, ProfileRepository
from ..ports.reset_token_repo import ResetTokenRepository
from ..ports.user_repo import UserDto, UserRepository
from .media_service import IncomingFile, MediaService
from ...core.roles import DEFAULT_ROLE, parse_role
from ...core.security import issue_token
from ...exceptions import AuthenticationError, ConflictError, StorageError, ValidationError

logger = logging.getLogger(__name__)

RESET_REQUEST_MESSAGE = "If the email exists, a reset link will be sent"


@dataclass
class Registration:
    username: str
    email: str
    password: str
    full_name: str
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    social_links: Dict[str, str] = field(default_factory=dict)
    role: Optional[str] = None


@dataclass
class RegistrationResult:
    user: UserDto
    profile: ProfileDto
    warnings: List[str] = field(default_factory=list)


@dataclass
class LoginResult:
    token: str
    user: UserDto


@dataclass
class AuthService:
    user_repo: UserRepository
    profile_repo: ProfileRepository
    reset_repo: ResetTokenRepository
    hasher: PasswordHasher
    mailer: Mailer
    media_service: MediaService
    base_url: str = "http://localhost:8000"
    min_password_length: int = 6
    reset_token_ttl: timedelta = timedelta(hours=1)

    def _check_password(self, password: str) -> None:
        if not password or len(password) < self.min_password_length:
            raise ValidationError(f"Password must be at least {self.min_password_length} characters")

    def register(
        self,
        data: Registration,
        avatar: Optional[IncomingFile] = None,
        cover_image: Optional[IncomingFile] = None,
    ) -> RegistrationResult:
        role = parse_role(data.role) if data.role else DEFAULT_ROLE
        self._check_password(data.password)
        email = data.email.strip().lower()

        if self.user_repo.get_by_username(data.username):
            raise ConflictError("Username already exists")
        if self.user_repo.get_by_email(email):
            raise ConflictError("Email already exists")

        # Reject bad images before anything is written
        for label, upload in (("avatar", avatar), ("cover image", cover_image)):
            if upload is not None:
                try:
                    self.media_service.validate(upload)
                except MediaRejectedError as e:
                    raise MediaRejectedError(e.reason, f"Invalid {label}: {e.detail}") from e

        password_hash = self.hasher.hash(data.password)
        user_id = str(uuid.uuid4())

        warnings: List[str] = []
        avatar_id = cover_id = None
        if avatar is not None:
            outcome = self.media_service.upload(user_id, avatar)
            avatar_id = outcome.media.id
            warnings.extend(outcome.warnings)
        if cover_image is not None:
            try:
                outcome = self.media_service.upload(user_id, cover_image)
            except Exception:
                self.media_service.purge([avatar_id])
                raise
            cover_id = outcome.media.id
            warnings.extend(outcome.warnings)

        try:
            user = self.user_repo.create(
                user_id=user_id,
                username=data.username,
                email=email,
                password_hash=password_hash,
                role=role.value,
            )
            profile = self.profile_repo.create(
                user_id,
                full_name=data.full_name,
                bio=data.bio,
                location=data.location,
                website=data.website,
                social_links=dict(data.social_links),
                avatar_media_id=avatar_id,
                cover_media_id=cover_id,
            )
        except Exception as e:
            logger.error(f"Error creating user {data.username}: {e}")
            self.media_service.purge([avatar_id, cover_id])
            raise StorageError("Failed to create user") from e

        logger.info(f"Registered user {user.id} with role {user.role}")
        return RegistrationResult(user=user, profile=profile, warnings=warnings)

    def login(self, email: str, password: str) -> LoginResult:
        user = self.user_repo.get_by_email(email.strip().lower())
        # Same error for unknown email and wrong password
        if not user or not self.hasher.verify(password, user.password_hash):
            raise AuthenticationError("Invalid credentials")
        token = issue_token(user.id, user.email, user.role)
        return LoginResult(token=token, user=user)

    def request_password_reset(self, email: str) -> str:
        user = self.user_repo.get_by_email(email.strip().lower())
        if not user:
            return RESET_REQUEST_MESSAGE

        token = secrets.token_urlsafe(32)
        try:
            self.reset_repo.create(user.id, token, datetime.utcnow() + self.reset_token_ttl)
        except Exception as e:
            raise StorageError("Failed to create reset token") from e

        reset_link = f"{self.base_url.rstrip('/')}/reset-password?token={token}"
        try:
            self.mailer.send_password_reset(user.email, reset_link)
        except Exception as e:
            raise StorageError("Failed to send reset email") from e
        return RESET_REQUEST_MESSAGE

    def reset_password(self, token: str, new_password: str) -> None:
        self._check_password(new_password)
        reset = self.reset_repo.get_valid(token, datetime.utcnow())
        if not reset:
            raise ValidationError("Invalid or expired reset token")

        password_hash = self.hasher.hash(new_password)
        if not self.user_repo.update_password(reset.user_id, password_hash):
            raise ValidationError("Invalid or expired reset token")

        try:
            self.reset_repo.mark_used(reset.id)
        except Exception as e:
            logger.error(f"Password for user {reset.user_id} was reset but token {reset.id} could not be marked used: {e}")
