from dataclasses import dataclass, field
from typing import List, Optional
import logging

from ..ports.profile_repo import ProfileRepository
from ..ports.user_repo import UserDto, UserRepository
from .media_references import MediaReferences
from .media_service import MediaService
from ...core.authorization import require_role
from ...core.roles import Role, parse_role
from ...core.security import Claims
from ...exceptions import NotFoundError

logger = logging.getLogger(__name__)


@dataclass
class UserDeletion:
    user_id: str
    warnings: List[str] = field(default_factory=list)


@dataclass
class UserService:
    """Administrative user management. Every operation requires the admin role."""
    user_repo: UserRepository
    profile_repo: ProfileRepository
    media_service: MediaService
    references: MediaReferences

    def list_users(self, claims: Optional[Claims]) -> List[UserDto]:
        require_role(claims, Role.ADMIN)
        return self.user_repo.list_all()

    def update_role(self, claims: Optional[Claims], user_id: str, role: str) -> UserDto:
        claims = require_role(claims, Role.ADMIN)
        new_role = parse_role(role)
        user = self.user_repo.update_role(user_id, new_role.value)
        if not user:
            raise NotFoundError("User not found")
        # Existing tokens keep the old role until they expire
        logger.info(f"User {user_id} role set to {new_role.value} by {claims.subject_id}")
        return user

    def delete_user(self, claims: Optional[Claims], user_id: str) -> UserDeletion:
        claims = require_role(claims, Role.ADMIN)
        if not self.user_repo.get_by_id(user_id):
            raise NotFoundError("User not found")

        # Media still shown by a surviving post or another profile is kept
        owned = [m.id for m in self.media_service.list_for_owner(user_id)]
        warnings = self.media_service.purge(self.references.unreferenced(owned, exclude_user_id=user_id))
        self.profile_repo.delete(user_id)
        self.user_repo.delete(user_id)
        logger.info(f"User {user_id} deleted by {claims.subject_id}")
        return UserDeletion(user_id=user_id, warnings=warnings)
