from datetime import datetime
from typing import List, Optional
from sqlmodel import Session, select

from .....db.models import User
from .....application.ports.user_repo import UserRepository, UserDto
from ._session import commit_or_rollback


class SqlUserRepository(UserRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, user: User) -> UserDto:
        return UserDto(
            id=user.id,
            username=user.username,
            email=user.email,
            password_hash=user.password_hash,
            role=user.role,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    def _get(self, user_id: str) -> Optional[User]:
        return self.session.exec(select(User).where(User.id == user_id)).first()

    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        user = self._get(user_id)
        return self._to_dto(user) if user else None

    def get_by_email(self, email: str) -> Optional[UserDto]:
        user = self.session.exec(select(User).where(User.email == email)).first()
        return self._to_dto(user) if user else None

    def get_by_username(self, username: str) -> Optional[UserDto]:
        user = self.session.exec(select(User).where(User.username == username)).first()
        return self._to_dto(user) if user else None

    def create(self, user_id: str, username: str, email: str, password_hash: str, role: str) -> UserDto:
        user = User(id=user_id, username=username, email=email, password_hash=password_hash, role=role)
        self.session.add(user)
        commit_or_rollback(self.session)
        self.session.refresh(user)
        return self._to_dto(user)

    def list_all(self) -> List[UserDto]:
        users = self.session.exec(select(User).order_by(User.created_at)).all()
        return [self._to_dto(u) for u in users]

    def update_role(self, user_id: str, role: str) -> Optional[UserDto]:
        user = self._get(user_id)
        if not user:
            return None
        user.role = role
        user.updated_at = datetime.utcnow()
        self.session.add(user)
        commit_or_rollback(self.session)
        self.session.refresh(user)
        return self._to_dto(user)

    def update_password(self, user_id: str, password_hash: str) -> bool:
        user = self._get(user_id)
        if not user:
            return False
        user.password_hash = password_hash
        user.updated_at = datetime.utcnow()
        self.session.add(user)
        commit_or_rollback(self.session)
        return True

    def delete(self, user_id: str) -> bool:
        user = self._get(user_id)
        if not user:
            return False
        self.session.delete(user)
        commit_or_rollback(self.session)
        return True
