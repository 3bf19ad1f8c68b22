from typing import List, Optional, Protocol
from dataclasses import dataclass
from datetime import datetime


@dataclass
class UserDto:
    id: str
    username: str
    email: str
    password_hash: str
    role: str
    created_at: datetime
    updated_at: datetime


class UserRepository(Protocol):
    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        ...

    def get_by_email(self, email: str) -> Optional[UserDto]:
        ...

    def get_by_username(self, username: str) -> Optional[UserDto]:
        ...

    def create(self, user_id: str, username: str, email: str, password_hash: str, role: str) -> UserDto:
        ...

    def list_all(self) -> List[UserDto]:
        ...

    def update_role(self, user_id: str, role: str) -> Optional[UserDto]:
        ...

    def update_password(self, user_id: str, password_hash: str) -> bool:
        ...

    def delete(self, user_id: str) -> bool:
        ...
