from typing import Optional, Protocol
from dataclasses import dataclass
from datetime import datetime


@dataclass
class ResetTokenDto:
    id: str
    user_id: str
    token: str
    expires_at: datetime
    used: bool
    created_at: datetime


class ResetTokenRepository(Protocol):
    def create(self, user_id: str, token: str, expires_at: datetime) -> ResetTokenDto:
        ...

    def get_valid(self, token: str, now: datetime) -> Optional[ResetTokenDto]:
        """Return the token only when it is unused and ``expires_at > now``."""
        ...

    def mark_used(self, token_id: str) -> None:
        ...
