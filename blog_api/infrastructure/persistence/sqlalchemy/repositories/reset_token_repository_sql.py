from datetime import datetime
from typing import Optional
from sqlmodel import Session, select

from .....db.models import PasswordResetToken
from .....application.ports.reset_token_repo import ResetTokenRepository, ResetTokenDto
from ._session import commit_or_rollback


class SqlResetTokenRepository(ResetTokenRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, row: PasswordResetToken) -> ResetTokenDto:
        return ResetTokenDto(
            id=row.id,
            user_id=row.user_id,
            token=row.token,
            expires_at=row.expires_at,
            used=row.used,
            created_at=row.created_at,
        )

    def create(self, user_id: str, token: str, expires_at: datetime) -> ResetTokenDto:
        row = PasswordResetToken(user_id=user_id, token=token, expires_at=expires_at)
        self.session.add(row)
        commit_or_rollback(self.session)
        self.session.refresh(row)
        return self._to_dto(row)

    def get_valid(self, token: str, now: datetime) -> Optional[ResetTokenDto]:
        row = self.session.exec(
            select(PasswordResetToken).where(
                PasswordResetToken.token == token,
                PasswordResetToken.used == False,  # noqa: E712
                PasswordResetToken.expires_at > now,
            )
        ).first()
        return self._to_dto(row) if row else None

    def mark_used(self, token_id: str) -> None:
        row = self.session.exec(select(PasswordResetToken).where(PasswordResetToken.id == token_id)).first()
        if not row:
            return
        row.used = True
        self.session.add(row)
        commit_or_rollback(self.session)
