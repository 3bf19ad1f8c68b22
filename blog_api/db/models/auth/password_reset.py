# blog_api/db/models/auth/password_reset.py
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid


class PasswordResetToken(SQLModel, table=True):
    __tablename__ = "password_reset_tokens"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(index=True)
    token: str = Field(max_length=128, unique=True, index=True)
    expires_at: datetime
    used: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
