# blog_api/db/models/users/profile.py
from typing import Dict, Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from datetime import datetime
import uuid


class Profile(SQLModel, table=True):
    __tablename__ = "profiles"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(unique=True, index=True)
    full_name: str = Field(max_length=100, default="")
    bio: Optional[str] = Field(default=None)
    location: Optional[str] = Field(max_length=100, default=None)
    website: Optional[str] = Field(max_length=255, default=None)
    avatar_media_id: Optional[str] = Field(default=None)
    cover_media_id: Optional[str] = Field(default=None)
    social_links: Dict[str, str] = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
