# blog_api/db/models/media/media.py
from typing import Any, Dict, List
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from datetime import datetime
import uuid


class Media(SQLModel, table=True):
    __tablename__ = "media"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(index=True)
    file_name: str = Field(max_length=255)
    file_type: str = Field(max_length=20)
    mime_type: str = Field(max_length=100)
    size: int
    path: str = Field(max_length=512)
    url: str = Field(max_length=1024)
    thumbnails: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    # "metadata" is reserved on declarative classes
    meta: Dict[str, Any] = Field(default_factory=dict, sa_column=Column("metadata", JSON))
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
