# blog_api/db/models/content/post.py
from typing import List, Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON, Text
from datetime import datetime
import uuid


class Post(SQLModel, table=True):
    __tablename__ = "posts"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    title: str = Field(max_length=200)
    content: str = Field(sa_column=Column(Text, nullable=False))
    author_id: str = Field(index=True)
    featured_image_id: Optional[str] = Field(default=None)
    gallery: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    status: str = Field(max_length=20, default="draft", index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
