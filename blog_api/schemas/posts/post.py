# blog_api/schemas/posts/post.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from datetime import datetime


class PostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    content: str
    author_id: str
    featured_image_id: Optional[str] = None
    gallery: List[str] = []
    tags: List[str] = []
    status: str
    created_at: datetime
    updated_at: datetime


class CreatePostRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    status: str = Field("draft", description="draft or published")
    tags: List[str] = []
    featured_image_id: Optional[str] = None
    gallery: List[str] = []

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title cannot be blank")
        return v


class UpdatePostRequest(BaseModel):
    """Only fields present in the request body are changed; featured_image_id may be null to clear it."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1)
    status: Optional[str] = None
    tags: Optional[List[str]] = None
    featured_image_id: Optional[str] = None
    gallery: Optional[List[str]] = None


class PostUpdateResponse(BaseModel):
    post: PostResponse
    warnings: List[str] = []
