# blog_api/schemas/media/media.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime


class ThumbnailResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    size: str
    width: int
    height: int
    path: str
    url: Optional[str] = None


class MediaMetadataResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    width: Optional[int] = None
    height: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    alt_text: Optional[str] = None
    tags: List[str] = []


class MediaResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    file_name: str
    file_type: str
    mime_type: str
    size: int
    path: str
    url: str
    thumbnails: List[ThumbnailResponse] = []
    metadata: MediaMetadataResponse
    created_at: datetime
    updated_at: datetime


class MediaUploadResponse(BaseModel):
    media: MediaResponse
    warnings: List[str] = []


class UpdateMediaRequest(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    alt_text: Optional[str] = Field(None, max_length=500)
    tags: Optional[List[str]] = None
