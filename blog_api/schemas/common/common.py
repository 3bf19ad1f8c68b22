# blog_api/schemas/common/common.py
from pydantic import BaseModel
from typing import List


class MessageResponse(BaseModel):
    message: str


class WarningsResponse(BaseModel):
    message: str
    warnings: List[str] = []
