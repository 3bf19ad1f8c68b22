# blog_api/schemas/auth/auth.py
from pydantic import BaseModel, EmailStr, Field
from typing import Dict, List, Optional

from ..profiles.profile import ProfileResponse
from ..users.user import UserResponse


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetConfirm(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    """Text fields of the multipart registration form."""
    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    email: EmailStr
    password: str
    full_name: str = Field(..., min_length=1, max_length=100)
    bio: Optional[str] = Field(None, max_length=2000)
    location: Optional[str] = Field(None, max_length=100)
    website: Optional[str] = Field(None, max_length=255)
    social_links: Dict[str, str] = {}
    role: Optional[str] = None


class RegisterResponse(BaseModel):
    user: UserResponse
    profile: ProfileResponse
    warnings: List[str] = []
