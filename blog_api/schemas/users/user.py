# blog_api/schemas/users/user.py
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


class UserResponse(BaseModel):
    """Public view of a user. The password hash never leaves the service layer."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str
    role: str
    created_at: datetime
    updated_at: datetime


class UpdateRoleRequest(BaseModel):
    role: str = Field(..., description="One of: admin, author, reader")
