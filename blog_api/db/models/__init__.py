# Models package (re-export feature modules for stable imports)
from .users.user import User
from .users.profile import Profile
from .auth.password_reset import PasswordResetToken
from .content.post import Post
from .media.media import Media

__all__ = [
    "User",
    "Profile",
    "PasswordResetToken",
    "Post",
    "Media",
]
