# Routers package
from . import auth_router
from . import users_router
from . import posts_router
from . import media_router
from . import profiles_router

__all__ = [
    "auth_router",
    "users_router",
    "posts_router",
    "media_router",
    "profiles_router",
]
