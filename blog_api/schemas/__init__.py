# Schemas package (re-export feature modules for stable imports)
from .auth.auth import *
from .users.user import *
from .posts.post import *
from .media.media import *
from .profiles.profile import *
from .common.common import *
