from engagement.models.story import Story
from engagement.models.user import User

__all__ = [
    "Story",
    "User",
]
