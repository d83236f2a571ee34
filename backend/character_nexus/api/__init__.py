"""API routers."""

from character_nexus.api import characters, chats, imports

__all__ = [
    "characters",
    "chats",
    "imports",
]
