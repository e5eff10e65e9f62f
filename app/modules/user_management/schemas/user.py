from typing import Optional
from datetime import datetime

from app.core.schemas import CamelModel


class AuthorProfile(CamelModel):
    """Minimal public profile attached to comments"""
    id: str
    user_name: str


class UserPublic(AuthorProfile):
    """Profile returned by register and login"""
    email: str


class UserProfile(UserPublic):
    """Profile of the signed-in user"""
    auth_provider: Optional[str] = None
    created_at: Optional[datetime] = None
    bookmarks_count: int = 0


def to_public(user) -> UserPublic:
    return UserPublic(id=user.id, user_name=user.username, email=user.email)


def to_author(user) -> AuthorProfile:
    return AuthorProfile(id=user.id, user_name=user.username)
