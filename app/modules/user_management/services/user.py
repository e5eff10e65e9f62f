from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.modules.user_management.models.user import User
from app.modules.posts.bookmarks.models.bookmark import Bookmark


def get_user(db: Session, user_id: str) -> Optional[User]:
    """Get user by ID"""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get user by email (emails are stored lowercase)"""
    return db.query(User).filter(User.email == email.strip().lower()).first()


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    """Get user by username"""
    return db.query(User).filter(User.username == username).first()


def get_users_by_ids(db: Session, user_ids: List[str]) -> Dict[str, User]:
    """Batch lookup keyed by id"""
    if not user_ids:
        return {}
    users = db.query(User).filter(User.id.in_(set(user_ids))).all()
    return {user.id: user for user in users}


def count_bookmarks(db: Session, user_id: str) -> int:
    return db.query(func.count(Bookmark.post_id)).filter(Bookmark.user_id == user_id).scalar() or 0
