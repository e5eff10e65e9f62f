from sqlalchemy import Column, String, DateTime, ForeignKey

from app.db.session import Base, utcnow


class Bookmark(Base):
    """A post in a user's bookmark set; the (user, post) pair is the identity"""
    __tablename__ = "user_bookmarks"

    user_id = Column(String, ForeignKey("users.id"), primary_key=True)
    post_id = Column(String, ForeignKey("posts.id"), primary_key=True, index=True)
    created_at = Column(DateTime, default=utcnow)
