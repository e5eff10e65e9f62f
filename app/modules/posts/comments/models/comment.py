from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Index

from app.db.session import Base, utcnow


class Comment(Base):
    __tablename__ = "comments"
    __table_args__ = (Index("ix_comments_post_created", "post_id", "created_at"),)

    id = Column(String, primary_key=True, index=True)
    content = Column(Text, nullable=False)
    author_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    author_name = Column(String, nullable=False)  # handle at the time of writing
    post_id = Column(String, ForeignKey("posts.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
