from sqlalchemy import Column, String, DateTime, Text, Integer, ForeignKey
from sqlalchemy.orm import relationship

from app.db.session import Base, utcnow


class Post(Base):
    __tablename__ = "posts"

    id = Column(String, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    media = Column(Text, nullable=True)  # URL or inline data URI
    creator_id = Column(String, ForeignKey("users.id"), nullable=True, index=True)
    creator_name = Column(String, nullable=True, index=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    tags = relationship(
        "PostTag",
        order_by="PostTag.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def tag_names(self):
        return [tag.name for tag in self.tags]


class PostTag(Base):
    __tablename__ = "post_tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(String, ForeignKey("posts.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    name = Column(String(50), nullable=False, index=True)
