from typing import List, Optional
from datetime import datetime

from app.core.schemas import CamelModel, Pagination
from app.modules.user_management.schemas.user import AuthorProfile


class CommentCreate(CamelModel):
    """Content is checked by the service, after the id and caller checks"""
    content: Optional[str] = None


class Comment(CamelModel):
    """Comment model returned to client"""
    id: str
    post_id: str
    author_id: str
    user_name: str
    content: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    author: Optional[AuthorProfile] = None


class CommentResponse(CamelModel):
    comment: Comment
    message: str


class CommentListResponse(CamelModel):
    comments: List[Comment]
    pagination: Pagination
    message: str
