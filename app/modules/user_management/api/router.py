from typing import Any
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.pagination import PageParams, PageQuery
from app.deps import get_current_user, get_db
from app.modules.user_management.models.user import User
from app.modules.user_management.schemas.user import UserProfile
from app.modules.user_management.services.user import count_bookmarks
from app.modules.posts.schemas.post import PostListResponse
from app.modules.posts.bookmarks.services.bookmark import list_bookmarks

router = APIRouter()
logger = logging.getLogger("app")


@router.get("/me", response_model=UserProfile)
def read_user_me(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Get current user.
    """
    return UserProfile(
        id=current_user.id,
        user_name=current_user.username,
        email=current_user.email,
        auth_provider=current_user.auth_provider,
        created_at=current_user.created_at,
        bookmarks_count=count_bookmarks(db, current_user.id),
    )


@router.get("/me/bookmarks", response_model=PostListResponse)
def read_my_bookmarks(
    db: Session = Depends(get_db),
    page: PageParams = Depends(PageQuery(default_limit=10)),
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Bookmarked posts of the current user, newest first.
    """
    posts, pagination, message = list_bookmarks(db, current_user.id, page)
    return {"posts": posts, "pagination": pagination, "message": message}
