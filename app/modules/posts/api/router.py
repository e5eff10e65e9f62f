from datetime import datetime
from typing import Any, Optional
import logging

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.pagination import PageParams, PageQuery
from app.core.rate_limit import identity_or_ip, limiter, write_limit
from app.core.schemas import DeletedResponse
from app.deps import get_current_identity, get_current_user, get_db, get_optional_identity, get_settings
from app.modules.auth.schemas.auth import TokenPayload
from app.modules.user_management.models.user import User
from app.modules.posts.schemas.post import (
    PostCreate, PostDetailResponse, PostListResponse, PostResponse, PostUpdate
)
from app.modules.posts.services.post import (
    create_post, delete_post, get_post_with_counts, get_posts_with_counts, update_post
)
from app.modules.posts.services.search import search_posts, split_tags
from app.modules.posts.comments.services.comment import get_latest_comments
from app.modules.posts.reactions.services.reaction import toggle_like

logger = logging.getLogger("app")

router = APIRouter()

DEFAULT_PREVIEW = 3
MAX_PREVIEW = 10


@router.get("", response_model=PostListResponse)
def read_posts(
    db: Session = Depends(get_db),
    page: PageParams = Depends(PageQuery(default_limit=10)),
    sort: Optional[str] = Query("-createdAt", description="createdAt, updatedAt or title, '-' for descending"),
    identity: TokenPayload = Depends(get_current_identity),
) -> Any:
    """
    Retrieve posts with comment and reaction counts.
    """
    posts, pagination = get_posts_with_counts(db, page, sort)
    return {"posts": posts, "pagination": pagination, "message": "Fetched posts"}


@router.get("/search", response_model=PostListResponse)
def search(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    page: PageParams = Depends(PageQuery(default_limit=10)),
    query: Optional[str] = Query(None, description="Words matched against title and content"),
    tags: Optional[str] = Query(None, description="Comma separated; any tag matches"),
    author: Optional[str] = Query(None, description="Creator id or display name"),
    from_date: Optional[datetime] = Query(None, alias="from"),
    to_date: Optional[datetime] = Query(None, alias="to"),
    sort: Optional[str] = Query("-createdAt", description="-createdAt, likeCount, commentCount or trending"),
    identity: TokenPayload = Depends(get_current_identity),
) -> Any:
    """
    Search posts by text, tags, author and creation date.
    """
    posts, pagination = search_posts(
        db,
        settings,
        page,
        query=query,
        tags=split_tags(tags),
        author=author,
        from_date=from_date,
        to_date=to_date,
        sort=sort,
    )
    return {"posts": posts, "pagination": pagination, "message": "Search results"}


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(write_limit, key_func=identity_or_ip)
def create_new_post(
    request: Request,
    post_in: PostCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Create new post. The signed-in user becomes its creator.
    """
    post = create_post(db, post_in, current_user)
    return {"post": post, "message": "Post created successfully"}


@router.get("/{post_id}", response_model=PostDetailResponse)
def read_post(
    post_id: str,
    db: Session = Depends(get_db),
    preview: Optional[int] = Query(None, description="Number of newest comments to include"),
    identity: TokenPayload = Depends(get_current_identity),
) -> Any:
    """
    Get post by ID with its newest comments.
    """
    post = get_post_with_counts(db, post_id)
    preview = DEFAULT_PREVIEW if not preview or preview < 1 else min(preview, MAX_PREVIEW)
    return {
        "post": post,
        "comments_preview": get_latest_comments(db, post.id, preview),
        "message": "Fetched post",
    }


@router.patch("/{post_id}", response_model=PostResponse)
@limiter.limit(write_limit, key_func=identity_or_ip)
def update_existing_post(
    request: Request,
    post_id: str,
    post_in: PostUpdate,
    db: Session = Depends(get_db),
    identity: TokenPayload = Depends(get_current_identity),
) -> Any:
    """
    Update a post.
    """
    post = update_post(db, post_id, post_in, identity.sub)
    return {"post": post, "message": "Post updated successfully"}


@router.delete("/{post_id}", response_model=DeletedResponse)
@limiter.limit(write_limit, key_func=identity_or_ip)
def delete_existing_post(
    request: Request,
    post_id: str,
    db: Session = Depends(get_db),
    identity: TokenPayload = Depends(get_current_identity),
) -> Any:
    """
    Delete a post with its reactions, comments and bookmarks.
    """
    deleted_id = delete_post(db, post_id, identity.sub)
    return {"id": deleted_id, "message": "Post Deleted Successfully"}


@router.patch("/{post_id}/likePost", response_model=PostResponse)
@limiter.limit(write_limit, key_func=identity_or_ip)
def like_post(
    request: Request,
    post_id: str,
    db: Session = Depends(get_db),
    identity: Optional[TokenPayload] = Depends(get_optional_identity),
) -> Any:
    """
    Toggle the caller's like on a post.
    """
    post, message = toggle_like(db, post_id, identity.sub if identity else None)
    return {"post": post, "message": message}
