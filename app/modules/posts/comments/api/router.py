from typing import Any, Optional
import logging

from fastapi import APIRouter, Depends, Path, Request, status
from sqlalchemy.orm import Session

from app.core.pagination import PageParams, PageQuery
from app.core.rate_limit import identity_or_ip, limiter, write_limit
from app.core.schemas import DeletedResponse
from app.deps import get_current_identity, get_db, get_optional_identity, get_optional_user
from app.modules.auth.schemas.auth import TokenPayload
from app.modules.user_management.models.user import User
from app.modules.posts.comments.schemas.comment import CommentCreate, CommentListResponse, CommentResponse
from app.modules.posts.comments.services.comment import create_comment, delete_comment, list_comments

router = APIRouter()
comment_router = APIRouter()
logger = logging.getLogger("app")


@router.get("", response_model=CommentListResponse)
def read_comments(
    post_id: str = Path(..., description="The ID of the post to get comments for"),
    db: Session = Depends(get_db),
    page: PageParams = Depends(PageQuery(default_limit=20)),
    identity: TokenPayload = Depends(get_current_identity),
) -> Any:
    """Comments of a post, newest first"""
    comments, pagination = list_comments(db, post_id, page)
    return {"comments": comments, "pagination": pagination, "message": "Fetched comments"}


@router.post("", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(write_limit, key_func=identity_or_ip)
def create_new_comment(
    request: Request,
    comment_in: Optional[CommentCreate] = None,
    post_id: str = Path(..., description="The ID of the post to comment on"),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
) -> Any:
    """Comment on a post as the signed-in user"""
    comment = create_comment(db, post_id, current_user, comment_in.content if comment_in else None)
    return {"comment": comment, "message": "Comment created"}


@comment_router.delete("/{comment_id}", response_model=DeletedResponse)
@limiter.limit(write_limit, key_func=identity_or_ip)
def delete_existing_comment(
    request: Request,
    comment_id: str,
    db: Session = Depends(get_db),
    identity: Optional[TokenPayload] = Depends(get_optional_identity),
) -> Any:
    """Delete a comment; only its author may"""
    deleted_id = delete_comment(db, comment_id, identity.sub if identity else None)
    return {"id": deleted_id, "message": "Comment deleted"}
