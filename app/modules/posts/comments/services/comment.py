from typing import List, Optional, Tuple
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.errors import BadRequestError, ForbiddenError, NotFoundError, UnauthorizedError
from app.core.ids import new_id, validate_id
from app.core.pagination import PageParams, build_pagination
from app.core.schemas import Pagination
from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.comments.schemas.comment import Comment as CommentSchema
from app.modules.posts.services.post import require_post
from app.modules.user_management.models.user import User
from app.modules.user_management.schemas.user import to_author
from app.modules.user_management.services.user import get_users_by_ids

logger = logging.getLogger("app")

MAX_COMMENT_LENGTH = 2000


def get_comment(db: Session, comment_id: str) -> Optional[Comment]:
    """Get comment by ID"""
    return db.query(Comment).filter(Comment.id == comment_id).first()


def _with_authors(db: Session, comments: List[Comment]) -> List[CommentSchema]:
    """Resolve every author of the batch with one lookup"""
    authors = get_users_by_ids(db, [comment.author_id for comment in comments])
    result = []
    for comment in comments:
        author = authors.get(comment.author_id)
        result.append(CommentSchema(
            id=comment.id,
            post_id=comment.post_id,
            author_id=comment.author_id,
            user_name=comment.author_name,
            content=comment.content,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
            author=to_author(author) if author else None,
        ))
    return result


def _newest_first(db: Session, post_id: str):
    return (
        db.query(Comment)
        .filter(Comment.post_id == post_id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )


def get_latest_comments(db: Session, post_id: str, limit: int) -> List[CommentSchema]:
    """Newest comments of a post, used for the post detail preview"""
    return _with_authors(db, _newest_first(db, post_id).limit(limit).all())


def list_comments(db: Session, post_id: str, params: PageParams) -> Tuple[List[CommentSchema], Pagination]:
    """Comments of a post, newest first"""
    post = require_post(db, post_id)
    total = db.query(func.count(Comment.id)).filter(Comment.post_id == post.id).scalar() or 0
    comments = _newest_first(db, post.id).offset(params.skip).limit(params.limit).all()
    return _with_authors(db, comments), build_pagination(total, params)


def _clean_content(content: Optional[str]) -> str:
    content = (content or "").strip()
    if not content:
        raise BadRequestError("content is required")
    if len(content) > MAX_COMMENT_LENGTH:
        raise BadRequestError(f"content must be at most {MAX_COMMENT_LENGTH} characters")
    return content


def create_comment(db: Session, post_id: str, author: Optional[User], content: Optional[str]) -> CommentSchema:
    """
    Create a comment on a post.

    The author's handle is copied onto the comment so listings do not need
    to join users for the display name.
    """
    post_id = validate_id(post_id)
    if author is None:
        raise UnauthorizedError()
    content = _clean_content(content)
    post = require_post(db, post_id)

    comment = Comment(
        id=new_id(),
        content=content,
        author_id=author.id,
        author_name=author.username,
        post_id=post.id,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    logger.info(f"Comment {comment.id} created on post {post.id} by {author.id}")
    return _with_authors(db, [comment])[0]


def delete_comment(db: Session, comment_id: str, user_id: Optional[str]) -> str:
    """Delete comment; only its author may do so"""
    comment_id = validate_id(comment_id)
    if not user_id:
        raise UnauthorizedError()
    comment = get_comment(db, comment_id)
    if not comment:
        raise NotFoundError("Comment not found")
    if comment.author_id != user_id:
        raise ForbiddenError("Not allowed to delete this comment")

    db.delete(comment)
    db.commit()
    logger.info(f"Comment {comment_id} deleted by {user_id}")
    return comment_id
