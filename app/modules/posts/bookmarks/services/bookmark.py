from typing import List, Optional, Tuple
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import UnauthorizedError
from app.core.ids import validate_id
from app.core.pagination import PageParams, build_pagination
from app.core.schemas import Pagination
from app.modules.posts.bookmarks.models.bookmark import Bookmark
from app.modules.posts.models.post import Post
from app.modules.posts.schemas.post import PostWithCounts
from app.modules.posts.services.post import attach_counts, require_post

logger = logging.getLogger("app")

BOOKMARKED = "Bookmarked"
BOOKMARK_REMOVED = "Bookmark removed"
NO_BOOKMARKS = "No bookmarks"
FETCHED_BOOKMARKS = "Fetched bookmarks"


def get_bookmark(db: Session, user_id: str, post_id: str) -> Optional[Bookmark]:
    return (
        db.query(Bookmark)
        .filter(Bookmark.user_id == user_id, Bookmark.post_id == post_id)
        .first()
    )


def get_bookmarked_post_ids(db: Session, user_id: str) -> List[str]:
    rows = db.query(Bookmark.post_id).filter(Bookmark.user_id == user_id).all()
    return [post_id for post_id, in rows]


def add_bookmark(db: Session, post_id: str, user_id: Optional[str]) -> str:
    """Add the post to the caller's bookmark set; adding twice is a no-op"""
    post_id = validate_id(post_id)
    if not user_id:
        raise UnauthorizedError()
    post = require_post(db, post_id)

    if get_bookmark(db, user_id, post.id):
        return post.id
    try:
        db.add(Bookmark(user_id=user_id, post_id=post.id))
        db.commit()
    except IntegrityError:
        # Same bookmark added by a concurrent request
        db.rollback()
    return post.id


def remove_bookmark(db: Session, post_id: str, user_id: Optional[str]) -> str:
    """Remove the post from the caller's bookmark set; removing an absent entry is a no-op"""
    post_id = validate_id(post_id)
    if not user_id:
        raise UnauthorizedError()
    post = require_post(db, post_id)

    db.query(Bookmark).filter(
        Bookmark.user_id == user_id, Bookmark.post_id == post.id
    ).delete(synchronize_session=False)
    db.commit()
    return post.id


def list_bookmarks(db: Session, user_id: str, params: PageParams) -> Tuple[List[PostWithCounts], Pagination, str]:
    """Bookmarked posts, newest first, with counts attached"""
    post_ids = get_bookmarked_post_ids(db, user_id)
    if not post_ids:
        return [], build_pagination(0, params), NO_BOOKMARKS

    query = db.query(Post).filter(Post.id.in_(post_ids))
    total = query.count()
    posts = (
        query.order_by(Post.created_at.desc(), Post.id.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return attach_counts(db, posts), build_pagination(total, params), FETCHED_BOOKMARKS
