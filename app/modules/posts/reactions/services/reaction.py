from typing import Optional, Tuple
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import UnauthorizedError
from app.core.ids import new_id, validate_id
from app.modules.posts.reactions.models.reaction import Reaction
from app.modules.posts.reactions.services.categories import LIKE, normalize_reaction
from app.modules.posts.schemas.post import PostWithCounts
from app.modules.posts.services.post import attach_counts, require_post

logger = logging.getLogger("app")

REACTION_ADDED = "Reaction added"
REACTION_REMOVED = "Reaction removed"
POST_LIKED = "Post liked"
LIKE_REMOVED = "Like removed from post"


def get_reaction(db: Session, user_id: str, post_id: str) -> Optional[Reaction]:
    """Get reaction by user ID and post ID"""
    return (
        db.query(Reaction)
        .filter(Reaction.user_id == user_id, Reaction.post_id == post_id)
        .first()
    )


def _clear(db: Session, post_id: str, user_id: str) -> None:
    db.query(Reaction).filter(
        Reaction.post_id == post_id, Reaction.user_id == user_id
    ).delete(synchronize_session=False)
    db.commit()


def _replace(db: Session, post_id: str, user_id: str, reaction_type: Optional[str]) -> None:
    _clear(db, post_id, user_id)
    if reaction_type:
        db.add(Reaction(id=new_id(), post_id=post_id, user_id=user_id, reaction_type=reaction_type))
        db.commit()


def set_reaction(
    db: Session, post_id: str, user_id: Optional[str], reaction_type: Optional[str]
) -> Tuple[PostWithCounts, str]:
    """
    Set the caller's reaction on a post to reaction_type, or clear it when the
    type is empty. A user holds at most one reaction per post; setting a new
    one replaces the old.
    """
    post_id = validate_id(post_id)
    if not user_id:
        raise UnauthorizedError()
    post = require_post(db, post_id)

    reaction_type = (reaction_type or "").strip()
    try:
        _replace(db, post.id, user_id, reaction_type)
    except IntegrityError:
        # A concurrent request inserted between our delete and insert
        db.rollback()
        logger.warning(f"Reaction insert raced for post {post.id}, user {user_id}; retrying")
        _replace(db, post.id, user_id, reaction_type)

    db.refresh(post)
    message = REACTION_ADDED if reaction_type else REACTION_REMOVED
    return attach_counts(db, [post])[0], message


def toggle_like(db: Session, post_id: str, user_id: Optional[str]) -> Tuple[PostWithCounts, str]:
    """Like the post, or take the like back if the caller already likes it"""
    post_id = validate_id(post_id)
    if not user_id:
        raise UnauthorizedError()
    require_post(db, post_id)

    existing = get_reaction(db, user_id, post_id)
    if existing and normalize_reaction(existing.reaction_type) == LIKE:
        post, _ = set_reaction(db, post_id, user_id, None)
        return post, LIKE_REMOVED

    post, _ = set_reaction(db, post_id, user_id, LIKE)
    return post, POST_LIKED
