from typing import Dict, Iterable, List, Optional, Tuple
from collections import defaultdict
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.errors import BadRequestError, ForbiddenError, NotFoundError, UnauthorizedError
from app.core.ids import new_id, validate_id
from app.core.pagination import PageParams, build_pagination
from app.core.schemas import Pagination
from app.modules.posts.models.post import Post, PostTag
from app.modules.posts.schemas.post import PostCreate, PostUpdate, PostWithCounts, ReactionEntry
from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.reactions.models.reaction import Reaction
from app.modules.posts.reactions.services.categories import breakdown
from app.modules.posts.bookmarks.models.bookmark import Bookmark
from app.modules.user_management.models.user import User

logger = logging.getLogger("app")

SORT_FIELDS = {
    "createdAt": Post.created_at,
    "updatedAt": Post.updated_at,
    "title": Post.title,
}


def get_post(db: Session, post_id: str) -> Optional[Post]:
    """Get post by ID"""
    return db.query(Post).filter(Post.id == post_id).first()


def require_post(db: Session, post_id: str) -> Post:
    """Validate the id, then return the post or raise NotFoundError"""
    post = get_post(db, validate_id(post_id))
    if not post:
        raise NotFoundError("Post not found")
    return post


def _reactions_by_post(db: Session, post_ids: List[str]) -> Dict[str, List[Reaction]]:
    grouped = defaultdict(list)
    if not post_ids:
        return grouped
    rows = (
        db.query(Reaction)
        .filter(Reaction.post_id.in_(post_ids))
        .order_by(Reaction.created_at.asc())
        .all()
    )
    for reaction in rows:
        grouped[reaction.post_id].append(reaction)
    return grouped


def comment_counts(db: Session, post_ids: List[str]) -> Dict[str, int]:
    """Comment count per post, one grouped query for the whole batch"""
    if not post_ids:
        return {}
    rows = (
        db.query(Comment.post_id, func.count(Comment.id))
        .filter(Comment.post_id.in_(post_ids))
        .group_by(Comment.post_id)
        .all()
    )
    return {post_id: count for post_id, count in rows}


def _to_schema(
    post: Post,
    reactions: List[Reaction],
    comment_count: int,
    trending_score: Optional[float] = None,
) -> PostWithCounts:
    return PostWithCounts(
        id=post.id,
        title=post.title,
        content=post.content,
        media=post.media,
        creator_id=post.creator_id,
        creator_name=post.creator_name,
        tags=post.tag_names,
        created_at=post.created_at,
        updated_at=post.updated_at,
        reactions=[ReactionEntry(user_id=r.user_id, reaction_type=r.reaction_type) for r in reactions],
        reactions_count=len(reactions),
        reactions_breakdown=breakdown(r.reaction_type for r in reactions),
        comment_count=comment_count,
        trending_score=trending_score,
    )


def attach_counts(
    db: Session,
    posts: Iterable[Post],
    scores: Optional[Dict[str, float]] = None,
) -> List[PostWithCounts]:
    """Annotate a page of posts with reaction and comment counts computed from the store"""
    posts = list(posts)
    post_ids = [post.id for post in posts]
    reactions = _reactions_by_post(db, post_ids)
    counts = comment_counts(db, post_ids)
    scores = scores or {}
    return [
        _to_schema(post, reactions.get(post.id, []), counts.get(post.id, 0), scores.get(post.id))
        for post in posts
    ]


def get_post_with_counts(db: Session, post_id: str) -> PostWithCounts:
    post = require_post(db, post_id)
    return attach_counts(db, [post])[0]


def parse_sort(sort: Optional[str]):
    """Translate "-createdAt" style sort specs into ORDER BY clauses"""
    sort = (sort or "-createdAt").strip()
    descending = sort.startswith("-")
    field = sort.lstrip("-+")
    column = SORT_FIELDS.get(field)
    if column is None:
        raise BadRequestError(f"Unsupported sort field: {field}. Use one of: {', '.join(SORT_FIELDS)}")
    primary = column.desc() if descending else column.asc()
    return [primary, Post.id.desc() if descending else Post.id.asc()]


def get_posts_with_counts(db: Session, params: PageParams, sort: Optional[str] = None) -> Tuple[List[PostWithCounts], Pagination]:
    """Get a page of posts with comment and reaction counts"""
    order_by = parse_sort(sort)
    logger.info(f"Getting posts page={params.page} limit={params.limit} sort={sort}")
    total = db.query(func.count(Post.id)).scalar() or 0
    posts = db.query(Post).order_by(*order_by).offset(params.skip).limit(params.limit).all()
    return attach_counts(db, posts), build_pagination(total, params)


def _replace_tags(post: Post, tags: List[str]) -> None:
    post.tags = [PostTag(position=index, name=name) for index, name in enumerate(tags)]


def create_post(db: Session, post_in: PostCreate, creator: User) -> PostWithCounts:
    """Create new post"""
    logger.info(f"Creating post for creator ID: {creator.id}")
    post = Post(
        id=new_id(),
        title=post_in.title,
        content=post_in.content,
        media=post_in.media or None,
        creator_id=creator.id,
        creator_name=creator.username,
    )
    _replace_tags(post, post_in.tags)
    db.add(post)
    db.commit()
    db.refresh(post)
    return attach_counts(db, [post])[0]


def _ensure_owner(post: Post, user_id: Optional[str]) -> None:
    if not user_id:
        raise UnauthorizedError()
    if post.creator_id and post.creator_id != user_id:
        raise ForbiddenError("Not enough permissions")


def update_post(db: Session, post_id: str, post_in: PostUpdate, user_id: str) -> PostWithCounts:
    """Update the fields present in post_in"""
    post = require_post(db, post_id)
    _ensure_owner(post, user_id)
    logger.info(f"Updating post with ID: {post.id}")

    update_data = post_in.model_dump(exclude_unset=True)
    tags = update_data.pop("tags", None)
    for field, value in update_data.items():
        if value is None and field in ("title", "content"):
            continue
        setattr(post, field, value)
    if tags is not None:
        _replace_tags(post, tags)

    db.commit()
    db.refresh(post)
    return attach_counts(db, [post])[0]


def delete_post(db: Session, post_id: str, user_id: str) -> str:
    """
    Delete post and everything that hangs off it: reactions, comments
    and bookmark entries
    """
    post = require_post(db, post_id)
    _ensure_owner(post, user_id)
    post_id = post.id
    logger.info(f"Deleting post with ID: {post_id}")

    db.query(Reaction).filter(Reaction.post_id == post_id).delete(synchronize_session=False)
    db.query(Comment).filter(Comment.post_id == post_id).delete(synchronize_session=False)
    db.query(Bookmark).filter(Bookmark.post_id == post_id).delete(synchronize_session=False)
    db.delete(post)
    db.commit()
    return post_id
