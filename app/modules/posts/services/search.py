"""
Post search: text, tag, author and date filters plus count-based and
trending sorts, all evaluated in a single SQL statement.

Reaction and comment counts come from grouped sub-selects outer-joined to
``posts``; the page and the reported total are both derived from the same
filtered query, so the total always describes the candidate set being paged.
"""
from datetime import datetime, timezone
from typing import List, Optional, Tuple
import logging

from sqlalchemy import Float, and_, func, literal, or_, select
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.orm import Session
from sqlalchemy.sql.expression import FunctionElement

from app.core.config import Settings
from app.core.pagination import PageParams, build_pagination
from app.core.schemas import Pagination
from app.db.session import utcnow
from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.models.post import Post, PostTag
from app.modules.posts.reactions.models.reaction import Reaction
from app.modules.posts.schemas.post import PostWithCounts
from app.modules.posts.services.post import attach_counts

logger = logging.getLogger("app")

SECONDS_PER_DAY = 86400.0
UNIX_EPOCH_JULIAN_DAY = 2440587.5

DEFAULT_SORT = "-createdAt"
REACTION_SORTS = ("likeCount", "reactionsCount")
COMMENT_SORT = "commentCount"
TRENDING_SORT = "trending"


class epoch_days(FunctionElement):
    """Fractional days since the Unix epoch for a timestamp column"""
    type = Float()
    name = "epoch_days"
    inherit_cache = True


@compiles(epoch_days)
def _epoch_days_default(element, compiler, **kw):
    return "(EXTRACT(EPOCH FROM %s) / %s)" % (compiler.process(element.clauses, **kw), SECONDS_PER_DAY)


@compiles(epoch_days, "sqlite")
def _epoch_days_sqlite(element, compiler, **kw):
    return "(julianday(%s) - %s)" % (compiler.process(element.clauses, **kw), UNIX_EPOCH_JULIAN_DAY)


def _to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _days_since_epoch(moment: datetime) -> float:
    return moment.replace(tzinfo=timezone.utc).timestamp() / SECONDS_PER_DAY


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def split_tags(tags: Optional[str]) -> List[str]:
    """Parse the comma separated ``tags`` query parameter"""
    if not tags:
        return []
    return [tag.strip() for tag in tags.split(",") if tag.strip()]


def build_filters(
    query: Optional[str] = None,
    tags: Optional[List[str]] = None,
    author: Optional[str] = None,
    from_date: Optional[datetime] = None,
    to_date: Optional[datetime] = None,
) -> list:
    filters = []

    terms = (query or "").split()
    if terms:
        matches = []
        for term in terms:
            pattern = f"%{_escape_like(term)}%"
            matches.append(Post.title.ilike(pattern, escape="\\"))
            matches.append(Post.content.ilike(pattern, escape="\\"))
        filters.append(or_(*matches))

    if tags:
        tagged = select(PostTag.post_id).where(PostTag.name.in_(tags))
        filters.append(Post.id.in_(tagged))

    author = (author or "").strip()
    if author:
        filters.append(or_(Post.creator_id == author, Post.creator_name == author))

    from_date = _to_naive_utc(from_date)
    to_date = _to_naive_utc(to_date)
    if from_date is not None:
        filters.append(Post.created_at >= from_date)
    if to_date is not None:
        filters.append(Post.created_at <= to_date)

    return filters


def search_posts(
    db: Session,
    settings: Settings,
    params: PageParams,
    query: Optional[str] = None,
    tags: Optional[List[str]] = None,
    author: Optional[str] = None,
    from_date: Optional[datetime] = None,
    to_date: Optional[datetime] = None,
    sort: Optional[str] = None,
) -> Tuple[List[PostWithCounts], Pagination]:
    """Search posts and return one page of results with the size of the full match set"""
    sort = sort or DEFAULT_SORT
    logger.info(f"Searching posts query={query!r} tags={tags} author={author!r} sort={sort}")

    reaction_totals = (
        select(Reaction.post_id.label("post_id"), func.count(Reaction.id).label("total"))
        .group_by(Reaction.post_id)
        .subquery()
    )
    comment_totals = (
        select(Comment.post_id.label("post_id"), func.count(Comment.id).label("total"))
        .group_by(Comment.post_id)
        .subquery()
    )
    reactions_count = func.coalesce(reaction_totals.c.total, 0)
    comment_count = func.coalesce(comment_totals.c.total, 0)

    now_days = literal(_days_since_epoch(utcnow()), Float)
    age_days = now_days - epoch_days(Post.created_at)
    trending_score = (
        settings.TRENDING_REACTION_WEIGHT * reactions_count
        + settings.TRENDING_COMMENT_WEIGHT * comment_count
        - settings.TRENDING_AGE_WEIGHT * age_days
    )

    base = (
        db.query(Post, trending_score.label("trending_score"))
        .outerjoin(reaction_totals, reaction_totals.c.post_id == Post.id)
        .outerjoin(comment_totals, comment_totals.c.post_id == Post.id)
    )
    filters = build_filters(query, tags, author, from_date, to_date)
    if filters:
        base = base.filter(and_(*filters))

    if sort in REACTION_SORTS:
        order_by = [reactions_count.desc(), Post.created_at.desc()]
    elif sort == COMMENT_SORT:
        order_by = [comment_count.desc(), Post.created_at.desc()]
    elif sort == TRENDING_SORT:
        order_by = [trending_score.desc(), Post.created_at.desc()]
    elif sort == "createdAt":
        order_by = [Post.created_at.asc()]
    else:
        order_by = [Post.created_at.desc()]
    order_by.append(Post.id.asc())

    total = base.count()
    rows = base.order_by(*order_by).offset(params.skip).limit(params.limit).all()

    posts = [post for post, _ in rows]
    scores = {}
    if sort == TRENDING_SORT:
        scores = {post.id: float(score) for post, score in rows}
    return attach_counts(db, posts, scores), build_pagination(total, params)
