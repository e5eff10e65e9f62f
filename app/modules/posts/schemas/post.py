from typing import Dict, List, Optional
from datetime import datetime

from pydantic import Field, StringConstraints, field_validator
from typing_extensions import Annotated

from app.core.schemas import CamelModel, Pagination
from app.modules.posts.comments.schemas.comment import Comment

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
Content = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=5000)]
Media = Annotated[str, StringConstraints(max_length=2_000_000)]
Tag = Annotated[str, StringConstraints(strip_whitespace=True, max_length=50)]


def _clean_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    if tags is None:
        return None
    return [tag for tag in tags if tag]


class PostCreate(CamelModel):
    title: Title
    content: Content
    tags: List[Tag] = []
    media: Optional[Media] = None

    @field_validator("tags")
    @classmethod
    def drop_blank_tags(cls, v):
        return _clean_tags(v)


class PostUpdate(CamelModel):
    title: Optional[Title] = None
    content: Optional[Content] = None
    tags: Optional[List[Tag]] = None
    media: Optional[Media] = None

    @field_validator("tags")
    @classmethod
    def drop_blank_tags(cls, v):
        return _clean_tags(v)


class ReactionEntry(CamelModel):
    user_id: str
    reaction_type: str = Field(..., alias="type")


class PostWithCounts(CamelModel):
    """Post model with derived reaction and comment counts"""
    id: str
    title: str
    content: str
    media: Optional[str] = None
    creator_id: Optional[str] = None
    creator_name: Optional[str] = None
    tags: List[str] = []
    created_at: datetime
    updated_at: Optional[datetime] = None
    reactions: List[ReactionEntry] = []
    reactions_count: int = 0
    reactions_breakdown: Dict[str, int] = {}
    comment_count: int = 0
    trending_score: Optional[float] = None


class PostResponse(CamelModel):
    post: PostWithCounts
    message: str


class PostDetailResponse(PostResponse):
    comments_preview: List[Comment] = []


class PostListResponse(CamelModel):
    posts: List[PostWithCounts]
    pagination: Pagination
    message: str
