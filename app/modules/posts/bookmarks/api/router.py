from typing import Any, Optional

from fastapi import APIRouter, Depends, Path, Request
from sqlalchemy.orm import Session

from app.core.rate_limit import identity_or_ip, limiter, write_limit
from app.deps import get_db, get_optional_identity
from app.modules.auth.schemas.auth import TokenPayload
from app.modules.posts.bookmarks.schemas.bookmark import BookmarkResponse
from app.modules.posts.bookmarks.services.bookmark import (
    BOOKMARK_REMOVED, BOOKMARKED, add_bookmark, remove_bookmark
)

router = APIRouter()


@router.post("", response_model=BookmarkResponse)
@limiter.limit(write_limit, key_func=identity_or_ip)
def bookmark_post(
    request: Request,
    post_id: str = Path(..., description="The ID of the post to bookmark"),
    db: Session = Depends(get_db),
    identity: Optional[TokenPayload] = Depends(get_optional_identity),
) -> Any:
    """Add a post to the caller's bookmarks"""
    bookmarked_id = add_bookmark(db, post_id, identity.sub if identity else None)
    return {"id": bookmarked_id, "message": BOOKMARKED}


@router.delete("", response_model=BookmarkResponse)
@limiter.limit(write_limit, key_func=identity_or_ip)
def unbookmark_post(
    request: Request,
    post_id: str = Path(..., description="The ID of the post to remove from bookmarks"),
    db: Session = Depends(get_db),
    identity: Optional[TokenPayload] = Depends(get_optional_identity),
) -> Any:
    """Remove a post from the caller's bookmarks"""
    removed_id = remove_bookmark(db, post_id, identity.sub if identity else None)
    return {"id": removed_id, "message": BOOKMARK_REMOVED}
