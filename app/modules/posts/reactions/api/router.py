from typing import Any, Optional

from fastapi import APIRouter, Depends, Path, Request
from sqlalchemy.orm import Session

from app.core.rate_limit import identity_or_ip, limiter, write_limit
from app.deps import get_db, get_optional_identity
from app.modules.auth.schemas.auth import TokenPayload
from app.modules.posts.schemas.post import PostResponse
from app.modules.posts.reactions.schemas.reaction import ReactionSet
from app.modules.posts.reactions.services.reaction import set_reaction

router = APIRouter()


def _caller(identity: Optional[TokenPayload]) -> Optional[str]:
    return identity.sub if identity else None


@router.put("", response_model=PostResponse)
@limiter.limit(write_limit, key_func=identity_or_ip)
def set_post_reaction(
    request: Request,
    reaction_in: Optional[ReactionSet] = None,
    post_id: str = Path(..., description="The ID of the post to react to"),
    db: Session = Depends(get_db),
    identity: Optional[TokenPayload] = Depends(get_optional_identity),
) -> Any:
    """Set the caller's reaction on a post; an empty type clears it"""
    post, message = set_reaction(db, post_id, _caller(identity), reaction_in.type if reaction_in else None)
    return {"post": post, "message": message}


@router.delete("", response_model=PostResponse)
@limiter.limit(write_limit, key_func=identity_or_ip)
def clear_post_reaction(
    request: Request,
    post_id: str = Path(..., description="The ID of the post to remove the reaction from"),
    db: Session = Depends(get_db),
    identity: Optional[TokenPayload] = Depends(get_optional_identity),
) -> Any:
    """Remove the caller's reaction from a post"""
    post, message = set_reaction(db, post_id, _caller(identity), None)
    return {"post": post, "message": message}
