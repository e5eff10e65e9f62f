from typing import Optional

from pydantic import Field

from app.core.schemas import CamelModel


class ReactionSet(CamelModel):
    """Body of PUT /posts/{id}/reactions; an empty or missing type clears the reaction"""
    type: Optional[str] = Field(None, max_length=32)
