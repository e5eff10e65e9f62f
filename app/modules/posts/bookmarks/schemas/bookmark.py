from pydantic import BaseModel


class BookmarkResponse(BaseModel):
    id: str
    message: str
