from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serialized with camelCase keys, populated by field name or alias"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Pagination(BaseModel):
    total: int
    page: int
    pages: int
    limit: int


class MessageResponse(BaseModel):
    message: str


class DeletedResponse(BaseModel):
    id: str
    message: str
