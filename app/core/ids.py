import uuid

from app.core.errors import InvalidIdError


def new_id() -> str:
    return str(uuid.uuid4())


def validate_id(value: str) -> str:
    """Return the canonical form of a resource id or raise InvalidIdError"""
    try:
        return str(uuid.UUID(str(value)))
    except (ValueError, TypeError, AttributeError):
        raise InvalidIdError(f"{value} is invalid id")
