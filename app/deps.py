from typing import Generator, Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.errors import UnauthorizedError
from app.core.rate_limit import extract_token
from app.core.security import decode_access_token
from app.modules.auth.schemas.auth import TokenPayload
from app.modules.user_management.models.user import User
from app.modules.user_management.services.user import get_user


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Generator:
    """
    Dependency for getting DB session
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_mailer(request: Request):
    return request.app.state.mailer


def get_oauth_client(request: Request):
    return request.app.state.oauth_client


def get_token(request: Request, settings: Settings = Depends(get_settings)) -> Optional[str]:
    return extract_token(request, settings.COOKIE_NAME)


def get_current_identity(
    token: Optional[str] = Depends(get_token),
    settings: Settings = Depends(get_settings),
) -> TokenPayload:
    """
    Dependency verifying the bearer token; exposes the user id and handle
    """
    if not token:
        raise UnauthorizedError("Access Denied")

    payload = decode_access_token(token, settings)
    if not payload:
        raise UnauthorizedError("Invalid or expired token")

    return TokenPayload(sub=payload["sub"], user_name=payload.get("userName"))


def get_current_user(
    db: Session = Depends(get_db),
    identity: TokenPayload = Depends(get_current_identity),
) -> User:
    """
    Dependency for getting the stored account behind the token
    """
    user = get_user(db, user_id=identity.sub)
    if not user:
        raise UnauthorizedError("Access Denied, Please sign-in again")
    return user


def get_optional_identity(
    token: Optional[str] = Depends(get_token),
    settings: Settings = Depends(get_settings),
) -> Optional[TokenPayload]:
    """
    Like get_current_identity, but a request without credentials passes
    through with None so the service can validate its input first
    """
    if not token:
        return None
    return get_current_identity(token=token, settings=settings)


def get_optional_user(
    db: Session = Depends(get_db),
    identity: Optional[TokenPayload] = Depends(get_optional_identity),
) -> Optional[User]:
    if identity is None:
        return None
    return get_user(db, user_id=identity.sub)
