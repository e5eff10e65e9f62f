import logging
from datetime import timedelta
from typing import Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.errors import ConflictError, InvalidOrExpiredTokenError, UnauthorizedError
from app.core.ids import new_id
from app.core.mailer import MailDeliveryError
from app.core.security import (
    create_access_token,
    generate_reset_token,
    get_password_hash,
    hash_reset_token,
    verify_password,
)
from app.db.session import utcnow
from app.modules.auth.schemas.auth import LoginRequest, RegisterRequest
from app.modules.user_management.models.user import User
from app.modules.user_management.services.user import get_user_by_email, get_user_by_username

logger = logging.getLogger("app")

USERNAME_TAKEN = "username not available"
EMAIL_TAKEN = "email already registered"
RESET_REQUESTED_MESSAGE = "If an account exists for that email, a password reset link has been sent"


def issue_token(user: User, settings: Settings, remember: bool = False) -> str:
    minutes = settings.REMEMBER_ME_EXPIRE_MINUTES if remember else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    return create_access_token(
        user.id,
        settings,
        claims={"userName": user.username},
        expires_delta=timedelta(minutes=minutes),
    )


def _raise_conflict_for(db: Session, username: str, email: str) -> None:
    if get_user_by_username(db, username):
        raise ConflictError(USERNAME_TAKEN)
    if get_user_by_email(db, email):
        raise ConflictError(EMAIL_TAKEN)


def register_user(db: Session, settings: Settings, data: RegisterRequest) -> Tuple[User, str]:
    """Create a local account and return it with a session token"""
    # Pre-check for a friendly message; the unique constraints stay authoritative
    _raise_conflict_for(db, data.user_name, data.email)

    user = User(
        id=new_id(),
        username=data.user_name,
        email=data.email,
        hashed_password=get_password_hash(data.password),
        auth_provider="local",
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Unique constraint violated while registering {data.user_name}: {e.orig}")
        _raise_conflict_for(db, data.user_name, data.email)
        raise ConflictError(f"{USERNAME_TAKEN} or {EMAIL_TAKEN}")
    db.refresh(user)

    logger.info(f"Registered user {user.id} ({user.username})")
    return user, issue_token(user, settings)


def authenticate(db: Session, settings: Settings, data: LoginRequest) -> Tuple[User, str]:
    user = get_user_by_email(db, data.email)
    if not user or not verify_password(data.password, user.hashed_password):
        logger.info(f"Failed login for {data.email}")
        raise UnauthorizedError("Invalid email or password")
    return user, issue_token(user, settings, remember=data.remember_me)


def _reset_link(settings: Settings, token: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/reset-password?token={token}"


def request_password_reset(db: Session, settings: Settings, mailer, email: str) -> str:
    """
    Issue a single-use reset token for a known email and mail it.

    The response is identical whether or not the account exists, and a mail
    failure is only logged, so callers cannot tell which emails are registered.
    """
    user = get_user_by_email(db, email)
    if not user:
        logger.info("Password reset requested for an unknown email")
        return RESET_REQUESTED_MESSAGE

    token = generate_reset_token()
    user.reset_token_hash = hash_reset_token(token)
    user.reset_token_expires_at = utcnow() + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES)
    db.commit()

    link = _reset_link(settings, token)
    html = (
        f"<p>Hello {user.username},</p>"
        f"<p>Use the link below to choose a new password. It expires in "
        f"{settings.PASSWORD_RESET_EXPIRE_MINUTES} minutes.</p>"
        f'<p><a href="{link}">{link}</a></p>'
    )
    try:
        mailer.send(user.email, "Reset your Memories password", html)
    except MailDeliveryError as e:
        logger.error(f"Failed to deliver password reset mail for user {user.id}: {e}")
    return RESET_REQUESTED_MESSAGE


def reset_password(db: Session, token: str, new_password: str) -> None:
    token_hash = hash_reset_token(token)
    now = utcnow()
    user = (
        db.query(User)
        .filter(User.reset_token_hash == token_hash, User.reset_token_expires_at > now)
        .first()
    )
    if not user:
        raise InvalidOrExpiredTokenError()

    # Conditional update: only the request that still sees the token consumes it
    consumed = (
        db.query(User)
        .filter(User.id == user.id, User.reset_token_hash == token_hash)
        .update(
            {
                User.hashed_password: get_password_hash(new_password),
                User.reset_token_hash: None,
                User.reset_token_expires_at: None,
                User.updated_at: now,
            },
            synchronize_session=False,
        )
    )
    if consumed != 1:
        db.rollback()
        raise InvalidOrExpiredTokenError()
    db.commit()
    logger.info(f"Password reset for user {user.id}")
