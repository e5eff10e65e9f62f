"""Authentication router: local accounts, password reset and Google sign-in"""
from typing import Any, Optional
import secrets

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.errors import UnauthorizedError, UnexpectedError
from app.core.rate_limit import limiter, login_limit
from app.core.schemas import MessageResponse
from app.deps import get_current_identity, get_db, get_mailer, get_oauth_client, get_settings
from app.modules.auth.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenPayload,
    TokenValidation,
)
from app.modules.auth.services.auth import authenticate, register_user, request_password_reset, reset_password
from app.modules.auth.services.google_oauth import GoogleOAuthClient, login_with_google
from app.modules.user_management.schemas.user import to_public

router = APIRouter()

OAUTH_STATE_COOKIE = "oauthState"


def _set_session_cookie(response: Response, settings: Settings, token: str, remember: bool = False) -> None:
    minutes = settings.REMEMBER_ME_EXPIRE_MINUTES if remember else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    response.set_cookie(
        key=settings.COOKIE_NAME,
        value=token,
        max_age=minutes * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    *,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    user_in: RegisterRequest,
) -> Any:
    """Create a local account and sign it in"""
    user, token = register_user(db, settings, user_in)
    _set_session_cookie(response, settings, token)
    return {
        "message": "Registration Successfull!",
        "access_token": token,
        "user": to_public(user),
    }


@router.post("/login", response_model=AuthResponse)
@limiter.limit(login_limit)
def login(
    request: Request,
    response: Response,
    credentials: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Any:
    """Sign in with email and password"""
    user, token = authenticate(db, settings, credentials)
    _set_session_cookie(response, settings, token, remember=credentials.remember_me)
    return {
        "message": "LoggedIn successfully!",
        "access_token": token,
        "user": to_public(user),
    }


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response, settings: Settings = Depends(get_settings)) -> Any:
    """Clear the session cookie; tokens are not revoked server side"""
    response.delete_cookie(settings.COOKIE_NAME)
    return {"message": "Logged out Successfully"}


@router.get("/validate-token", response_model=TokenValidation)
def validate_token(identity: TokenPayload = Depends(get_current_identity)) -> Any:
    """Validate the caller's token and return the identity it carries"""
    return {"valid": True, "user_id": identity.sub, "user_name": identity.user_name}


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    *,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    mailer: Any = Depends(get_mailer),
    body: ForgotPasswordRequest,
) -> Any:
    """Send a password reset link; the answer is the same for unknown emails"""
    message = request_password_reset(db, settings, mailer, body.email)
    return {"message": message}


@router.post("/reset-password", response_model=MessageResponse)
def reset_forgotten_password(
    *,
    db: Session = Depends(get_db),
    body: ResetPasswordRequest,
) -> Any:
    """Set a new password using a reset token"""
    reset_password(db, body.token, body.password)
    return {"message": "Password has been reset successfully"}


@router.get("/google")
def google_login(
    settings: Settings = Depends(get_settings),
    oauth: GoogleOAuthClient = Depends(get_oauth_client),
) -> Any:
    """Redirect to Google's consent screen"""
    if not oauth.configured:
        raise UnexpectedError("Google OAuth is not configured")
    state = secrets.token_urlsafe(16)
    redirect = RedirectResponse(oauth.authorization_url(state), status_code=status.HTTP_302_FOUND)
    redirect.set_cookie(OAUTH_STATE_COOKIE, state, max_age=600, httponly=True, samesite="lax", secure=settings.is_production)
    return redirect


@router.get("/google/callback", response_model=AuthResponse)
def google_callback(
    request: Request,
    response: Response,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    oauth: GoogleOAuthClient = Depends(get_oauth_client),
) -> Any:
    """Finish Google sign-in and issue a long lived session token"""
    if not code:
        raise UnauthorizedError("Missing authorization code")
    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if not expected_state or state != expected_state:
        raise UnauthorizedError("OAuth state mismatch")

    user, token, is_new_user = login_with_google(db, settings, oauth, code)
    response.delete_cookie(OAUTH_STATE_COOKIE)
    _set_session_cookie(response, settings, token, remember=True)
    return {
        "message": "Registration Successfull!" if is_new_user else "LoggedIn successfully!",
        "access_token": token,
        "user": to_public(user),
    }
