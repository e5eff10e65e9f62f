"""Google OAuth (authorization code) login"""
import logging
import re
from typing import Optional, Tuple
from urllib.parse import urlencode

import httpx
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.errors import UnauthorizedError, UnexpectedError
from app.core.ids import new_id
from app.core.security import get_password_hash
from app.modules.auth.schemas.auth import GoogleProfile
from app.modules.auth.services.auth import issue_token
from app.modules.user_management.models.user import User
from app.modules.user_management.services.user import get_user_by_email

logger = logging.getLogger("app")


class GoogleOAuthClient:
    """Talks to Google's token and userinfo endpoints with a bounded timeout"""

    def __init__(self, settings: Settings, transport: Optional[httpx.BaseTransport] = None):
        self.settings = settings
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.settings.GOOGLE_CLIENT_ID and self.settings.GOOGLE_CLIENT_SECRET)

    def authorization_url(self, state: Optional[str] = None) -> str:
        params = {
            "client_id": self.settings.GOOGLE_CLIENT_ID,
            "redirect_uri": self.settings.GOOGLE_REDIRECT_URI,
            "response_type": "code",
            "scope": "openid email profile",
            "access_type": "online",
            "prompt": "select_account",
        }
        if state:
            params["state"] = state
        return f"{self.settings.GOOGLE_AUTH_URL}?{urlencode(params)}"

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self.settings.OAUTH_TIMEOUT_SECONDS, transport=self.transport)

    def fetch_profile(self, code: str) -> GoogleProfile:
        """Exchange the authorization code and fetch the user's profile"""
        try:
            with self._client() as client:
                token_response = client.post(
                    self.settings.GOOGLE_TOKEN_URL,
                    data={
                        "code": code,
                        "client_id": self.settings.GOOGLE_CLIENT_ID,
                        "client_secret": self.settings.GOOGLE_CLIENT_SECRET,
                        "redirect_uri": self.settings.GOOGLE_REDIRECT_URI,
                        "grant_type": "authorization_code",
                    },
                )
                if token_response.status_code >= 400:
                    logger.warning(f"Google rejected authorization code: {token_response.status_code}")
                    raise UnauthorizedError("Google sign-in failed")
                access_token = token_response.json().get("access_token")
                if not access_token:
                    raise UnauthorizedError("Google sign-in failed")

                profile_response = client.get(
                    self.settings.GOOGLE_USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                if profile_response.status_code >= 400:
                    logger.warning(f"Google profile request failed: {profile_response.status_code}")
                    raise UnauthorizedError("Google sign-in failed")
                return GoogleProfile(**profile_response.json())
        except (httpx.HTTPError, ValueError) as e:
            raise UnexpectedError(f"Google OAuth request failed: {e}") from e


def _generate_unique_username(db: Session, profile: GoogleProfile) -> str:
    """Derive a handle from the display name, suffixing a counter until it is free"""
    base_username = re.sub(r"[^A-Za-z0-9_.]", "", (profile.name or "").replace(" ", "_"))
    if not base_username:
        base_username = profile.email.split("@")[0]
    base_username = base_username[:60]

    username = base_username
    suffix = 1
    while db.query(User).filter(User.username == username).first():
        username = f"{base_username}{suffix}"
        suffix += 1
    return username


def get_or_create_user_from_google(db: Session, profile: GoogleProfile) -> Tuple[User, bool]:
    """Gets or creates a user for a Google profile"""
    if not profile.email:
        raise UnauthorizedError("Google account did not provide an email address")
    email = profile.email.strip().lower()

    user = get_user_by_email(db, email)
    if user:
        return user, False

    user = User(
        id=new_id(),
        email=email,
        username=_generate_unique_username(db, profile),
        # unusable random password; this account signs in through Google
        hashed_password=get_password_hash(new_id()),
        auth_provider="google",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Created user {user.id} ({user.username}) from Google sign-in")
    return user, True


def login_with_google(db: Session, settings: Settings, oauth: GoogleOAuthClient, code: str) -> Tuple[User, str, bool]:
    if not oauth.configured:
        raise UnexpectedError("Google OAuth is not configured")
    profile = oauth.fetch_profile(code)
    user, is_new_user = get_or_create_user_from_google(db, profile)
    return user, issue_token(user, settings, remember=True), is_new_user
