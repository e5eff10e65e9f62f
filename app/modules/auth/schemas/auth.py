from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.core.schemas import CamelModel
from app.modules.user_management.schemas.user import UserPublic


def _normalize_email(email: Optional[str]) -> Optional[str]:
    """Normalize email to lowercase."""
    return email.strip().lower() if email else email


class RegisterRequest(CamelModel):
    user_name: str = Field(..., min_length=1, max_length=64)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("user_name")
    @classmethod
    def strip_user_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("userName must not be blank")
        return v


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    remember_me: bool = False

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)


class ForgotPasswordRequest(CamelModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)


class ResetPasswordRequest(CamelModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6, max_length=128)


class TokenPayload(CamelModel):
    """Identity carried by a verified access token"""
    sub: str
    user_name: Optional[str] = None


class AuthResponse(CamelModel):
    success: bool = True
    message: str
    access_token: str
    user: UserPublic


class TokenValidation(CamelModel):
    valid: bool = True
    user_id: str
    user_name: Optional[str] = None


class GoogleProfile(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = None
