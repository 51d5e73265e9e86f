"""User and authentication schemas"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def _normalize_email(value: str) -> str:
    return value.strip().lower()


class RegisterRequest(BaseModel):
    """Registration schema"""
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    # bcrypt only considers the first 72 bytes
    password: str = Field(..., min_length=8, max_length=72)
    name: Optional[str] = Field(None, max_length=255)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v) if isinstance(v, str) else v

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v):
        if len(v.encode("utf-8")) > 72:
            raise ValueError("Password must be at most 72 bytes")
        return v


class LoginRequest(BaseModel):
    """Login schema"""
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=72)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v) if isinstance(v, str) else v


class RefreshTokenRequest(BaseModel):
    """Refresh/logout body"""
    refresh_token: str = Field(..., min_length=1, max_length=512)


class UserResponse(BaseModel):
    """Public user projection"""
    id: str
    email: str
    name: Optional[str] = None
    auth_provider: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserWithRolesResponse(UserResponse):
    """User projection including role names, for administrative listings"""
    roles: List[str] = []

    @classmethod
    def from_user(cls, user) -> "UserWithRolesResponse":
        base = UserResponse.model_validate(user).model_dump()
        return cls(**base, roles=user.role_names)


class TokenResponse(BaseModel):
    """Session token pair response"""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class MessageResponse(BaseModel):
    success: bool = True
    message: str
