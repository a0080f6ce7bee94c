"""Auth request/response schemas for owner login, refresh and registration."""

from __future__ import annotations

from pydantic import BaseModel

from sampatti.models.nominee import AccessTier
from sampatti.models.user import UserRead


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str
    phone_number: str = ""


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    """JWT token pair returned on successful owner login."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # access token TTL in seconds
    user: UserRead | None = None


class RefreshRequest(BaseModel):
    refresh_token: str


class AccessTokenResponse(BaseModel):
    """Refresh only re-issues the access half; the refresh token stays valid."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int


class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str


class PrincipalRead(BaseModel):
    kind: str
    subject_id: str
    acting_user_id: str
    is_nominee: bool
    access_level: AccessTier | None
