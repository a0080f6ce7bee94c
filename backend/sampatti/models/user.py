"""User (account owner) model and profile schemas."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel
from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    phone_number: str = Field(default="")
    password_hash: str  # argon2id PHC string, never serialized
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_login: datetime | None = Field(default=None)


# --- Pydantic request/response schemas ---


class UserRead(BaseModel):
    id: str
    name: str
    email: str
    phone_number: str
    created_at: datetime
    last_login: datetime | None

    model_config = {"from_attributes": True}


class UserSummary(BaseModel):
    """Owner identity as shown to a nominee: no contact details beyond email."""

    id: str
    name: str
    email: str

    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    name: str | None = None
    phone_number: str | None = None
