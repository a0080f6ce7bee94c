"""Nominee models: recovery contacts, their status machine, and the access log.

Includes SQLModel tables for nominees and their append-only access log,
plus Pydantic schemas for request/response validation.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel
from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class AccessTier(str, Enum):
    FULL = "Full"
    LIMITED = "Limited"
    DOCUMENTS_ONLY = "DocumentsOnly"


class NomineeStatus(str, Enum):
    PENDING = "Pending"
    ACTIVE = "Active"
    REVOKED = "Revoked"


class Nominee(SQLModel, table=True):
    __tablename__ = "nominees"
    __table_args__ = (UniqueConstraint("user_id", "email", name="uq_nominee_owner_email"),)

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    name: str
    email: str = Field(index=True)
    phone_number: str = Field(default="")
    relationship: str = Field(default="")
    access_level: AccessTier = Field(default=AccessTier.LIMITED)
    status: NomineeStatus = Field(default=NomineeStatus.PENDING)
    emergency_access_code: str = Field(default="")  # argon2 hash; "" means unset
    last_access_date: datetime | None = Field(default=None)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class NomineeAccessLog(SQLModel, table=True):
    """Append-only audit trail. nominee_id is not a foreign key: entries
    outlive the nominee they describe."""

    __tablename__ = "nominee_access_logs"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    nominee_id: str = Field(index=True)
    date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    action: str
    ip_address: str | None = Field(default=None)
    device_info: str | None = Field(default=None)


# --- Pydantic request/response schemas ---


class NomineeCreate(BaseModel):
    name: str
    email: str
    phone_number: str = ""
    relationship: str = ""
    access_level: AccessTier


class NomineeUpdate(BaseModel):
    name: str | None = None
    phone_number: str | None = None
    relationship: str | None = None
    access_level: AccessTier | None = None


class NomineeRead(BaseModel):
    id: str
    user_id: str
    name: str
    email: str
    phone_number: str
    relationship: str
    access_level: AccessTier
    status: NomineeStatus
    last_access_date: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class NomineeInviteResponse(BaseModel):
    """The cleartext code appears here and nowhere else, ever."""

    nominee: NomineeRead
    code: str
    message: str = (
        "Store this emergency access code securely and share it with your "
        "nominee. This code will not be shown again."
    )


class NomineeAccessLogRead(BaseModel):
    id: str
    nominee_id: str
    nominee_name: str
    date: datetime
    action: str
    ip_address: str | None
    device_info: str | None


class EmergencyAccessRequest(BaseModel):
    email: str
    user_id: str
    access_code: str


class EmergencyAccessResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    access_level: AccessTier
    nominee_id: str
    user_id: str
