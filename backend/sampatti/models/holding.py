"""Asset and document records as read by the access policy.

Only the columns the policy needs live here; full asset/document CRUD is
handled elsewhere.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel
from sqlmodel import Field, SQLModel

from sampatti.models.nominee import AccessTier


class Asset(SQLModel, table=True):
    __tablename__ = "assets"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    asset_name: str
    asset_type: str
    institution: str = Field(default="")
    current_value: float = Field(default=0.0)
    last_updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Document(SQLModel, table=True):
    __tablename__ = "documents"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    title: str
    document_type: str = Field(default="")
    filename: str = Field(default="")
    upload_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    accessible_to_nominees: bool = Field(default=False)


class DocumentNomineeAccess(SQLModel, table=True):
    __tablename__ = "document_nominee_access"

    document_id: str = Field(foreign_key="documents.id", primary_key=True)
    nominee_id: str = Field(foreign_key="nominees.id", primary_key=True, index=True)
    granted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# --- Pydantic request/response schemas ---


class AssetRead(BaseModel):
    id: str
    asset_name: str
    asset_type: str
    institution: str
    current_value: float
    last_updated: datetime

    model_config = {"from_attributes": True}


class DocumentRead(BaseModel):
    id: str
    title: str
    document_type: str
    filename: str
    upload_date: datetime
    accessible_to_nominees: bool

    model_config = {"from_attributes": True}


class DocumentNomineeAccessUpdate(BaseModel):
    accessible_to_nominees: bool
    nominee_ids: list[str] = []


class HoldingsResponse(BaseModel):
    user_id: str
    access_level: AccessTier | None
    assets: list[AssetRead]
    documents: list[DocumentRead]
