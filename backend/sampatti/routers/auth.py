"""Auth endpoints: register, login, refresh, nominee emergency access, whoami.

Owners authenticate with email + password and receive an access/refresh
token pair. Nominees authenticate with their email, the owner's id, and the
emergency access code the owner shared with them, and receive a single
24-hour nominee token that cannot be refreshed.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from sampatti.db import get_session
from sampatti.dependencies import (
    get_account_service,
    get_credential_codec,
    get_nominee_registry,
    get_request_origin,
    get_request_principal,
)
from sampatti.errors import AccessError, AccessErrorKind
from sampatti.models.auth import (
    AccessTokenResponse,
    LoginRequest,
    PrincipalRead,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
)
from sampatti.models.nominee import EmergencyAccessRequest, EmergencyAccessResponse
from sampatti.models.user import UserRead
from sampatti.principal import RequestOrigin, RequestPrincipal
from sampatti.services.accounts import AccountService
from sampatti.services.credentials import CredentialCodec
from sampatti.services.nominee_registry import NomineeRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

# Code-check failures all look the same to the caller
_EMERGENCY_CODE_FAILURES = {
    AccessErrorKind.NOMINEE_NOT_FOUND,
    AccessErrorKind.NO_ACCESS_CODE_SET,
    AccessErrorKind.INVALID_ACCESS_CODE,
}


@router.post("/register", response_model=UserRead, status_code=201)
async def register(
    body: RegisterRequest,
    db: Session = Depends(get_session),
    accounts: AccountService = Depends(get_account_service),
) -> UserRead:
    try:
        user = accounts.register(
            db, body.name, body.email, body.password, phone_number=body.phone_number
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return UserRead.model_validate(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    db: Session = Depends(get_session),
    accounts: AccountService = Depends(get_account_service),
    codec: CredentialCodec = Depends(get_credential_codec),
) -> TokenResponse:
    """Verify email + password and issue an owner token pair."""
    user = accounts.authenticate(db, body.email, body.password)
    return TokenResponse(
        access_token=codec.issue_owner_access_token(user.id),
        refresh_token=codec.issue_owner_refresh_token(user.id),
        expires_in=int(codec.access_ttl.total_seconds()),
        user=UserRead.model_validate(user),
    )


@router.post("/refresh", response_model=AccessTokenResponse)
async def refresh(
    body: RefreshRequest,
    db: Session = Depends(get_session),
    accounts: AccountService = Depends(get_account_service),
    codec: CredentialCodec = Depends(get_credential_codec),
) -> AccessTokenResponse:
    """Exchange an owner refresh token for a fresh access token."""
    access = codec.refresh_owner_access_token(
        body.refresh_token, lambda user_id: accounts.exists(db, user_id)
    )
    return AccessTokenResponse(
        access_token=access,
        expires_in=int(codec.access_ttl.total_seconds()),
    )


@router.post("/emergency-access", response_model=EmergencyAccessResponse)
async def emergency_access(
    body: EmergencyAccessRequest,
    db: Session = Depends(get_session),
    registry: NomineeRegistry = Depends(get_nominee_registry),
    codec: CredentialCodec = Depends(get_credential_codec),
    origin: RequestOrigin = Depends(get_request_origin),
) -> EmergencyAccessResponse:
    """Exchange a nominee's emergency access code for a nominee token.

    Public endpoint: nominees authenticate with the code, not a JWT. A
    Pending nominee becomes Active on first successful use.
    """
    try:
        nominee = registry.verify_access_code(
            db, body.email, body.user_id, body.access_code, origin
        )
    except AccessError as exc:
        if exc.kind in _EMERGENCY_CODE_FAILURES:
            raise AccessError(AccessErrorKind.INVALID_LOGIN)
        if exc.kind == AccessErrorKind.NOMINEE_REVOKED:
            raise AccessError(AccessErrorKind.FORBIDDEN, "Nominee access is not active")
        raise

    token = codec.issue_nominee_token(nominee.id, nominee.user_id, nominee.access_level)
    return EmergencyAccessResponse(
        access_token=token,
        expires_in=int(codec.nominee_ttl.total_seconds()),
        access_level=nominee.access_level,
        nominee_id=nominee.id,
        user_id=nominee.user_id,
    )


@router.get("/whoami", response_model=PrincipalRead)
async def whoami(caller: RequestPrincipal = Depends(get_request_principal)) -> PrincipalRead:
    """Return the principal bound to the presented credential."""
    return PrincipalRead(
        kind=caller.kind.value,
        subject_id=caller.principal.subject_id,
        acting_user_id=caller.acting_user_id,
        is_nominee=caller.is_nominee,
        access_level=caller.access_tier,
    )
