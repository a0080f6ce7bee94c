"""User router: owner profile and password management."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from sampatti.db import get_session
from sampatti.dependencies import get_account_service, require_full_access, require_owner
from sampatti.models.auth import ChangePasswordRequest
from sampatti.models.user import UserRead, UserUpdate
from sampatti.principal import RequestPrincipal
from sampatti.services.accounts import AccountService

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/profile", response_model=UserRead)
async def get_profile(
    caller: RequestPrincipal = Depends(require_full_access),
    db: Session = Depends(get_session),
    accounts: AccountService = Depends(get_account_service),
) -> UserRead:
    """Owner profile. Nominees need the Full tier to see it."""
    return UserRead.model_validate(accounts.get(db, caller.acting_user_id))


@router.put("/profile", response_model=UserRead)
async def update_profile(
    body: UserUpdate,
    caller: RequestPrincipal = Depends(require_owner),
    db: Session = Depends(get_session),
    accounts: AccountService = Depends(get_account_service),
) -> UserRead:
    return UserRead.model_validate(accounts.update_profile(db, caller.acting_user_id, body))


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    caller: RequestPrincipal = Depends(require_owner),
    db: Session = Depends(get_session),
    accounts: AccountService = Depends(get_account_service),
) -> dict:
    try:
        accounts.change_password(db, caller.acting_user_id, body.old_password, body.new_password)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return {"detail": "Password changed"}
