"""Nominees router: owner management of recovery contacts.

Every endpoint here is owner-only: a nominee credential is rejected with
403 before any handler runs. Emergency access codes appear in the invite
responses exactly once and are never retrievable afterwards.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlmodel import Session

from sampatti.db import get_session
from sampatti.dependencies import get_account_service, get_nominee_registry, require_owner
from sampatti.models.nominee import (
    NomineeAccessLogRead,
    NomineeCreate,
    NomineeInviteResponse,
    NomineeRead,
    NomineeUpdate,
)
from sampatti.models.user import UserSummary
from sampatti.principal import RequestPrincipal
from sampatti.services.accounts import AccountService
from sampatti.services.nominee_registry import NomineeRegistry

router = APIRouter(prefix="/api/nominees", tags=["nominees"])


@router.get("", response_model=list[NomineeRead])
async def list_nominees(
    caller: RequestPrincipal = Depends(require_owner),
    db: Session = Depends(get_session),
    registry: NomineeRegistry = Depends(get_nominee_registry),
) -> list[NomineeRead]:
    nominees = registry.list_for_owner(db, caller.acting_user_id)
    return [NomineeRead.model_validate(n) for n in nominees]


@router.post("", response_model=NomineeRead, status_code=201)
async def create_nominee(
    body: NomineeCreate,
    caller: RequestPrincipal = Depends(require_owner),
    db: Session = Depends(get_session),
    registry: NomineeRegistry = Depends(get_nominee_registry),
) -> NomineeRead:
    """Register a nominee as Pending. Issue a code with /invite afterwards."""
    nominee = registry.create(db, caller.acting_user_id, body, caller.origin)
    return NomineeRead.model_validate(nominee)


# Declared before /{nominee_id} so the literal paths win
@router.get("/access-log", response_model=list[NomineeAccessLogRead])
async def get_access_log(
    caller: RequestPrincipal = Depends(require_owner),
    db: Session = Depends(get_session),
    registry: NomineeRegistry = Depends(get_nominee_registry),
) -> list[NomineeAccessLogRead]:
    return registry.access_logs_for_owner(db, caller.acting_user_id)


@router.get("/owners", response_model=list[UserSummary])
async def owners_naming_me(
    caller: RequestPrincipal = Depends(require_owner),
    db: Session = Depends(get_session),
    registry: NomineeRegistry = Depends(get_nominee_registry),
    accounts: AccountService = Depends(get_account_service),
) -> list[UserSummary]:
    """Owners who registered the caller's own email as a nominee."""
    email = accounts.get(db, caller.acting_user_id).email
    return [UserSummary.model_validate(u) for u in registry.owners_for_nominee_email(db, email)]


@router.get("/{nominee_id}", response_model=NomineeRead)
async def get_nominee(
    nominee_id: str,
    caller: RequestPrincipal = Depends(require_owner),
    db: Session = Depends(get_session),
    registry: NomineeRegistry = Depends(get_nominee_registry),
) -> NomineeRead:
    return NomineeRead.model_validate(registry.get(db, nominee_id, caller.acting_user_id))


@router.put("/{nominee_id}", response_model=NomineeRead)
async def update_nominee(
    nominee_id: str,
    body: NomineeUpdate,
    caller: RequestPrincipal = Depends(require_owner),
    db: Session = Depends(get_session),
    registry: NomineeRegistry = Depends(get_nominee_registry),
) -> NomineeRead:
    nominee = registry.update(db, nominee_id, caller.acting_user_id, body, caller.origin)
    return NomineeRead.model_validate(nominee)


@router.delete("/{nominee_id}")
async def delete_nominee(
    nominee_id: str,
    caller: RequestPrincipal = Depends(require_owner),
    db: Session = Depends(get_session),
    registry: NomineeRegistry = Depends(get_nominee_registry),
) -> dict:
    registry.delete(db, nominee_id, caller.acting_user_id, caller.origin)
    return {"detail": "Nominee deleted"}


@router.post("/{nominee_id}/invite", response_model=NomineeInviteResponse)
async def invite_nominee(
    nominee_id: str,
    caller: RequestPrincipal = Depends(require_owner),
    db: Session = Depends(get_session),
    registry: NomineeRegistry = Depends(get_nominee_registry),
) -> NomineeInviteResponse:
    """Issue (or rotate) the emergency access code. Status is unchanged."""
    code = registry.generate_invite(db, nominee_id, caller.acting_user_id, caller.origin)
    nominee = registry.get(db, nominee_id, caller.acting_user_id)
    return NomineeInviteResponse(nominee=NomineeRead.model_validate(nominee), code=code)


@router.post("/{nominee_id}/send-invitation", response_model=NomineeInviteResponse)
async def send_invitation(
    nominee_id: str,
    caller: RequestPrincipal = Depends(require_owner),
    db: Session = Depends(get_session),
    registry: NomineeRegistry = Depends(get_nominee_registry),
) -> NomineeInviteResponse:
    """Issue a fresh code and mark the nominee Active immediately."""
    code = registry.send_invitation(db, nominee_id, caller.acting_user_id, caller.origin)
    nominee = registry.get(db, nominee_id, caller.acting_user_id)
    return NomineeInviteResponse(nominee=NomineeRead.model_validate(nominee), code=code)


@router.post("/{nominee_id}/activate", response_model=NomineeRead)
async def activate_nominee(
    nominee_id: str,
    caller: RequestPrincipal = Depends(require_owner),
    db: Session = Depends(get_session),
    registry: NomineeRegistry = Depends(get_nominee_registry),
) -> NomineeRead:
    nominee = registry.activate(db, nominee_id, caller.acting_user_id, caller.origin)
    return NomineeRead.model_validate(nominee)


@router.post("/{nominee_id}/revoke", response_model=NomineeRead)
async def revoke_nominee(
    nominee_id: str,
    caller: RequestPrincipal = Depends(require_owner),
    db: Session = Depends(get_session),
    registry: NomineeRegistry = Depends(get_nominee_registry),
) -> NomineeRead:
    nominee = registry.revoke(db, nominee_id, caller.acting_user_id, caller.origin)
    return NomineeRead.model_validate(nominee)
