"""Holdings router: policy-filtered reads of an owner's assets and documents."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlmodel import Session

from sampatti.db import get_session
from sampatti.dependencies import get_nominee_registry, get_request_principal, require_owner
from sampatti.models.holding import (
    AssetRead,
    DocumentNomineeAccessUpdate,
    DocumentRead,
    HoldingsResponse,
)
from sampatti.principal import RequestPrincipal
from sampatti.services.access_policy import set_document_nominee_access, visible_holdings
from sampatti.services.nominee_registry import NomineeRegistry

router = APIRouter(prefix="/api", tags=["holdings"])


@router.get("/holdings", response_model=HoldingsResponse)
async def get_holdings(
    caller: RequestPrincipal = Depends(get_request_principal),
    db: Session = Depends(get_session),
    registry: NomineeRegistry = Depends(get_nominee_registry),
) -> HoldingsResponse:
    """Assets and documents of the acting owner, as the caller's tier allows.

    Owners see everything. Nominee reads are written to the access log.
    """
    holdings = visible_holdings(db, caller.principal)
    if caller.is_nominee:
        registry.record_access(
            db,
            caller.principal.subject_id,
            f"Viewed owner data ({len(holdings.assets)} assets, "
            f"{len(holdings.documents)} documents)",
            caller.origin,
        )
    return HoldingsResponse(
        user_id=holdings.user_id,
        access_level=caller.access_tier,
        assets=[AssetRead.model_validate(a) for a in holdings.assets],
        documents=[DocumentRead.model_validate(d) for d in holdings.documents],
    )


@router.patch("/documents/{document_id}/nominee-access", response_model=DocumentRead)
async def update_document_nominee_access(
    document_id: str,
    body: DocumentNomineeAccessUpdate,
    caller: RequestPrincipal = Depends(require_owner),
    db: Session = Depends(get_session),
) -> DocumentRead:
    """Flag a document for nominees and set which nominees it is granted to."""
    document = set_document_nominee_access(
        db,
        caller.acting_user_id,
        document_id,
        body.accessible_to_nominees,
        body.nominee_ids,
    )
    return DocumentRead.model_validate(document)
