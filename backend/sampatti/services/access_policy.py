"""Access policy: which of an owner's holdings a principal may read.

The tier table below is the whole policy for nominee reads:

=============  ======  ==========================================
Tier           Assets  Documents
=============  ======  ==========================================
Full           yes     all of the owner's documents
Limited        yes     none
DocumentsOnly  no      flagged accessible AND granted to the nominee
=============  ======  ==========================================

Owner principals never consult it; they always see everything they own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from sqlmodel import Session, col, select

from sampatti.errors import AccessError, AccessErrorKind
from sampatti.models.holding import Asset, Document, DocumentNomineeAccess
from sampatti.models.nominee import AccessTier, Nominee
from sampatti.principal import NomineePrincipal, Principal

logger = logging.getLogger(__name__)


class DocumentScope(str, Enum):
    ALL = "all"
    NOMINEE_GRANTED_ONLY = "nominee_granted_only"
    NONE = "none"


@dataclass(frozen=True)
class AccessPolicy:
    can_see_assets: bool
    can_see_documents: bool
    document_scope: DocumentScope


_TIER_POLICIES: dict[AccessTier, AccessPolicy] = {
    AccessTier.FULL: AccessPolicy(True, True, DocumentScope.ALL),
    AccessTier.LIMITED: AccessPolicy(True, False, DocumentScope.NONE),
    AccessTier.DOCUMENTS_ONLY: AccessPolicy(False, True, DocumentScope.NOMINEE_GRANTED_ONLY),
}

OWNER_POLICY = AccessPolicy(True, True, DocumentScope.ALL)


def policy_for_tier(tier: AccessTier) -> AccessPolicy:
    return _TIER_POLICIES[AccessTier(tier)]


def policy_for(principal: Principal) -> AccessPolicy:
    if isinstance(principal, NomineePrincipal):
        return policy_for_tier(principal.access_tier)
    return OWNER_POLICY


@dataclass(frozen=True)
class VisibleHoldings:
    user_id: str
    policy: AccessPolicy
    assets: list[Asset]
    documents: list[Document]


def visible_holdings(db: Session, principal: Principal) -> VisibleHoldings:
    """Load the acting owner's assets and documents, filtered for *principal*."""
    owner_id = principal.acting_user_id
    policy = policy_for(principal)

    assets: list[Asset] = []
    if policy.can_see_assets:
        assets = list(
            db.exec(
                select(Asset)
                .where(Asset.user_id == owner_id)
                .order_by(col(Asset.last_updated).desc())
            ).all()
        )

    documents: list[Document] = []
    if policy.can_see_documents:
        statement = select(Document).where(Document.user_id == owner_id)
        if policy.document_scope == DocumentScope.NOMINEE_GRANTED_ONLY:
            statement = (
                statement.join(
                    DocumentNomineeAccess,
                    col(DocumentNomineeAccess.document_id) == col(Document.id),
                )
                .where(DocumentNomineeAccess.nominee_id == principal.subject_id)
                .where(Document.accessible_to_nominees == True)  # noqa: E712
            )
        documents = list(
            db.exec(statement.order_by(col(Document.upload_date).desc())).all()
        )

    return VisibleHoldings(
        user_id=owner_id,
        policy=policy,
        assets=assets,
        documents=documents,
    )


def set_document_nominee_access(
    db: Session,
    owner_id: str,
    document_id: str,
    accessible_to_nominees: bool,
    nominee_ids: list[str],
) -> Document:
    """Set a document's nominee flag and replace its grant list.

    Grants may only name the owner's own nominees; anything else is
    UNAUTHORIZED and nothing is written.
    """
    document = db.get(Document, document_id)
    if document is None or document.user_id != owner_id:
        raise AccessError(AccessErrorKind.DOCUMENT_NOT_FOUND)

    wanted = set(nominee_ids)
    if wanted:
        owned = set(
            db.exec(
                select(Nominee.id).where(
                    Nominee.user_id == owner_id, col(Nominee.id).in_(wanted)
                )
            ).all()
        )
        if owned != wanted:
            raise AccessError(AccessErrorKind.UNAUTHORIZED)

    existing = db.exec(
        select(DocumentNomineeAccess).where(DocumentNomineeAccess.document_id == document_id)
    ).all()
    for grant in existing:
        if grant.nominee_id not in wanted:
            db.delete(grant)
    already = {g.nominee_id for g in existing}
    for nominee_id in sorted(wanted - already):
        db.add(DocumentNomineeAccess(document_id=document_id, nominee_id=nominee_id))

    document.accessible_to_nominees = accessible_to_nominees
    db.add(document)
    db.commit()
    db.refresh(document)
    logger.info(
        "Document %s nominee access set to %s with %d grant(s)",
        document_id,
        accessible_to_nominees,
        len(wanted),
    )
    return document
