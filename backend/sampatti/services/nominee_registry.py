"""Nominee registry: nominee records, their status machine, and access codes.

Status machine::

    Pending ──(verified code | owner activate)──> Active
    Pending/Active ──(owner revoke)──> Revoked   (terminal)

The emergency access code is generated in cleartext exactly once per
invitation, handed back to the owner, and only its Argon2id hash is stored.
Re-inviting overwrites the stored hash, so at most one code is valid at a
time (last write wins). A valid code is not consumed by use: it keeps
working until rotated or the nominee is revoked.

Audit entries, last-access stamps and the Pending -> Active transition that
follows a verified code are best-effort. Their failures are routed to the
advisory reporter and never fail the primary operation. Failures of primary
writes (create, update, delete, code rotation, owner-driven status changes)
propagate.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from sampatti.errors import AccessError, AccessErrorKind
from sampatti.models.nominee import (
    Nominee,
    NomineeAccessLog,
    NomineeAccessLogRead,
    NomineeCreate,
    NomineeStatus,
    NomineeUpdate,
)
from sampatti.models.user import User
from sampatti.principal import RequestOrigin
from sampatti.services.advisory import AdvisoryReporter
from sampatti.services.nominee_store import NomineeStore
from sampatti.utils.crypto import SecretVerifier, generate_access_code

logger = logging.getLogger(__name__)


class AuditAction:
    CREATED = "Nominee created"
    UPDATED = "Nominee updated"
    INVITE_GENERATED = "Emergency access code generated"
    CODE_VERIFIED = "Verified emergency access code"
    ACTIVATED = "Nominee activated"
    REVOKED = "Nominee revoked"
    DELETED = "Nominee deleted"
    DATA_VIEWED = "Viewed owner data"


class NomineeRegistry:
    def __init__(
        self,
        verifier: SecretVerifier,
        advisory: AdvisoryReporter | None = None,
        code_source: Callable[[], str] | None = None,
        code_length: int = 8,
        store_factory: Callable[[Session], NomineeStore] = NomineeStore,
    ) -> None:
        self._verifier = verifier
        self._advisory = advisory or AdvisoryReporter()
        self._code_source = code_source or (lambda: generate_access_code(code_length))
        self._store_factory = store_factory

    # --- owner-side reads ---

    def get(self, db: Session, nominee_id: str, owner_id: str) -> Nominee:
        return self._owned(self._store_factory(db), nominee_id, owner_id)

    def list_for_owner(self, db: Session, owner_id: str) -> list[Nominee]:
        return self._store_factory(db).list_by_owner(owner_id)

    def access_logs_for_owner(self, db: Session, owner_id: str) -> list[NomineeAccessLogRead]:
        """Access log entries of every nominee the owner currently has, newest first."""
        store = self._store_factory(db)
        names = {n.id: n.name for n in store.list_by_owner(owner_id)}
        return [
            NomineeAccessLogRead(
                id=entry.id,
                nominee_id=entry.nominee_id,
                nominee_name=names.get(entry.nominee_id, "Unknown"),
                date=entry.date,
                action=entry.action,
                ip_address=entry.ip_address,
                device_info=entry.device_info,
            )
            for entry in store.access_logs_for(list(names))
        ]

    def owners_for_nominee_email(self, db: Session, email: str) -> list[User]:
        """Owners who registered *email* as one of their nominees."""
        store = self._store_factory(db)
        owners: list[User] = []
        for nominee in store.list_by_email(email):
            user = store.get_user(nominee.user_id)
            if user is not None:
                owners.append(user)
        return owners

    # --- owner-side mutations ---

    def create(
        self,
        db: Session,
        owner_id: str,
        data: NomineeCreate,
        origin: RequestOrigin = RequestOrigin(),
    ) -> Nominee:
        """Register a nominee as Pending with no access code.

        The code is issued separately by ``generate_invite`` so that first
        issuance and rotation share one code path.
        """
        store = self._store_factory(db)
        if store.get_by_email_and_owner(data.email, owner_id) is not None:
            raise AccessError(AccessErrorKind.NOMINEE_EXISTS)

        nominee = Nominee(
            user_id=owner_id,
            name=data.name,
            email=data.email,
            phone_number=data.phone_number,
            relationship=data.relationship,
            access_level=data.access_level,
            status=NomineeStatus.PENDING,
            emergency_access_code="",
        )
        try:
            store.create(nominee)
        except IntegrityError:
            # Lost a race against a concurrent create for the same email
            store.rollback()
            raise AccessError(AccessErrorKind.NOMINEE_EXISTS)

        logger.info("Nominee %s created for owner %s (%s)", nominee.id, owner_id, nominee.access_level.value)
        self._audit(store, nominee.id, AuditAction.CREATED, origin)
        return nominee

    def update(
        self,
        db: Session,
        nominee_id: str,
        owner_id: str,
        changes: NomineeUpdate,
        origin: RequestOrigin = RequestOrigin(),
    ) -> Nominee:
        """Edit contact details or access level. Email, status and code are
        never changed here."""
        store = self._store_factory(db)
        nominee = self._owned(store, nominee_id, owner_id)
        for key, value in changes.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(nominee, key, value)
        store.save(nominee)
        self._audit(store, nominee.id, AuditAction.UPDATED, origin)
        return nominee

    def generate_invite(
        self,
        db: Session,
        nominee_id: str,
        owner_id: str,
        origin: RequestOrigin = RequestOrigin(),
    ) -> str:
        """Rotate the nominee's emergency access code and return the cleartext.

        The returned string is the only copy that will ever exist; any
        previously issued code stops working.
        """
        store = self._store_factory(db)
        nominee = self._owned(store, nominee_id, owner_id)
        if nominee.status == NomineeStatus.REVOKED:
            raise AccessError(AccessErrorKind.NOMINEE_REVOKED)

        code = self._code_source()
        store.update_access_code_hash(nominee.id, self._verifier.hash(code))

        logger.info("Emergency access code rotated for nominee %s", nominee.id)
        self._audit(store, nominee.id, AuditAction.INVITE_GENERATED, origin)
        return code

    def send_invitation(
        self,
        db: Session,
        nominee_id: str,
        owner_id: str,
        origin: RequestOrigin = RequestOrigin(),
    ) -> str:
        """Issue a fresh code and activate the nominee right away."""
        code = self.generate_invite(db, nominee_id, owner_id, origin)
        self.activate(db, nominee_id, owner_id, origin)
        return code

    def activate(
        self,
        db: Session,
        nominee_id: str,
        owner_id: str,
        origin: RequestOrigin = RequestOrigin(),
    ) -> Nominee:
        return self._transition(
            db, nominee_id, owner_id, NomineeStatus.ACTIVE, AuditAction.ACTIVATED, origin
        )

    def revoke(
        self,
        db: Session,
        nominee_id: str,
        owner_id: str,
        origin: RequestOrigin = RequestOrigin(),
    ) -> Nominee:
        return self._transition(
            db, nominee_id, owner_id, NomineeStatus.REVOKED, AuditAction.REVOKED, origin
        )

    def delete(
        self,
        db: Session,
        nominee_id: str,
        owner_id: str,
        origin: RequestOrigin = RequestOrigin(),
    ) -> None:
        """Remove the nominee. Its access log entries are retained for audit."""
        store = self._store_factory(db)
        nominee = self._owned(store, nominee_id, owner_id)
        store.delete(nominee.id)
        logger.info("Nominee %s deleted by owner %s", nominee_id, owner_id)
        self._audit(store, nominee_id, AuditAction.DELETED, origin)

    # --- nominee-side ---

    def verify_access_code(
        self,
        db: Session,
        email: str,
        owner_id: str,
        candidate_code: str,
        origin: RequestOrigin = RequestOrigin(),
    ) -> Nominee:
        """Check a nominee's emergency access code for the given owner.

        On success the attempt is logged, the last-access time is stamped and
        a Pending nominee becomes Active; all three are best-effort. The
        returned record carries the post-transition status. A failed check
        mutates nothing.
        """
        store = self._store_factory(db)
        nominee = store.get_by_email_and_owner(email, owner_id)
        # Every failure path pays for one Argon2 verify
        if nominee is None:
            self._verifier.verify_dummy(candidate_code)
            raise AccessError(AccessErrorKind.NOMINEE_NOT_FOUND)
        if not nominee.emergency_access_code:
            self._verifier.verify_dummy(candidate_code)
            raise AccessError(AccessErrorKind.NO_ACCESS_CODE_SET)
        if not self._verifier.verify(candidate_code, nominee.emergency_access_code):
            logger.info("Invalid emergency access code for nominee %s", nominee.id)
            raise AccessError(AccessErrorKind.INVALID_ACCESS_CODE)
        if nominee.status == NomineeStatus.REVOKED:
            raise AccessError(AccessErrorKind.NOMINEE_REVOKED)

        nominee_id = nominee.id
        self._audit(store, nominee_id, AuditAction.CODE_VERIFIED, origin)
        self._best_effort(
            store,
            "last_access_update",
            lambda: store.touch_last_access(nominee_id),
            nominee_id=nominee_id,
        )

        if nominee.status == NomineeStatus.PENDING:
            activated = self._best_effort(
                store,
                "auto_activation",
                lambda: store.update_status(nominee_id, NomineeStatus.ACTIVE),
                nominee_id=nominee_id,
            )
            if activated:
                logger.info("Nominee %s activated by verified access code", nominee_id)

        return nominee

    def record_access(
        self,
        db: Session,
        nominee_id: str,
        action: str = AuditAction.DATA_VIEWED,
        origin: RequestOrigin = RequestOrigin(),
    ) -> None:
        """Best-effort audit entry for a data read made with a nominee credential."""
        self._audit(self._store_factory(db), nominee_id, action, origin)

    # --- internals ---

    def _owned(self, store: NomineeStore, nominee_id: str, owner_id: str) -> Nominee:
        nominee = store.get_by_id(nominee_id)
        if nominee is None:
            raise AccessError(AccessErrorKind.NOMINEE_NOT_FOUND)
        if nominee.user_id != owner_id:
            logger.warning(
                "Owner %s attempted to act on nominee %s owned by someone else",
                owner_id,
                nominee_id,
            )
            raise AccessError(AccessErrorKind.UNAUTHORIZED)
        return nominee

    def _transition(
        self,
        db: Session,
        nominee_id: str,
        owner_id: str,
        target: NomineeStatus,
        action: str,
        origin: RequestOrigin,
    ) -> Nominee:
        store = self._store_factory(db)
        nominee = self._owned(store, nominee_id, owner_id)
        if nominee.status == target:
            return nominee
        if nominee.status == NomineeStatus.REVOKED:
            raise AccessError(AccessErrorKind.NOMINEE_REVOKED)

        previous = nominee.status
        store.update_status(nominee.id, target)
        logger.info(
            "Nominee %s status %s -> %s by owner %s",
            nominee.id,
            previous.value,
            target.value,
            owner_id,
        )
        self._audit(store, nominee.id, action, origin)
        return nominee

    def _audit(
        self, store: NomineeStore, nominee_id: str, action: str, origin: RequestOrigin
    ) -> None:
        entry = NomineeAccessLog(
            nominee_id=nominee_id,
            action=action,
            ip_address=origin.ip_address,
            device_info=origin.device_info,
        )
        self._best_effort(
            store,
            "access_log",
            lambda: store.append_access_log(entry),
            nominee_id=nominee_id,
            action=action,
        )

    def _best_effort(
        self,
        store: NomineeStore,
        operation: str,
        write: Callable[[], None],
        **context: object,
    ) -> bool:
        try:
            write()
        except Exception as exc:
            store.rollback()
            self._advisory.report(operation, exc, **context)
            return False
        return True
