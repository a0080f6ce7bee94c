"""Persistence collaborator for nominee records and their access log.

Thin SQLModel wrapper exposing exactly the lookups and single-row writes the
registry needs. Every write commits immediately; failures propagate.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlmodel import Session, col, select

from sampatti.models.holding import DocumentNomineeAccess
from sampatti.models.nominee import Nominee, NomineeAccessLog, NomineeStatus
from sampatti.models.user import User


class NomineeStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    # --- reads ---

    def get_by_id(self, nominee_id: str) -> Nominee | None:
        return self.db.get(Nominee, nominee_id)

    def get_by_email_and_owner(self, email: str, owner_id: str) -> Nominee | None:
        return self.db.exec(
            select(Nominee).where(Nominee.email == email, Nominee.user_id == owner_id)
        ).first()

    def list_by_owner(self, owner_id: str) -> list[Nominee]:
        return list(
            self.db.exec(
                select(Nominee)
                .where(Nominee.user_id == owner_id)
                .order_by(Nominee.created_at)  # type: ignore[arg-type]
            ).all()
        )

    def list_by_email(self, email: str) -> list[Nominee]:
        return list(self.db.exec(select(Nominee).where(Nominee.email == email)).all())

    def access_logs_for(self, nominee_ids: list[str]) -> list[NomineeAccessLog]:
        if not nominee_ids:
            return []
        return list(
            self.db.exec(
                select(NomineeAccessLog)
                .where(col(NomineeAccessLog.nominee_id).in_(nominee_ids))
                .order_by(col(NomineeAccessLog.date).desc())
            ).all()
        )

    def get_user(self, user_id: str) -> User | None:
        return self.db.get(User, user_id)

    # --- writes ---

    def create(self, nominee: Nominee) -> Nominee:
        self.db.add(nominee)
        self.db.commit()
        self.db.refresh(nominee)
        return nominee

    def save(self, nominee: Nominee) -> Nominee:
        nominee.updated_at = datetime.now(timezone.utc)
        self.db.add(nominee)
        self.db.commit()
        self.db.refresh(nominee)
        return nominee

    def update_status(self, nominee_id: str, status: NomineeStatus) -> None:
        nominee = self._require(nominee_id)
        nominee.status = status
        self.save(nominee)

    def update_access_code_hash(self, nominee_id: str, code_hash: str) -> None:
        nominee = self._require(nominee_id)
        nominee.emergency_access_code = code_hash
        self.save(nominee)

    def touch_last_access(self, nominee_id: str) -> None:
        nominee = self._require(nominee_id)
        nominee.last_access_date = datetime.now(timezone.utc)
        self.save(nominee)

    def delete(self, nominee_id: str) -> None:
        """Remove the nominee and its document grants. Access logs are kept."""
        grants = self.db.exec(
            select(DocumentNomineeAccess).where(
                DocumentNomineeAccess.nominee_id == nominee_id
            )
        ).all()
        for grant in grants:
            self.db.delete(grant)
        self.db.flush()
        nominee = self._require(nominee_id)
        self.db.delete(nominee)
        self.db.commit()

    def append_access_log(self, entry: NomineeAccessLog) -> None:
        self.db.add(entry)
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    def _require(self, nominee_id: str) -> Nominee:
        nominee = self.db.get(Nominee, nominee_id)
        if nominee is None:
            raise LookupError(f"nominee {nominee_id} vanished mid-operation")
        return nominee
