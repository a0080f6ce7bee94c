"""Owner accounts: registration and password handling."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlmodel import Session, select

from sampatti.errors import AccessError, AccessErrorKind
from sampatti.models.user import User, UserUpdate
from sampatti.utils.crypto import SecretVerifier

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(self, verifier: SecretVerifier, min_password_length: int = 8) -> None:
        self._verifier = verifier
        self._min_password_length = min_password_length

    def _check_password(self, password: str) -> None:
        if len(password) < self._min_password_length:
            raise ValueError(
                f"Password must be at least {self._min_password_length} characters"
            )

    def register(
        self, db: Session, name: str, email: str, password: str, phone_number: str = ""
    ) -> User:
        if db.exec(select(User).where(User.email == email)).first() is not None:
            raise AccessError(AccessErrorKind.USER_EXISTS)
        self._check_password(password)

        user = User(
            name=name,
            email=email,
            phone_number=phone_number,
            password_hash=self._verifier.hash(password),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("Registered user %s", user.id)
        return user

    def authenticate(self, db: Session, email: str, password: str) -> User:
        """Return the user for a correct email/password pair and stamp last_login.

        Unknown email and wrong password are indistinguishable to the caller.
        """
        user = db.exec(select(User).where(User.email == email)).first()
        if user is None or not self._verifier.verify(password, user.password_hash):
            raise AccessError(AccessErrorKind.INVALID_LOGIN)

        user.last_login = datetime.now(timezone.utc)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    def get(self, db: Session, user_id: str) -> User:
        user = db.get(User, user_id)
        if user is None:
            raise AccessError(AccessErrorKind.USER_NOT_FOUND)
        return user

    def exists(self, db: Session, user_id: str) -> bool:
        return db.get(User, user_id) is not None

    def update_profile(self, db: Session, user_id: str, changes: UserUpdate) -> User:
        user = self.get(db, user_id)
        for key, value in changes.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(user, key, value)
        user.updated_at = datetime.now(timezone.utc)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    def change_password(
        self, db: Session, user_id: str, old_password: str, new_password: str
    ) -> None:
        user = self.get(db, user_id)
        if not self._verifier.verify(old_password, user.password_hash):
            raise AccessError(AccessErrorKind.INVALID_LOGIN)
        self._check_password(new_password)

        user.password_hash = self._verifier.hash(new_password)
        user.updated_at = datetime.now(timezone.utc)
        db.add(user)
        db.commit()
        logger.info("Password changed for user %s", user_id)
