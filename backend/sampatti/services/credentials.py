"""Credential codec: issue and validate signed bearer tokens.

Owner access tokens and nominee tokens share the access secret and are told
apart by the ``access_type`` claim. Owner refresh tokens are signed with a
separate refresh secret, so a refresh token can never pass as an access
token and vice versa.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from sampatti.config import Settings
from sampatti.errors import AccessError, AccessErrorKind
from sampatti.models.nominee import AccessTier
from sampatti.principal import NomineePrincipal, OwnerPrincipal, Principal, PrincipalKind

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

_DECODE_OPTIONS = {
    "require_sub": True,
    "require_iat": True,
    "require_exp": True,
}


class CredentialCodec:
    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
        nominee_ttl: timedelta = timedelta(hours=24),
    ) -> None:
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.nominee_ttl = nominee_ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> CredentialCodec:
        return cls(
            access_secret=settings.jwt_secret,
            refresh_secret=settings.jwt_refresh_secret,
            access_ttl=timedelta(minutes=settings.jwt_access_token_expire_minutes),
            refresh_ttl=timedelta(days=settings.jwt_refresh_token_expire_days),
            nominee_ttl=timedelta(hours=settings.nominee_token_expire_hours),
        )

    # --- issuance ---

    def _encode(self, claims: dict, secret: str, ttl: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = {**claims, "iat": now, "exp": now + ttl}
        return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)

    def issue_owner_access_token(self, user_id: str) -> str:
        return self._encode(
            {"sub": user_id, "access_type": PrincipalKind.OWNER.value},
            self._access_secret,
            self.access_ttl,
        )

    def issue_owner_refresh_token(self, user_id: str) -> str:
        return self._encode(
            {"sub": user_id, "access_type": PrincipalKind.OWNER.value},
            self._refresh_secret,
            self.refresh_ttl,
        )

    def issue_nominee_token(
        self, nominee_id: str, on_behalf_of_user_id: str, access_tier: AccessTier
    ) -> str:
        return self._encode(
            {
                "sub": nominee_id,
                "user_id": on_behalf_of_user_id,
                "access_type": PrincipalKind.NOMINEE.value,
                "access_level": AccessTier(access_tier).value,
            },
            self._access_secret,
            self.nominee_ttl,
        )

    # --- validation ---

    def _decode(self, token: str, secret: str) -> dict:
        """Verify signature then expiry. Never reveals which check failed beyond
        invalid vs expired."""
        try:
            return jwt.decode(
                token, secret, algorithms=[JWT_ALGORITHM], options=_DECODE_OPTIONS
            )
        except ExpiredSignatureError:
            raise AccessError(AccessErrorKind.EXPIRED_CREDENTIAL)
        except JWTError as exc:
            logger.debug("Rejected bearer token: %s", type(exc).__name__)
            raise AccessError(AccessErrorKind.INVALID_CREDENTIAL)

    def validate(self, token: str) -> Principal:
        """Decode an access-secret token into its principal variant.

        Fails closed: an unknown or missing discriminator, or a nominee token
        lacking its owner or tier, is INVALID_CREDENTIAL, never owner access.
        """
        claims = self._decode(token, self._access_secret)
        return _principal_from_claims(claims)

    def refresh_owner_access_token(
        self, refresh_token: str, user_exists: Callable[[str], bool]
    ) -> str:
        """Exchange an unexpired owner refresh token for a new access token.

        *user_exists* is asked whether the subject still resolves to an
        account; a deleted user's refresh token is INVALID_CREDENTIAL.
        """
        claims = self._decode(refresh_token, self._refresh_secret)
        principal = _principal_from_claims(claims)
        if not isinstance(principal, OwnerPrincipal):
            raise AccessError(AccessErrorKind.INVALID_CREDENTIAL)
        if not user_exists(principal.user_id):
            logger.info("Refresh refused: user %s no longer exists", principal.user_id)
            raise AccessError(AccessErrorKind.INVALID_CREDENTIAL)
        return self.issue_owner_access_token(principal.user_id)


def _non_empty_str(value: object) -> str:
    if not isinstance(value, str) or not value:
        raise AccessError(AccessErrorKind.INVALID_CREDENTIAL)
    return value


def _principal_from_claims(claims: dict) -> Principal:
    subject = _non_empty_str(claims.get("sub"))
    access_type = claims.get("access_type")

    if access_type == PrincipalKind.OWNER.value:
        return OwnerPrincipal(user_id=subject)

    if access_type == PrincipalKind.NOMINEE.value:
        owner_id = _non_empty_str(claims.get("user_id"))
        try:
            tier = AccessTier(claims.get("access_level"))
        except ValueError:
            raise AccessError(AccessErrorKind.INVALID_CREDENTIAL)
        return NomineePrincipal(
            nominee_id=subject,
            on_behalf_of_user_id=owner_id,
            access_tier=tier,
        )

    raise AccessError(AccessErrorKind.INVALID_CREDENTIAL)
