"""Tests for the credential codec: token issuance and validation."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from sampatti.errors import AccessError, AccessErrorKind
from sampatti.models.nominee import AccessTier
from sampatti.principal import NomineePrincipal, OwnerPrincipal
from sampatti.services.credentials import JWT_ALGORITHM, CredentialCodec


def _kind(exc_info) -> AccessErrorKind:
    return exc_info.value.kind


class TestIssueAndValidate:
    def test_owner_token_round_trip(self, codec):
        principal = codec.validate(codec.issue_owner_access_token("user-1"))
        assert principal == OwnerPrincipal(user_id="user-1")
        assert principal.is_nominee is False
        assert principal.acting_user_id == "user-1"

    def test_nominee_token_round_trip(self, codec):
        token = codec.issue_nominee_token("nom-1", "user-1", AccessTier.DOCUMENTS_ONLY)
        principal = codec.validate(token)
        assert isinstance(principal, NomineePrincipal)
        assert principal.subject_id == "nom-1"
        assert principal.acting_user_id == "user-1"
        assert principal.access_tier == AccessTier.DOCUMENTS_ONLY

    def test_nominee_token_claims(self, codec):
        token = codec.issue_nominee_token("nom-1", "user-1", AccessTier.FULL)
        claims = jwt.get_unverified_claims(token)
        assert claims["sub"] == "nom-1"
        assert claims["user_id"] == "user-1"
        assert claims["access_type"] == "nominee"
        assert claims["access_level"] == "Full"
        assert claims["exp"] - claims["iat"] == 24 * 3600


class TestValidationFailures:
    def test_foreign_secret_is_invalid(self, codec):
        forged = CredentialCodec("someone-elses-secret", "x").issue_owner_access_token("user-1")
        with pytest.raises(AccessError) as exc_info:
            codec.validate(forged)
        assert _kind(exc_info) == AccessErrorKind.INVALID_CREDENTIAL

    def test_expired_token(self, codec):
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        token = jwt.encode(
            {
                "sub": "user-1",
                "access_type": "owner",
                "iat": past - timedelta(minutes=15),
                "exp": past,
            },
            "test-jwt-secret-for-integration-tests-only",
            algorithm=JWT_ALGORITHM,
        )
        with pytest.raises(AccessError) as exc_info:
            codec.validate(token)
        assert _kind(exc_info) == AccessErrorKind.EXPIRED_CREDENTIAL

    def test_garbage_token_is_invalid(self, codec):
        with pytest.raises(AccessError) as exc_info:
            codec.validate("not.a.jwt")
        assert _kind(exc_info) == AccessErrorKind.INVALID_CREDENTIAL

    def test_refresh_token_is_not_an_access_token(self, codec):
        with pytest.raises(AccessError) as exc_info:
            codec.validate(codec.issue_owner_refresh_token("user-1"))
        assert _kind(exc_info) == AccessErrorKind.INVALID_CREDENTIAL

    @pytest.mark.parametrize(
        "claims",
        [
            {"sub": "user-1"},
            {"sub": "user-1", "access_type": "admin"},
            {"sub": "nom-1", "access_type": "nominee", "access_level": "Full"},
            {"sub": "nom-1", "access_type": "nominee", "user_id": "u", "access_level": "Everything"},
        ],
    )
    def test_unrecognised_claims_fail_closed(self, codec, claims):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {**claims, "iat": now, "exp": now + timedelta(minutes=5)},
            "test-jwt-secret-for-integration-tests-only",
            algorithm=JWT_ALGORITHM,
        )
        with pytest.raises(AccessError) as exc_info:
            codec.validate(token)
        assert _kind(exc_info) == AccessErrorKind.INVALID_CREDENTIAL


class TestRefresh:
    def test_refresh_issues_owner_access_token(self, codec):
        refresh = codec.issue_owner_refresh_token("user-1")
        access = codec.refresh_owner_access_token(refresh, lambda uid: uid == "user-1")
        assert codec.validate(access) == OwnerPrincipal(user_id="user-1")

    def test_refresh_with_nominee_token_fails(self, codec):
        token = codec.issue_nominee_token("nom-1", "user-1", AccessTier.FULL)
        with pytest.raises(AccessError) as exc_info:
            codec.refresh_owner_access_token(token, lambda uid: True)
        assert _kind(exc_info) == AccessErrorKind.INVALID_CREDENTIAL

    def test_refresh_with_access_token_fails(self, codec):
        token = codec.issue_owner_access_token("user-1")
        with pytest.raises(AccessError) as exc_info:
            codec.refresh_owner_access_token(token, lambda uid: True)
        assert _kind(exc_info) == AccessErrorKind.INVALID_CREDENTIAL

    def test_refresh_for_deleted_user_fails(self, codec):
        refresh = codec.issue_owner_refresh_token("gone")
        with pytest.raises(AccessError) as exc_info:
            codec.refresh_owner_access_token(refresh, lambda uid: False)
        assert _kind(exc_info) == AccessErrorKind.INVALID_CREDENTIAL
