"""FastAPI dependency injection: the authorization gateway and service wiring.

Every protected route depends on ``get_request_principal`` (or one of the
guards built on it). The gateway extracts the bearer token, validates it
with the credential codec, and hands the handler an immutable
``RequestPrincipal``. A request that fails here never reaches its handler.
"""

from __future__ import annotations

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from sampatti.config import get_settings
from sampatti.errors import AccessError, AccessErrorKind
from sampatti.models.nominee import AccessTier
from sampatti.principal import RequestOrigin, RequestPrincipal
from sampatti.services.accounts import AccountService
from sampatti.services.advisory import AdvisoryReporter
from sampatti.services.credentials import CredentialCodec
from sampatti.services.nominee_registry import NomineeRegistry
from sampatti.utils.crypto import SecretVerifier

_default_advisory = AdvisoryReporter()

# auto_error=False so a missing and a malformed header map to distinct error kinds
_bearer_scheme = HTTPBearer(auto_error=False)


def extract_bearer_token(header: str | None) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` header value."""
    if not header:
        raise AccessError(AccessErrorKind.NO_CREDENTIAL)
    parts = header.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        raise AccessError(AccessErrorKind.MALFORMED_CREDENTIAL)
    return parts[1]


# --- service wiring ---


def get_credential_codec() -> CredentialCodec:
    return CredentialCodec.from_settings(get_settings())


def get_secret_verifier() -> SecretVerifier:
    settings = get_settings()
    return SecretVerifier(
        time_cost=settings.argon2_time_cost,
        memory_cost=settings.argon2_memory_cost,
        parallelism=settings.argon2_parallelism,
    )


def get_advisory_reporter(request: Request) -> AdvisoryReporter:
    """Inject the advisory reporter installed at startup, or the logging default."""
    return getattr(request.app.state, "advisory_reporter", None) or _default_advisory


def get_nominee_registry(
    verifier: SecretVerifier = Depends(get_secret_verifier),
    advisory: AdvisoryReporter = Depends(get_advisory_reporter),
) -> NomineeRegistry:
    return NomineeRegistry(
        verifier=verifier,
        advisory=advisory,
        code_length=get_settings().emergency_code_length,
    )


def get_account_service(
    verifier: SecretVerifier = Depends(get_secret_verifier),
) -> AccountService:
    return AccountService(verifier, min_password_length=get_settings().min_password_length)


# --- gateway ---


def get_request_origin(request: Request) -> RequestOrigin:
    return RequestOrigin(
        ip_address=request.client.host if request.client else None,
        device_info=request.headers.get("user-agent"),
    )


def get_bearer_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> str:
    """Return the bearer token, or raise NO_CREDENTIAL / MALFORMED_CREDENTIAL."""
    if credentials is None:
        # HTTPBearer rejected the header; work out whether it was absent or bad
        extract_bearer_token(request.headers.get("authorization"))
        raise AccessError(AccessErrorKind.MALFORMED_CREDENTIAL)
    if " " in credentials.credentials:
        raise AccessError(AccessErrorKind.MALFORMED_CREDENTIAL)
    return credentials.credentials


def get_request_principal(
    token: str = Depends(get_bearer_token),
    codec: CredentialCodec = Depends(get_credential_codec),
    origin: RequestOrigin = Depends(get_request_origin),
) -> RequestPrincipal:
    """Validate the bearer credential and bind the caller's principal.

    Raises AccessError (401) for a missing, malformed, invalid or expired
    credential.
    """
    principal = codec.validate(token)
    return RequestPrincipal(principal=principal, origin=origin)


def require_owner(
    caller: RequestPrincipal = Depends(get_request_principal),
) -> RequestPrincipal:
    """Guard: account-mutating routes that a nominee credential must never reach."""
    if caller.is_nominee:
        raise AccessError(AccessErrorKind.FORBIDDEN, "Requires owner access")
    return caller


def require_full_access(
    caller: RequestPrincipal = Depends(get_request_principal),
) -> RequestPrincipal:
    """Guard: owners pass; nominees pass only with the Full tier."""
    if caller.is_nominee and caller.access_tier != AccessTier.FULL:
        raise AccessError(AccessErrorKind.FORBIDDEN, "Requires full access")
    return caller
