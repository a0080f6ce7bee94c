"""Typed error kinds for the authorization and emergency-access subsystem.

Every domain failure is raised as a single ``AccessError`` carrying an
``AccessErrorKind``. Callers branch on ``exc.kind``; the HTTP layer maps
each kind to exactly one status code via ``http_status_for``.
"""

from __future__ import annotations

from enum import Enum


class AccessErrorKind(str, Enum):
    NO_CREDENTIAL = "no_credential"
    MALFORMED_CREDENTIAL = "malformed_credential"
    INVALID_CREDENTIAL = "invalid_credential"
    EXPIRED_CREDENTIAL = "expired_credential"
    FORBIDDEN = "forbidden"
    NOMINEE_NOT_FOUND = "nominee_not_found"
    NOMINEE_EXISTS = "nominee_exists"
    NOMINEE_REVOKED = "nominee_revoked"
    UNAUTHORIZED = "unauthorized"
    NO_ACCESS_CODE_SET = "no_access_code_set"
    INVALID_ACCESS_CODE = "invalid_access_code"
    USER_NOT_FOUND = "user_not_found"
    USER_EXISTS = "user_exists"
    INVALID_LOGIN = "invalid_login"
    DOCUMENT_NOT_FOUND = "document_not_found"


_DEFAULT_DETAIL: dict[AccessErrorKind, str] = {
    AccessErrorKind.NO_CREDENTIAL: "Authorization header not found",
    AccessErrorKind.MALFORMED_CREDENTIAL: "Authorization header format must be Bearer {token}",
    AccessErrorKind.INVALID_CREDENTIAL: "Invalid token",
    AccessErrorKind.EXPIRED_CREDENTIAL: "Token has expired",
    AccessErrorKind.FORBIDDEN: "Insufficient access",
    AccessErrorKind.NOMINEE_NOT_FOUND: "Nominee not found",
    AccessErrorKind.NOMINEE_EXISTS: "Nominee already exists with this email",
    AccessErrorKind.NOMINEE_REVOKED: "Nominee access has been revoked",
    AccessErrorKind.UNAUTHORIZED: "Not permitted for this nominee",
    AccessErrorKind.NO_ACCESS_CODE_SET: "No emergency access code has been set",
    AccessErrorKind.INVALID_ACCESS_CODE: "Invalid access code",
    AccessErrorKind.USER_NOT_FOUND: "User not found",
    AccessErrorKind.USER_EXISTS: "User already exists",
    AccessErrorKind.INVALID_LOGIN: "Invalid credentials",
    AccessErrorKind.DOCUMENT_NOT_FOUND: "Document not found",
}

_HTTP_STATUS: dict[AccessErrorKind, int] = {
    AccessErrorKind.NO_CREDENTIAL: 401,
    AccessErrorKind.MALFORMED_CREDENTIAL: 401,
    AccessErrorKind.INVALID_CREDENTIAL: 401,
    AccessErrorKind.EXPIRED_CREDENTIAL: 401,
    AccessErrorKind.INVALID_LOGIN: 401,
    AccessErrorKind.NO_ACCESS_CODE_SET: 401,
    AccessErrorKind.INVALID_ACCESS_CODE: 401,
    AccessErrorKind.FORBIDDEN: 403,
    AccessErrorKind.UNAUTHORIZED: 403,
    AccessErrorKind.NOMINEE_NOT_FOUND: 404,
    AccessErrorKind.USER_NOT_FOUND: 404,
    AccessErrorKind.DOCUMENT_NOT_FOUND: 404,
    AccessErrorKind.NOMINEE_EXISTS: 409,
    AccessErrorKind.NOMINEE_REVOKED: 409,
    AccessErrorKind.USER_EXISTS: 409,
}


class AccessError(Exception):
    """A recoverable, caller-facing failure of the access subsystem."""

    def __init__(self, kind: AccessErrorKind, detail: str | None = None) -> None:
        self.kind = kind
        self.detail = detail or _DEFAULT_DETAIL[kind]
        super().__init__(self.detail)

    @property
    def status_code(self) -> int:
        return http_status_for(self.kind)

    def __repr__(self) -> str:
        return f"AccessError({self.kind.value!r}, {self.detail!r})"


def http_status_for(kind: AccessErrorKind) -> int:
    return _HTTP_STATUS[kind]
