"""Principal variants decoded from a validated bearer credential.

A principal is either the account owner acting for themselves or a nominee
acting on an owner's behalf. Claims are decoded once, at validation time,
into one of these frozen dataclasses; nothing downstream inspects raw
claim dictionaries.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from sampatti.models.nominee import AccessTier


class PrincipalKind(str, Enum):
    OWNER = "owner"
    NOMINEE = "nominee"


@dataclass(frozen=True, slots=True)
class OwnerPrincipal:
    user_id: str

    kind = PrincipalKind.OWNER

    @property
    def subject_id(self) -> str:
        return self.user_id

    @property
    def acting_user_id(self) -> str:
        return self.user_id

    @property
    def is_nominee(self) -> bool:
        return False

    @property
    def access_tier(self) -> AccessTier | None:
        return None


@dataclass(frozen=True, slots=True)
class NomineePrincipal:
    nominee_id: str
    on_behalf_of_user_id: str
    access_tier: AccessTier

    kind = PrincipalKind.NOMINEE

    @property
    def subject_id(self) -> str:
        return self.nominee_id

    @property
    def acting_user_id(self) -> str:
        return self.on_behalf_of_user_id

    @property
    def is_nominee(self) -> bool:
        return True


Principal = Union[OwnerPrincipal, NomineePrincipal]


@dataclass(frozen=True, slots=True)
class RequestOrigin:
    """Caller metadata recorded in nominee access logs."""

    ip_address: str | None = None
    device_info: str | None = None


@dataclass(frozen=True, slots=True)
class RequestPrincipal:
    """The immutable per-request identity bound by the authorization gateway.

    Handlers receive this explicitly through a FastAPI dependency.
    """

    principal: Principal
    origin: RequestOrigin = RequestOrigin()

    @property
    def kind(self) -> PrincipalKind:
        return self.principal.kind

    @property
    def acting_user_id(self) -> str:
        return self.principal.acting_user_id

    @property
    def is_nominee(self) -> bool:
        return self.principal.is_nominee

    @property
    def access_tier(self) -> AccessTier | None:
        return self.principal.access_tier
