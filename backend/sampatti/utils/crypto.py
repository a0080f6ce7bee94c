"""Low-level secret handling primitives for Sampatti.

Pure building blocks with no domain knowledge: the slow salted one-way
verifier shared by passwords and emergency access codes, and the random
code source.
"""

from __future__ import annotations

import secrets
import string
from functools import lru_cache

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

# Uppercase + digits: codes get read aloud and typed by hand.
ACCESS_CODE_ALPHABET = string.ascii_uppercase + string.digits


class SecretVerifier:
    """Argon2id hash/verify for passwords and emergency access codes.

    Parameters default to OWASP recommendations for Argon2id:
    time_cost=3, memory_cost=64 MiB, parallelism=1. Each hash embeds its own
    random salt and parameters (PHC string format).
    """

    def __init__(
        self,
        time_cost: int = 3,
        memory_cost: int = 65536,
        parallelism: int = 1,
    ) -> None:
        self._params = (time_cost, memory_cost, parallelism)
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )

    def hash(self, secret: str) -> str:
        if not secret:
            raise ValueError("secret cannot be empty")
        return self._hasher.hash(secret)

    def verify(self, secret: str, secret_hash: str) -> bool:
        """Return True iff *secret* matches *secret_hash*. Never raises on mismatch."""
        if not secret_hash:
            return False
        try:
            return self._hasher.verify(secret_hash, secret)
        except (VerifyMismatchError, VerificationError, InvalidHashError):
            return False

    def verify_dummy(self, secret: str) -> bool:
        """Spend one full verify on a throwaway hash. Always returns False.

        Used where no real hash exists, so the caller's response time does
        not reveal that.
        """
        self.verify(secret or "-", _dummy_hash(*self._params))
        return False


@lru_cache(maxsize=8)
def _dummy_hash(time_cost: int, memory_cost: int, parallelism: int) -> str:
    hasher = PasswordHasher(
        time_cost=time_cost, memory_cost=memory_cost, parallelism=parallelism
    )
    return hasher.hash(secrets.token_urlsafe(16))


def generate_access_code(length: int = 8) -> str:
    """Return a cryptographically random printable code of *length* characters."""
    if length <= 0:
        raise ValueError(f"access code length must be > 0, got {length}")
    return "".join(secrets.choice(ACCESS_CODE_ALPHABET) for _ in range(length))

