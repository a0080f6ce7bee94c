from __future__ import annotations

import secrets
import warnings
from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    domain: str = "localhost"
    db_url: str = "sqlite:///./sampatti.db"

    jwt_secret: str = ""  # Signs owner access tokens AND nominee tokens
    jwt_refresh_secret: str = ""  # Signs owner refresh tokens only
    allow_insecure_jwt: bool = False

    @model_validator(mode="after")
    def _check_jwt_secrets(self) -> Settings:
        self.jwt_secret = self.jwt_secret.strip()
        self.jwt_refresh_secret = self.jwt_refresh_secret.strip()
        missing = [
            name
            for name, value in (
                ("JWT_SECRET", self.jwt_secret),
                ("JWT_REFRESH_SECRET", self.jwt_refresh_secret),
            )
            if not value
        ]
        if missing:
            if self.allow_insecure_jwt:
                warnings.warn(
                    f"{', '.join(missing)} empty but ALLOW_INSECURE_JWT is set. Using a "
                    "random per-process value; tokens will not survive a restart. This "
                    "is INSECURE and should only be used for development.",
                    stacklevel=2,
                )
                # Distinct random values keep refresh and access tokens apart
                if not self.jwt_secret:
                    self.jwt_secret = secrets.token_urlsafe(32)
                if not self.jwt_refresh_secret:
                    self.jwt_refresh_secret = secrets.token_urlsafe(32)
            else:
                raise ValueError(
                    f"{', '.join(missing)} is not set. An empty signing secret allows "
                    "attackers to forge credentials. Set it in .env or set "
                    "ALLOW_INSECURE_JWT=1 for development."
                )
        if self.jwt_secret == self.jwt_refresh_secret:
            raise ValueError(
                "JWT_REFRESH_SECRET must differ from JWT_SECRET so refresh tokens "
                "cannot be replayed as access tokens."
            )
        return self

    jwt_access_token_expire_minutes: int = 15
    jwt_refresh_token_expire_days: int = 7
    nominee_token_expire_hours: int = 24

    emergency_code_length: int = 8
    min_password_length: int = 8
    # Argon2id cost parameters for passwords and emergency codes
    argon2_time_cost: int = 3
    argon2_memory_cost: int = 65536
    argon2_parallelism: int = 1


@lru_cache
def get_settings() -> Settings:
    return Settings()
