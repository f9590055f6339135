"""TutorStream configuration using Pydantic Settings."""

from datetime import timedelta
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tutorstream.auth.duration import parse_duration

PLACEHOLDER_SECRET = "change-me-in-production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Frozen once loaded; components receive the instance at construction
    and never read the environment themselves.
    """

    model_config = SettingsConfigDict(
        env_prefix="TUTORSTREAM_",
        env_file=".env",
        env_file_encoding="utf-8",
        frozen=True,
    )

    # Core
    port: int = 8080
    debug: bool = False
    environment: str = "development"  # development or production

    # Session credentials
    jwt_secret: str = PLACEHOLDER_SECRET
    jwt_expires_in: str = "2h"

    # Signed URLs
    secret_key: str = PLACEHOLDER_SECRET
    signed_url_expires_in: int = 600

    # Storage
    storage_path: Path = Path("./data/videos")

    # CORS (development only, production allows any origin)
    allowed_origins: list[str] = ["http://localhost:3000", "http://localhost:5050"]

    # Rate limiting: storage (in-memory when unset) and proxies whose
    # X-Forwarded-For header is believed
    redis_url: str | None = None
    trusted_proxies: list[str] = []

    @field_validator("environment")
    @classmethod
    def _check_environment(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in ("development", "production"):
            raise ValueError("environment must be 'development' or 'production'")
        return value

    @field_validator("jwt_expires_in")
    @classmethod
    def _check_expires_in(cls, value: str) -> str:
        if parse_duration(value) < timedelta(seconds=1):
            raise ValueError("jwt_expires_in must be at least one second")
        return value

    @field_validator("signed_url_expires_in")
    @classmethod
    def _check_signed_url_expires_in(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("signed_url_expires_in must be positive")
        return value

    @model_validator(mode="after")
    def _check_production_secrets(self) -> "Settings":
        if self.is_production:
            for name in ("jwt_secret", "secret_key"):
                if getattr(self, name) in ("", PLACEHOLDER_SECRET):
                    raise ValueError(f"TUTORSTREAM_{name.upper()} must be set in production")
        return self

    @property
    def is_production(self) -> bool:
        """Whether cookies must be marked Secure and CORS opened up."""
        return self.environment == "production"

    @property
    def token_lifetime(self) -> timedelta:
        """Session credential lifetime parsed from ``jwt_expires_in``."""
        return parse_duration(self.jwt_expires_in)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
