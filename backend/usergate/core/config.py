# backend/usergate/core/config.py

import logging
from typing import Optional

from pydantic import AliasChoices, Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Only ever used outside production, and always announced with a warning.
DEV_JWT_SECRET = "development-secret-key-min-32-chars-required"

MIN_SECRET_LENGTH = 32


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    app_env: str = "development"

    # ✅ ONE secret for issuing and verifying (Render / Vercel: JWT_SECRET)
    jwt_secret: Optional[str] = Field(default=None, validate_default=True)
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7

    cookie_name: str = "token"

    # Vercel hands out POSTGRES_URL, everything else uses DATABASE_URL
    database_url: str = Field(
        default="sqlite:///./usergate.db",
        validation_alias=AliasChoices("DATABASE_URL", "POSTGRES_URL", "database_url"),
    )
    create_tables: bool = True

    # pbkdf2 iterations; tune to the target hardware at deploy time
    password_hash_rounds: int = Field(default=29000, ge=1000)

    cors_origins: str = ""
    frontend_url: str = "http://localhost:3000"

    log_level: str = "INFO"

    @field_validator("app_env", mode="before")
    @classmethod
    def _normalize_env(cls, v):
        return str(v or "development").strip().lower()

    @field_validator("jwt_secret", mode="after")
    @classmethod
    def _check_secret(cls, v: Optional[str], info: ValidationInfo) -> str:
        env = info.data.get("app_env", "development")
        if not v:
            if env == "production":
                raise ValueError("JWT_SECRET is required in production")
            logger.warning(
                "JWT_SECRET is not set, falling back to the development secret (APP_ENV=%s). "
                "Tokens signed with it are forgeable by anyone who reads this code.",
                env,
            )
            v = DEV_JWT_SECRET
        if len(v) < MIN_SECRET_LENGTH:
            raise ValueError(f"JWT_SECRET must be at least {MIN_SECRET_LENGTH} characters")
        return v

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def cookie_max_age(self) -> int:
        return self.access_token_expire_minutes * 60

    @property
    def allow_origins(self) -> list[str]:
        # Prefer a comma-separated allowlist in prod, fallback to FRONTEND_URL/local
        # Example: CORS_ORIGINS="https://usergate.vercel.app,http://localhost:3000"
        cors = self.cors_origins.strip()
        if cors:
            return [o.strip() for o in cors.split(",") if o.strip()]
        return sorted({self.frontend_url.strip(), "http://localhost:3000"})


settings = Settings()
