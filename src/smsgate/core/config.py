"""Runtime configuration.

Everything tunable is a field on :class:`Settings`, read from ``SMSGATE_*``
environment variables or a ``.env`` file. The object is built once
(:func:`get_settings`) and passed to services explicitly, so nothing below
the API layer looks at ``os.environ``.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SECRET_KEY = "change-me-in-production-use-openssl-rand-hex-32"

Environment = Literal["development", "production", "testing"]
RegistrationMode = Literal["open", "invite_only"]


class Settings(BaseSettings):
    """Validated smsgate settings.

    Example:
        SMSGATE_REGISTRATION_MODE=invite_only
        SMSGATE_TURNSTILE_SECRET_KEY=0x4AAAAAAA...
        SMSGATE_DATABASE_URL=postgresql+asyncpg://sg:sg@db/smsgate
    """

    model_config = SettingsConfigDict(
        env_prefix="SMSGATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Process
    app_name: str = "smsgate"
    app_version: str = "0.1.0"
    environment: Environment = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1

    # Storage
    database_url: str = "sqlite+aiosqlite:///./sg_data/smsgate.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600
    db_echo: bool = False

    # Bearer tokens
    secret_key: str = Field(default=DEFAULT_SECRET_KEY, description="HS256 signing secret")
    access_token_expire_minutes: int = Field(default=60 * 24 * 7, ge=1)

    # Browser clients
    cors_origins: list[str] = Field(default=["http://localhost:3000", "http://localhost:8000"])
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = Field(default=["*"])
    cors_allow_headers: list[str] = Field(default=["*"])

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Sign-up
    registration_mode: RegistrationMode = Field(
        default="open",
        description="invite_only makes an invite code mandatory at registration",
    )
    turnstile_secret_key: str | None = Field(
        default=None,
        description="Cloudflare Turnstile secret; bot checks are off when unset",
    )
    turnstile_verify_url: str = "https://challenges.cloudflare.com/turnstile/v0/siteverify"
    turnstile_timeout_seconds: float = Field(default=5.0, gt=0)

    # API keys may arrive in a header or, for webhooks that cannot set headers, a query parameter
    api_key_header: str = "x-api-key"
    api_key_query_param: str = "apiKey"
    api_key_prefix_length: int = Field(default=17, ge=4)

    invite_default_max_uses: int = Field(default=1, ge=1)
    invite_default_expires_in_days: int = Field(default=7, ge=1)
    invite_list_default_limit: int = Field(default=50, ge=1)
    invite_list_max_limit: int = Field(default=200, ge=1)

    access_log_enabled: bool = True

    # First admin, created or promoted at startup when both are set
    admin_email: str | None = None
    admin_password: str | None = None

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Accept ``https://a.example, https://b.example`` as well as a list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @model_validator(mode="after")
    def reject_sqlite_multiprocess(self) -> "Settings":
        if self.workers > 1 and self.database_url.startswith("sqlite"):
            raise ValueError(
                "SQLite does not support multiple worker processes. "
                f"Got workers={self.workers}; run a single worker or use PostgreSQL."
            )
        return self

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_invite_only(self) -> bool:
        return self.registration_mode == "invite_only"


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, loaded on first use.

    Routers take it through ``Depends(get_settings)`` so tests can swap it via
    ``app.dependency_overrides``.
    """
    return Settings()
