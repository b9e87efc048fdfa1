"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - jwt_secret has no default: startup fails without it
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://finanwas:finanwas@db:5432/finanwas"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres provides postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Auth
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_expiry_days: int = 7
    auth_cookie_name: str = "auth-token"
    bcrypt_rounds: int = 10
    two_factor_issuer: str = "Finanwas"

    @field_validator("jwt_secret")
    @classmethod
    def require_jwt_secret(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("JWT_SECRET must be set")
        return v

    # Market data
    exchange_rate_api_url: str = "https://api.exchangerate-api.com/v4/latest/USD"
    dolar_api_url: str = "https://dolarapi.com/v1/dolares"
    http_timeout_seconds: float = 10.0
    exchange_rate_cache_seconds: int = 3600
    dollar_cache_seconds: int = 3600
    quote_cache_seconds: int = 900

    # Content & retention
    content_dir: str = "content"
    snapshot_retention_days: int = 365

    # API
    environment: str = "development"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
