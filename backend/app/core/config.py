"""SNIC Backend Configuration - loaded once from environment / .env."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# HS256 keys shorter than this are rejected by most JWT validators
MIN_JWT_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "SNIC API"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite+aiosqlite:///./snic.db"
    db_pool_size: int = 20
    db_max_overflow: int = 20
    db_pool_timeout: int = 30
    db_pool_recycle: int = 1800

    # JWT - the signing key has no default; TokenConfig refuses to start without it
    jwt_secret_key: str = ""
    jwt_issuer: str = "snic-api"
    jwt_audience: str = "snic-clients"
    jwt_algorithm: str = "HS256"
    jwt_token_lifetime_hours: int = 24

    # Blacklist cleanup
    token_cleanup_interval_seconds: int = 3600

    # HTTP
    cors_origins: str = "http://localhost:4200"
    enable_metrics: bool = False

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @field_validator("token_cleanup_interval_seconds", "jwt_token_lifetime_hours")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @property
    def cors_origins_list(self) -> list[str]:
        """CORS origins as a list (comma-separated in the environment)."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def check_security_configuration(self) -> list[str]:
        """Return warnings about weak but non-fatal configuration."""
        warnings: list[str] = []
        if self.jwt_secret_key and len(self.jwt_secret_key) < MIN_JWT_SECRET_LENGTH:
            warnings.append(
                f"JWT_SECRET_KEY is shorter than {MIN_JWT_SECRET_LENGTH} characters"
            )
        if "*" in self.cors_origins_list:
            warnings.append("CORS_ORIGINS allows any origin")
        return warnings


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
