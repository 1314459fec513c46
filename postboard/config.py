"""Configuration management for the application."""

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "change-me-in-production"  # noqa: S105


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = Field(default="sqlite:///./postboard.db")
    auto_create_schema: bool = Field(default=True)

    # JWT
    jwt_secret: str = Field(default=DEFAULT_JWT_SECRET)
    jwt_algorithm: str = Field(default="HS256")
    jwt_issuer: str = Field(default="postboard")
    jwt_audience: str = Field(default="postboard-api")
    jwt_expiration_minutes: int = Field(default=1440)  # 24 hours

    # Password reset / account setup tokens
    reset_token_ttl_hours: int = Field(default=24)

    # Role policy: users whose email ends with @<domain> are administrators
    admin_email_domain: str = Field(default="admin.com")

    # SMTP (password setup emails are disabled when smtp_host is unset)
    smtp_host: str | None = Field(default=None)
    smtp_port: int = Field(default=2525)
    smtp_username: str | None = Field(default=None)
    smtp_password: str | None = Field(default=None)
    smtp_use_tls: bool = Field(default=True)
    smtp_timeout_seconds: float = Field(default=10.0)
    mail_from_address: str = Field(default="noreply@postboard.local")
    mail_from_name: str = Field(default="Postboard")
    frontend_base_url: str = Field(default="http://localhost:4200")

    # API
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    @model_validator(mode="after")
    def validate_signing_key(self) -> "Settings":
        """Refuse to start without a usable token signing key."""
        if not self.jwt_secret.strip():
            raise ValueError("JWT_SECRET must not be empty")
        if self.environment == "production":
            if self.jwt_secret == DEFAULT_JWT_SECRET:
                raise ValueError("JWT_SECRET must be changed in production")
            if self.database_url.startswith("sqlite"):
                raise ValueError("DATABASE_URL should not use SQLite in production")
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def email_enabled(self) -> bool:
        """Check if outgoing email is configured."""
        return bool(self.smtp_host)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
