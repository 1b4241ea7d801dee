"""
Configuration management for CareFlow HR Backend
"""
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import Optional, List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Required settings
    DATABASE_URL: str = Field(..., description="PostgreSQL database URL")
    JWT_SECRET_KEY: str = Field(..., description="Secret used by the auth provider to sign access tokens")

    # Optional settings with defaults
    JWT_ALGORITHM: str = Field(default="HS256", description="JWT algorithm")
    JWT_AUDIENCE: Optional[str] = Field(default=None, description="Expected 'aud' claim (skipped when unset)")
    JWT_EXPIRE_MINUTES: int = Field(default=60, description="Lifetime of tokens minted by create_access_token")

    APP_ENV: str = Field(default="local", description="Application environment: local, staging, prod")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level: DEBUG, INFO, WARNING, ERROR")

    # CORS settings
    ALLOWED_ORIGINS: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins. Use '*' for local only."
    )

    # Version (can be git SHA or semver)
    VERSION: Optional[str] = Field(default=None, description="Application version (git SHA or semver)")

    # Employee sync webhook
    SYNC_WEBHOOK_SECRET: Optional[str] = Field(
        default=None,
        description="Shared HMAC-SHA256 secret for the sync webhook; verification is skipped when unset",
    )
    SYNC_SIGNATURE_HEADER: str = Field(
        default="X-NovumFlow-Signature",
        description="Header carrying the hex HMAC-SHA256 of the raw webhook body",
    )
    SYNC_MAX_RETRIES: int = Field(default=3, ge=1, description="Retries before a failed sync needs manual review")
    ROLE_MAPPING_CACHE_TTL_SECONDS: int = Field(default=300, ge=0, description="Role mapping cache lifetime")
    DEFAULT_INTERNAL_ROLE: str = Field(default="Carer", description="Internal role for unmapped external roles")

    # Leave rule / role mapping administration
    RULE_ADMIN_ROLES: str = Field(
        default="admin,hr_manager",
        description="Comma-separated token roles allowed to manage rules and role mappings",
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    @field_validator("APP_ENV")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate APP_ENV"""
        allowed = ["local", "staging", "prod"]
        if v not in allowed:
            raise ValueError(f"APP_ENV must be one of {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate LOG_LEVEL"""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v.upper()

    def validate_production(self) -> None:
        """
        Validate settings for production environment

        Raises:
            ValueError: If production settings are invalid
        """
        if self.APP_ENV == "prod":
            if len(self.JWT_SECRET_KEY) < 32:
                raise ValueError(
                    "JWT_SECRET_KEY must be at least 32 characters in production environment"
                )

            if self.ALLOWED_ORIGINS == "*" or not self.ALLOWED_ORIGINS:
                raise ValueError(
                    "ALLOWED_ORIGINS must be explicitly set (not '*') in production environment"
                )

    def get_allowed_origins_list(self) -> List[str]:
        """
        Get list of allowed CORS origins

        Returns:
            List of allowed origins (or ['*'] for local)
        """
        if self.ALLOWED_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    def get_rule_admin_roles(self) -> List[str]:
        """Roles (lower-cased) allowed to manage leave rules and role mappings"""
        return [r.strip().lower() for r in self.RULE_ADMIN_ROLES.split(",") if r.strip()]


# Create settings instance
settings = Settings()

# Validate production settings if in prod
if settings.APP_ENV == "prod":
    settings.validate_production()
