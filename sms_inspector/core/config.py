"""
sms_inspector/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (DB URI, secrets, Premiumy endpoint, etc.)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, validator
from pydantic_settings import BaseSettings
from typing import Optional, Literal


DEFAULT_SECRET_KEY = "change-me-in-production"
DEFAULT_ADMIN_PASSWORD = "admin"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # MongoDB
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    MONGODB_DB_NAME: str = Field(
        default="sms_inspector",
        description="MongoDB database name"
    )

    # Premiumy billing API
    PREMIUMY_API_URL: str = Field(
        default="https://api.premiumy.net/v1.0/csv",
        description="Premiumy JSON-RPC endpoint returning MDR rows"
    )
    PREMIUMY_API_KEY: Optional[str] = Field(
        default=None,
        description="Initial API key stored in settings on first start"
    )
    PREMIUMY_TIMEOUT: float = Field(
        default=30.0,
        description="Premiumy request timeout in seconds"
    )

    # Proxy verification
    PROXY_TEST_URL: str = Field(
        default="https://api.ipify.org?format=json",
        description="URL fetched through a proxy before it is saved"
    )
    PROXY_TEST_TIMEOUT: float = Field(
        default=10.0,
        description="Proxy test timeout in seconds"
    )

    # LLM
    OPENAI_API_KEY: Optional[str] = Field(
        default=None,
        description="OpenAI API key used by the extraction prompt"
    )
    LLM_MODEL: str = Field(
        default="gpt-4o-mini",
        description="Chat model used for message analysis"
    )
    LLM_TEMPERATURE: float = Field(
        default=0.0,
        description="Sampling temperature for message analysis"
    )

    # Sessions
    TOKEN_TTL_SECONDS: int = Field(
        default=60 * 60 * 24,
        description="Lifetime of the user session cookie"
    )
    ADMIN_SESSION_TTL_SECONDS: int = Field(
        default=60 * 60,
        description="Lifetime of the admin panel session cookie"
    )
    ADMIN_USERNAME: str = Field(
        default="admin",
        description="Admin panel username"
    )
    ADMIN_PASSWORD: str = Field(
        default=DEFAULT_ADMIN_PASSWORD,
        description="Admin panel password"
    )

    # Seed data
    SEED_ADMIN_EMAIL: str = Field(
        default="admin@example.com",
        description="Email of the admin user created on first start"
    )
    SEED_ADMIN_PASSWORD: str = Field(
        default="admin",
        description="Password of the admin user created on first start"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    API_PREFIX: str = Field(
        default="/api/v1",
        description="API route prefix"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    # Security
    SECRET_KEY: str = Field(
        default=DEFAULT_SECRET_KEY,
        description="Secret used to sign session cookies"
    )

    @validator("SECRET_KEY")
    def validate_secret_key(cls, v, values):
        """Ensure secret key is changed in production."""
        if values.get("ENVIRONMENT") == "production" and v == DEFAULT_SECRET_KEY:
            raise ValueError("SECRET_KEY must be changed in production environment")
        return v

    @validator("ADMIN_PASSWORD")
    def validate_admin_password(cls, v, values):
        """Ensure the admin panel password is changed in production."""
        if values.get("ENVIRONMENT") == "production" and v == DEFAULT_ADMIN_PASSWORD:
            raise ValueError("ADMIN_PASSWORD must be changed in production environment")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    @property
    def admin_cookie_path(self) -> str:
        return f"{self.API_PREFIX}/admin"

    class Config:
        env_file = ".env"
        case_sensitive = True
        env_file_encoding = "utf-8"


# Global settings instance
settings = Settings()


def validate_settings():
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    errors = []

    if not settings.MONGODB_URL:
        errors.append("MONGODB_URL is required")

    if not settings.PREMIUMY_API_URL:
        errors.append("PREMIUMY_API_URL is required")

    if settings.TOKEN_TTL_SECONDS <= 0 or settings.ADMIN_SESSION_TTL_SECONDS <= 0:
        errors.append("Session lifetimes must be positive")

    # Production-specific validations
    if settings.is_production:
        if not settings.OPENAI_API_KEY:
            errors.append("OPENAI_API_KEY is required in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
