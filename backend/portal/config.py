"""
Configuration settings for the B2B ordering portal.

Loads environment variables from .env file and provides typed configuration.
"""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    API_PREFIX: str = "/api"
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:5173", "http://localhost:3000"],
        description="Allowed CORS origins",
    )
    PUBLIC_BASE_URL: str = Field(
        default="http://localhost:8000",
        description="Base URL used for links in outgoing emails",
    )

    # Session Configuration
    SESSION_SECRET: str = Field(
        default="portal-session-secret-CHANGE-THIS",
        description="Secret used to sign the session cookie",
    )
    SESSION_MAX_AGE: int = Field(
        default=24 * 60 * 60, description="Session cookie lifetime in seconds"
    )
    RESET_TOKEN_EXPIRE_MINUTES: int = Field(
        default=60, description="Password reset token lifetime in minutes"
    )

    # Rate limiting
    GENERAL_RATE_LIMIT: str = Field(
        default="100/15minutes", description="Default limit for every API route"
    )
    LOGIN_RATE_LIMIT: str = Field(
        default="5/15minutes", description="Limit for login endpoints"
    )

    # Database Configuration
    DATABASE_URL: str = Field(
        default="sqlite:///./data/portal.db",
        description="sqlite:///path for the embedded store, postgresql://... for the server",
    )
    DATABASE_ECHO: bool = Field(
        default=False, description="Echo SQL queries (for debugging)"
    )
    SEED_DEFAULT_DATA: bool = Field(
        default=True, description="Create the default admin and product on startup"
    )
    DEFAULT_ADMIN_USERNAME: str = Field(default="admin")
    DEFAULT_ADMIN_PASSWORD: str = Field(default="admin123")

    # Email (SendGrid)
    SENDGRID_API_KEY: Optional[str] = Field(
        default=None, description="SendGrid API key; emails are skipped when unset"
    )
    FROM_EMAIL: str = Field(default="orders@thinkbody.example")
    FROM_NAME: str = Field(default="Think Body Japan")
    ADMIN_EMAIL: str = Field(default="admin@thinkbody.example")
    NOTIFICATION_TIMEOUT: float = Field(
        default=10.0, description="Seconds before an outgoing email is abandoned"
    )

    # Bank transfer details printed in order confirmations
    BANK_NAME: str = Field(default="Seto Shinkin Bank")
    BANK_BRANCH: str = Field(default="Owariasahi Branch")
    BANK_ACCOUNT_TYPE: str = Field(default="Ordinary")
    BANK_ACCOUNT_NUMBER: str = Field(default="0836092")
    BANK_ACCOUNT_HOLDER: str = Field(default="Think Life Co., Ltd.")

    # Documents (invoice / receipt)
    COMPANY_NAME: str = Field(default="Think Body Japan Co., Ltd.")
    COMPANY_ADDRESS: str = Field(default="Shibuya, Tokyo")
    INVOICE_NUMBER: str = Field(
        default="T1180001124300", description="Qualified invoice registration number"
    )
    PDF_FONT_PATH: Optional[str] = Field(
        default=None, description="TrueType font with CJK glyphs for PDF documents"
    )

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
