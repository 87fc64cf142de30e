"""
Net&Connect portal configuration: all environment variables in one place.

Read from environment at runtime. Never hardcode secrets.
"""

from __future__ import annotations

import os


class Settings:
    """Application settings from environment variables."""

    # Application
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    # Signed tokens (magic links and session cookie share one secret)
    SESSION_SECRET: str = os.environ.get("SESSION_SECRET", "")
    SESSION_COOKIE_NAME: str = os.environ.get("SESSION_COOKIE_NAME", "nc_auth")
    SESSION_EXPIRY_HOURS: int = int(os.environ.get("SESSION_EXPIRY_HOURS", "24"))

    # Magic Links
    MAGIC_LINK_EXPIRY_MINUTES: int = int(os.environ.get("MAGIC_LINK_EXPIRY_MINUTES", "20"))
    MAGIC_LINK_RATE_LIMIT_PER_EMAIL: int = 5  # per hour
    MAGIC_LINK_RATE_LIMIT_PER_IP: int = 20  # per hour
    VERIFY_RATE_LIMIT_PER_IP: int = 10  # per minute

    # Airtable (members, experts, partners, community)
    AIRTABLE_API_KEY: str = os.environ.get("AIRTABLE_API_KEY", "")
    AIRTABLE_BASE_ID: str = os.environ.get("AIRTABLE_BASE_ID", "")
    AIRTABLE_MEMBERS_TABLE: str = os.environ.get("AIRTABLE_TABLE_NAME", "Membres du club")
    AIRTABLE_EXPERTS_TABLE: str = "Nos experts"
    AIRTABLE_PARTNERS_TABLE: str = "partners"
    AIRTABLE_COMMUNITY_TABLE: str = "Le cercle"
    AIRTABLE_COMPANIES_TABLE: str = "Entreprises"

    # Luma (events)
    LUMA_EVENTS_URL: str = os.environ.get("LUMA_EVENTS_URL", "")
    LUMA_API_KEY: str = os.environ.get("LUMA_API_KEY", "")

    # Email (Resend or Brevo)
    EMAIL_PROVIDER: str = os.environ.get("EMAIL_PROVIDER", "resend").lower()
    RESEND_API_KEY: str = os.environ.get("RESEND_API_KEY", "")
    EMAIL_FROM: str = os.environ.get("EMAIL_FROM", "Net&Connect <no-reply@netandconnect.fr>")
    BREVO_API_KEY: str = os.environ.get("BREVO_API_KEY", "")
    BREVO_FROM_EMAIL: str = os.environ.get("BREVO_FROM_EMAIL", "")
    BREVO_FROM_NAME: str = os.environ.get("BREVO_FROM_NAME", "Net&Connect")

    # Token ledger
    DEFAULT_MEMBER_TOKENS: int = 10
    EVENT_JOIN_COST: int = int(os.environ.get("EVENT_JOIN_COST", "1"))

    @property
    def APP_URL(self) -> str:
        url = os.environ.get("APP_URL")
        if url:
            return url.rstrip("/")
        return "http://localhost:8000" if self.ENVIRONMENT == "development" else "https://app.netandconnect.fr"

    @property
    def COOKIE_SECURE(self) -> bool:
        return self.ENVIRONMENT == "production"


# Singleton instance
settings = Settings()

# Signing secret has no default
if not settings.SESSION_SECRET:
    raise RuntimeError("SESSION_SECRET environment variable is required")
