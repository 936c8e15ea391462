"""
leadflow/config.py - Central configuration loaded from environment variables.
All modules import settings from here; never read os.environ directly elsewhere.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Database ──────────────────────────────────────────────────────────────
    database_url: str = Field(..., description="PostgreSQL connection URI")

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", description="Root log level for the API and scripts")

    # ── Notifications ─────────────────────────────────────────────────────────
    notifications_dry_run: bool = Field(
        default=True,
        description="If True, print lead alerts to stdout instead of sending email/SMS",
    )
    dashboard_base_url: str = Field(
        default="https://app.squeezmedia.com",
        description="Base URL used to build dashboard links in lead alerts",
    )
    notification_rate_limit_max: int = Field(
        default=10,
        gt=0,
        description="Max lead alerts per organization inside one rate-limit window",
    )
    notification_rate_limit_window_seconds: int = Field(
        default=60,
        gt=0,
        description="Length of the per-organization rate-limit window",
    )

    # ── Email ─────────────────────────────────────────────────────────────────
    gmail_user: Optional[str] = Field(default=None, description="Gmail sender address")
    gmail_app_password: Optional[str] = Field(default=None, description="Gmail App Password (16 chars)")

    # ── SMS ───────────────────────────────────────────────────────────────────
    twilio_account_sid: Optional[str] = Field(default=None, description="Twilio account SID")
    twilio_auth_token: Optional[str] = Field(default=None, description="Twilio auth token")
    twilio_from_number: Optional[str] = Field(default=None, description="Twilio sender number (E.164)")


# Singleton - import this everywhere
settings = Settings()
