"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).

OTP, buddy and progress numbers are settings so services receive them at
construction time and tests can shrink windows without patching modules.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongodb_uri: str
    db_name: str = "paws-focus"


class OtpSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    otp_code_length: int = Field(default=6, ge=4, le=10)
    otp_code_ttl_seconds: int = 600
    otp_resend_window_seconds: int = 600
    otp_max_resends: int = 3
    otp_max_attempts: int = 5
    otp_reset_token_ttl_seconds: int = 300
    otp_reset_token_bytes: int = 32

    @property
    def code_ttl(self) -> timedelta:
        return timedelta(seconds=self.otp_code_ttl_seconds)

    @property
    def resend_window(self) -> timedelta:
        return timedelta(seconds=self.otp_resend_window_seconds)

    @property
    def reset_token_ttl(self) -> timedelta:
        return timedelta(seconds=self.otp_reset_token_ttl_seconds)


class BuddySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    buddy_decay_per_hour: int = 2
    buddy_happiness_floor: int = Field(default=20, ge=0, le=100)
    buddy_fullness_floor: int = Field(default=10, ge=0, le=100)
    buddy_treat_cost: int = 10


class ProgressSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    kibble_per_session: int = 10
    kibble_per_meal: int = 25
    # Allowed clock skew between the client's session end and server time
    session_end_tolerance_seconds: int = 60


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    env: str = "development"
    app_name: str = "Paws Focus"

    # Sub-configs (composed via model_validator below)
    db: Optional[DatabaseSettings] = None
    otp: Optional[OtpSettings] = None
    buddy: Optional[BuddySettings] = None
    progress: Optional[ProgressSettings] = None
    logging: Optional[LoggingSettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        # Populate sub-configs from the same env/dotenv source
        if self.db is None:
            self.db = DatabaseSettings()
        if self.otp is None:
            self.otp = OtpSettings()
        if self.buddy is None:
            self.buddy = BuddySettings()
        if self.progress is None:
            self.progress = ProgressSettings()
        if self.logging is None:
            self.logging = LoggingSettings()

        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"
