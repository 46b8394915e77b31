"""Configuration settings for the InPost chat Playwright tests."""

import json
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration settings loaded from environment variables or JSON file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="INPOST_",
        extra="ignore",
    )

    # Site URLs
    chat_base_url: str = Field(
        default="https://inpost.pl",
        description="Base URL of the InPost website",
    )
    chat_path: str = Field(
        default="/kontakt",
        description="Path to the contact page hosting the chat widget",
    )

    # Browser settings
    headless: bool = Field(
        default=True,
        description="Run browser in headless mode",
    )
    browser: Literal["chromium", "firefox", "webkit"] = Field(
        default="chromium",
        description="Browser to use for testing",
    )
    timeout: int = Field(
        default=60000,
        description="Default timeout for operations (ms)",
    )
    expect_timeout: int = Field(
        default=30000,
        description="Default timeout for expect operations (ms)",
    )

    # Waits (ms)
    cookie_timeout: int = Field(
        default=5000,
        description="How long to look for the cookie banner button",
    )
    launcher_wait: int = Field(
        default=2000,
        description="Wait after clicking the chat launcher",
    )
    response_wait: int = Field(
        default=3000,
        description="Wait after sending a message",
    )
    scrape_settle: int = Field(
        default=2000,
        description="Wait before scraping bot responses",
    )
    action_settle: int = Field(
        default=1000,
        description="Wait before scraping action buttons",
    )
    action_load_wait: int = Field(
        default=4000,
        description="Extra wait for action buttons rendered after the text response",
    )
    wait_strategy: Literal["fixed", "poll"] = Field(
        default="fixed",
        description="'fixed' sleeps the full duration, 'poll' returns once chat content changes",
    )
    poll_interval: int = Field(
        default=250,
        description="Interval between checks for 'poll' waits",
    )

    # Diagnostics
    debug: bool = Field(
        default=False,
        description="Log raw DOM structure and button attributes while scraping",
    )

    # Report settings
    reports_dir: str = Field(
        default="./reports",
        description="Directory for test reports",
    )

    @model_validator(mode='after')
    def validate_waits(self):
        """Validate that wait durations make sense."""
        for name in (
            "cookie_timeout", "launcher_wait", "response_wait",
            "scrape_settle", "action_settle", "action_load_wait",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name.upper()} must not be negative")
        if self.poll_interval <= 0:
            raise ValueError("POLL_INTERVAL must be positive")
        return self

    @property
    def chat_url(self) -> str:
        """Full URL to the contact page."""
        return f"{self.chat_base_url}{self.chat_path}"

    @property
    def reports_path(self) -> Path:
        """Path object for reports directory."""
        return Path(self.reports_dir)

    @classmethod
    def from_json(cls, json_path: Path) -> "Settings":
        """Load settings from a JSON config file.

        JSON keys use snake_case matching the field names. Fields missing
        from the JSON fall back to environment variables and .env.
        """
        with open(json_path) as f:
            config_data = json.load(f)
        return cls(**config_data)


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Optional[Settings]) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings


def load_settings_from_json(json_path: Path) -> Settings:
    """Load settings from JSON file and set as global instance."""
    global _settings
    _settings = Settings.from_json(json_path)
    return _settings
