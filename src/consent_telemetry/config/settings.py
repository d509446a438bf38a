# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""
Telemetry configuration settings.

Configuration sources (priority order):
1. Explicit keyword arguments
2. Environment variables (and `.env`)
3. Field defaults

Environment Variables:
    CONSENT_TELEMETRY_ENVIRONMENT: production, development or test (default: development)
    CONSENT_TELEMETRY_PLATFORM: web or desktop (default: web)
    CONSENT_TELEMETRY_API_URL: first-party event API base URL
    CONSENT_TELEMETRY_DEV_API_URL: developer override for the event API
    CONSENT_TELEMETRY_AUTH_TOKEN: token sent with first-party API calls
    CONSENT_TELEMETRY_ANALYTICS_HOST: PostHog host for analytics and crash channels
    CONSENT_TELEMETRY_CONSENT_STORE_PATH: JSON file holding persisted consent
    CONSENT_TELEMETRY_APP_VERSION: host desktop application version for the version event
"""

from __future__ import annotations

import os

from functools import cache
from pathlib import Path
from typing import Annotated, Literal

from pydantic import Field, PositiveFloat, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from consent_telemetry.platform import PlatformVariant


def get_user_config_dir(*, base_only: bool = False) -> Path:
    """Get the user configuration directory based on the operating system."""
    import platform

    if (system := platform.system()) == "Windows":
        config_dir = Path(os.getenv("APPDATA", Path("~\\AppData\\Roaming").expanduser()))
    elif system == "Darwin":
        config_dir = Path.home() / "Library" / "Application Support"
    else:
        config_dir = Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config"))
    return config_dir if base_only else config_dir / "consent-telemetry"


class TelemetrySettings(BaseSettings):
    """Telemetry configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="CONSENT_TELEMETRY_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: Annotated[
        Literal["production", "development", "test"],
        Field(
            default="development",
            description="Build environment. Only production builds send first-party events.",
        ),
    ]

    platform: Annotated[
        PlatformVariant,
        Field(default=PlatformVariant.WEB, description="Platform variant of the client."),
    ]

    api_url: Annotated[
        str,
        Field(default="https://api.lbry.com", description="First-party event API base URL."),
    ]

    dev_api_url: Annotated[
        str | None,
        Field(
            default=None,
            description="Developer override for the event API. Enables view logging outside production.",
        ),
    ]

    auth_token: Annotated[
        SecretStr | None,
        Field(default=None, description="Auth token sent with first-party API calls."),
    ]

    request_timeout: Annotated[
        PositiveFloat,
        Field(default=10.0, description="Timeout in seconds for first-party API calls."),
    ]

    analytics_host: Annotated[
        str,
        Field(
            default="https://us.i.posthog.com",
            description="PostHog host URL for analytics and crash events.",
        ),
    ]

    crash_api_key: Annotated[
        SecretStr | None,
        Field(
            default=None,
            description="Project key for the crash channel. Crash capture is off without one.",
        ),
    ]

    web_tracker_id: Annotated[
        str, Field(default="UA-60403362-12", description="Primary channel on the web variant.")
    ]

    web_secondary_tracker_id: Annotated[
        str,
        Field(default="UA-60403362-16", description="Named secondary channel on the web variant."),
    ]

    desktop_tracker_id: Annotated[
        str, Field(default="UA-60403362-13", description="Only channel on the desktop variant.")
    ]

    secondary_tracker_name: Annotated[
        str, Field(default="tracker2", description="Name used to address the secondary channel.")
    ]

    traffic_source_param: Annotated[
        str, Field(default="utm_source", description="Query parameter carrying the traffic source.")
    ]

    excluded_traffic_source: Annotated[
        str,
        Field(
            default="PB",
            description="Traffic source whose visitors are never reported to the secondary channel.",
        ),
    ]

    cookie_domain: Annotated[str, Field(default="auto")]

    site_speed_sample_rate: Annotated[int, Field(default=100, ge=0, le=100)]

    desktop_origin: Annotated[
        str,
        Field(default="https://lbry.tv", description="Location reported by the desktop variant."),
    ]

    app_version: Annotated[
        str | None,
        Field(
            default=None,
            description="Version of the host desktop application. Without one no version event is sent.",
        ),
    ]

    consent_store_path: Annotated[
        Path,
        Field(
            default_factory=lambda: get_user_config_dir() / "consent.json",
            description="JSON file holding persisted consent flags (desktop only).",
        ),
    ]

    log_level: Annotated[
        Literal["DEBUG", "INFO", "WARNING", "ERROR"], Field(default="WARNING")
    ]

    @property
    def is_production(self) -> bool:
        """Whether this is a production build."""
        return self.environment == "production"

    @property
    def dev_api_override(self) -> bool:
        """Whether a developer API override is configured."""
        return self.dev_api_url is not None

    @property
    def effective_api_url(self) -> str:
        """Base URL first-party events are sent to."""
        return self.dev_api_url or self.api_url


@cache
def get_settings() -> TelemetrySettings:
    """Get cached telemetry settings instance."""
    return TelemetrySettings()


def reset_settings() -> None:
    """Reload settings from configuration sources on next access."""
    get_settings.cache_clear()


__all__ = ("TelemetrySettings", "get_settings", "get_user_config_dir", "reset_settings")
