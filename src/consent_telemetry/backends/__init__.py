# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Outbound telemetry backends: web analytics, crash telemetry, first-party event API."""

from __future__ import annotations

from consent_telemetry.backends.analytics import (
    AnalyticsOptions,
    PostHogAnalyticsBackend,
    WebAnalyticsBackend,
)
from consent_telemetry.backends.crash import CrashTelemetryBackend, PostHogCrashBackend
from consent_telemetry.backends.event_api import EventApiClient


__all__ = (
    "AnalyticsOptions",
    "CrashTelemetryBackend",
    "EventApiClient",
    "PostHogAnalyticsBackend",
    "PostHogCrashBackend",
    "WebAnalyticsBackend",
)
