# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""
Consent-gated telemetry dispatch for a media-sharing client.

Decides, per event category, whether an event may leave the device and which
backend channel receives it.

Key Principles:
- Two independent consent flags (internal, third party)
- Disabled consent is a silent no-op, never an error
- Channels are chosen once at startup and never change
- Fail-safe (telemetry errors don't affect the application)

Example:
    >>> from consent_telemetry import TelemetrySession
    >>> session = TelemetrySession.from_settings(initial_url="https://lbry.tv/")
    >>> session.start()
    >>> session.dispatcher.email_provided()
"""

from __future__ import annotations

from consent_telemetry._version import __version__
from consent_telemetry.config.settings import TelemetrySettings, get_settings
from consent_telemetry.consent import ConsentFlags, ConsentStore
from consent_telemetry.dispatcher import EventDispatcher
from consent_telemetry.exceptions import (
    BackendError,
    ConfigurationError,
    ConsentTelemetryError,
    PersistenceError,
)
from consent_telemetry.platform import DesktopAdapter, PlatformAdapter, PlatformVariant, WebAdapter
from consent_telemetry.records import ClaimResult, EventRecord, TimingRecord, ViewLogParams
from consent_telemetry.remote import RemoteEventAPI
from consent_telemetry.reporting import ErrorReporter
from consent_telemetry.session import TelemetrySession
from consent_telemetry.trackers import TrackerDescriptor, TrackerRegistry


__all__ = (
    "BackendError",
    "ClaimResult",
    "ConfigurationError",
    "ConsentFlags",
    "ConsentStore",
    "ConsentTelemetryError",
    "DesktopAdapter",
    "ErrorReporter",
    "EventDispatcher",
    "EventRecord",
    "PersistenceError",
    "PlatformAdapter",
    "PlatformVariant",
    "RemoteEventAPI",
    "TelemetrySession",
    "TelemetrySettings",
    "TimingRecord",
    "TrackerDescriptor",
    "TrackerRegistry",
    "ViewLogParams",
    "WebAdapter",
    "__version__",
    "get_settings",
)
