# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Configuration for consent-telemetry."""

from __future__ import annotations

from consent_telemetry.config.settings import TelemetrySettings, get_settings, reset_settings


__all__ = ("TelemetrySettings", "get_settings", "reset_settings")
