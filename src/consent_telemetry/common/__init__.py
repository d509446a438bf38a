# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Shared helpers: logging setup and background task tracking."""

from __future__ import annotations

from consent_telemetry.common.logging import setup_logger
from consent_telemetry.common.tasks import BackgroundTasks


CONSENT_TELEMETRY_PREFIX = "[bold cyan]consent-telemetry[/bold cyan]:"

__all__ = ("CONSENT_TELEMETRY_PREFIX", "BackgroundTasks", "setup_logger")
