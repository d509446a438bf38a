# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Command line interface for consent-telemetry."""

from __future__ import annotations

from consent_telemetry.cli.app import app, main


__all__ = ("app", "main")
