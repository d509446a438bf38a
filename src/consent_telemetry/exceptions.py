# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Exception hierarchy for consent-telemetry.

Consent-denied dispatches are not errors and never raise. Exceptions here cover
misconfiguration, consent persistence and first-party API failures.
"""

from __future__ import annotations

from typing import Any


class ConsentTelemetryError(Exception):
    """Base exception for all consent-telemetry errors.

    Provides structured error information including details and suggestions
    for resolution.
    """

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        suggestions: list[str] | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message
            details: Additional context about the error
            suggestions: Actionable suggestions for resolving the error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.suggestions = suggestions or []

    def __str__(self) -> str:
        """Return descriptive error message with context details."""
        if not self.details:
            return self.message
        detail_parts = ", ".join(f"{key.replace('_', ' ')}: {value}" for key, value in self.details.items())
        return f"{self.message} ({detail_parts})"


class ConfigurationError(ConsentTelemetryError):
    """Configuration and settings errors.

    Raised for unknown platform variants or settings that cannot produce a
    working telemetry session.
    """


class PersistenceError(ConsentTelemetryError):
    """Consent persistence error.

    Raised when a consent flag cannot be written to the key-value store.
    """


class BackendError(ConsentTelemetryError):
    """First-party event API error.

    Raised when the event API answers with an unsuccessful or unreadable response.
    """


__all__ = (
    "BackendError",
    "ConfigurationError",
    "ConsentTelemetryError",
    "PersistenceError",
)
