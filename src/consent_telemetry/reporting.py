# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Error reporting gated by internal-analytics consent on production builds."""

from __future__ import annotations

import logging

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from consent_telemetry.backends.crash import CrashTelemetryBackend
    from consent_telemetry.backends.event_api import EventApiClient
    from consent_telemetry.consent import ConsentStore


logger = logging.getLogger(__name__)


class ErrorReporter:
    """Sends user-facing errors and exceptions to the internal channels.

    Neither operation raises: a skipped report resolves to False/None, and backend
    failures are logged and resolve the same way.
    """

    def __init__(
        self,
        consent: ConsentStore,
        event_api: EventApiClient,
        crash_backend: CrashTelemetryBackend,
        *,
        is_production: bool = False,
    ) -> None:
        self._consent = consent
        self._event_api = event_api
        self._crash_backend = crash_backend
        self._is_production = is_production

    @property
    def enabled(self) -> bool:
        return self._consent.internal_enabled and self._is_production

    async def report_user_error(self, message: str) -> bool:
        """Log an error message shown to the user. Returns True once it was sent."""
        if not self.enabled:
            return False
        try:
            _ = await self._event_api.call("event", "desktop_error", {"error_message": message})
        except Exception:
            logger.exception("Failed to report user error")
            return False
        return True

    async def report_exception(
        self, error: BaseException, context: Mapping[str, Any] | None = None
    ) -> str | None:
        """Capture `error` with `context` as extra data. Returns the correlation id."""
        if not self.enabled:
            return None
        try:
            return self._crash_backend.capture_exception(error, dict(context or {}))
        except Exception:
            logger.exception("Crash telemetry capture failed")
            return None


__all__ = ("ErrorReporter",)
