# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Crash and error telemetry backends."""

from __future__ import annotations

import logging

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from posthog import Posthog, new_context, tag
from pydantic.types import SecretStr


logger = logging.getLogger(__name__)


@runtime_checkable
class CrashTelemetryBackend(Protocol):
    """Contract for the crash-telemetry service."""

    def capture_exception(self, error: BaseException, extras: Mapping[str, Any]) -> str | None:
        """Submit `error` with `extras` attached and return its correlation id."""
        ...


class PostHogCrashBackend:
    """Crash backend using PostHog exception capture.

    Each capture runs in its own context scope so extras never leak between reports.
    Without a project key the backend is disabled and every capture returns None.
    """

    def __init__(
        self,
        api_key: SecretStr | str | None = None,
        host: str = "https://us.i.posthog.com",
        *,
        client: Posthog | None = None,
        disabled: bool = False,
    ) -> None:
        self.logger = logging.getLogger(__name__)
        self._client = client
        if self._client is None and api_key is not None:
            try:
                self._client = Posthog(
                    project_api_key=api_key if isinstance(api_key, str) else api_key.get_secret_value(),
                    host=host,
                    disabled=disabled,
                )
            except Exception:
                self.logger.exception("Failed to initialize crash telemetry client")
                self._client = None
        if self._client is None:
            self.logger.info("Crash telemetry disabled by configuration")

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def capture_exception(self, error: BaseException, extras: Mapping[str, Any]) -> str | None:
        if self._client is None:
            return None
        try:
            with new_context(fresh=True, capture_exceptions=False):
                for key, value in extras.items():
                    tag(key, value)
                event_id = self._client.capture_exception(error)
        except Exception:
            self.logger.exception("Failed to capture exception %s", type(error).__name__)
            return None
        self.logger.debug("Exception captured: %s", event_id)
        return event_id

    def shutdown(self) -> None:
        if self._client:
            try:
                self._client.shutdown()
            except Exception:
                self.logger.exception("Error during crash telemetry shutdown")


__all__ = ("CrashTelemetryBackend", "PostHogCrashBackend")
