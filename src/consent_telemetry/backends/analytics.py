# sourcery skip: name-type-suffix
# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""
Web-analytics channel backends.

`WebAnalyticsBackend` is the contract the dispatcher talks to. `PostHogAnalyticsBackend`
implements it with one PostHog client per tracker descriptor:
- Trackers are initialized once, with the default tracker first
- Named trackers are addressed by label
- Errors are logged, never raised (telemetry never crashes the application)
"""

from __future__ import annotations

import logging

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from posthog import Posthog


if TYPE_CHECKING:
    from consent_telemetry.trackers import TrackerDescriptor


logger = logging.getLogger(__name__)

PAGEVIEW_EVENT = "$pageview"
TIMING_EVENT = "timing"


@dataclass(frozen=True)
class AnalyticsOptions:
    """Options passed when the analytics channels are initialized.

    Attributes:
        test_mode: Accept calls without sending anything.
        cookie_domain: Cookie scope for browser-side trackers.
        site_speed_sample_rate: Percentage of page loads sampled for timings.
    """

    test_mode: bool = True
    cookie_domain: str = "auto"
    site_speed_sample_rate: int = 100


@runtime_checkable
class WebAnalyticsBackend(Protocol):
    """Contract for the web-analytics service."""

    def initialize(self, trackers: Sequence[TrackerDescriptor], options: AnalyticsOptions) -> None: ...

    def pageview(self, path: str, tracker_names: Sequence[str]) -> None: ...

    def event(self, payload: Mapping[str, Any], tracker_names: Sequence[str]) -> None: ...

    def timing(self, payload: Mapping[str, Any], tracker_names: Sequence[str]) -> None: ...

    def set(self, fields: Mapping[str, Any]) -> None: ...


class PostHogAnalyticsBackend:
    """
    Web-analytics backend on top of PostHog.

    Each tracker id is used as a PostHog project key. Fields passed to `set` apply to
    the default tracker only; a `userId` field becomes its distinct id.

    Example:
        >>> backend = PostHogAnalyticsBackend(host="https://us.i.posthog.com")
        >>> backend.initialize(registry, AnalyticsOptions(test_mode=False))
        >>> backend.pageview("/$/discover", ["tracker2"])
    """

    def __init__(
        self,
        host: str = "https://us.i.posthog.com",
        *,
        client_factory: Callable[..., Posthog] = Posthog,
        session_id: str | None = None,
    ) -> None:
        from uuid import uuid4

        self.host = host
        self.logger = logging.getLogger(__name__)
        self._client_factory = client_factory
        self._session_id = session_id or uuid4().hex
        self._default: Posthog | None = None
        self._named: dict[str, Posthog] = {}
        self._fields: dict[str, Any] = {}
        self._user_id: str | None = None
        self._missing_channels: set[str] = set()

    @property
    def initialized(self) -> bool:
        return self._default is not None

    @property
    def fields(self) -> Mapping[str, Any]:
        return dict(self._fields)

    def initialize(self, trackers: Sequence[TrackerDescriptor], options: AnalyticsOptions) -> None:
        if self.initialized:
            self.logger.warning("Analytics channels already initialized; ignoring")
            return
        for index, tracker in enumerate(trackers):
            try:
                client = self._client_factory(
                    project_api_key=tracker.id, host=self.host, disabled=options.test_mode
                )
            except Exception:
                self.logger.exception("Failed to initialize analytics channel %s", tracker.id)
                continue
            if index == 0:
                self._default = client
            elif tracker.label:
                self._named[tracker.label] = client
        self.logger.info(
            "Analytics channels initialized (named=%s, test_mode=%s)",
            sorted(self._named),
            options.test_mode,
        )

    def _resolve(self, tracker_names: Sequence[str]) -> list[Posthog]:
        if not tracker_names:
            return [self._default] if self._default else []
        clients = []
        for name in tracker_names:
            if client := self._named.get(name):
                clients.append(client)
            elif name not in self._missing_channels:
                self._missing_channels.add(name)
                self.logger.info("No analytics channel named %s; its calls are dropped", name)
        return clients

    def _capture(self, event: str, properties: dict[str, Any], tracker_names: Sequence[str]) -> None:
        for client in self._resolve(tracker_names):
            is_default = client is self._default
            distinct_id = (self._user_id if is_default else None) or self._session_id
            props = {**self._fields, **properties} if is_default else properties
            try:
                _ = client.capture(event=event, distinct_id=distinct_id, properties=props)
                self.logger.debug("Analytics event sent: %s", event)
            except Exception:
                # Never fail application due to telemetry
                self.logger.exception("Failed to send analytics event '%s'", event)

    def pageview(self, path: str, tracker_names: Sequence[str]) -> None:
        self._capture(PAGEVIEW_EVENT, {"$current_url": path, "path": path}, tracker_names)

    def event(self, payload: Mapping[str, Any], tracker_names: Sequence[str]) -> None:
        self._capture(str(payload["category"]), dict(payload), tracker_names)

    def timing(self, payload: Mapping[str, Any], tracker_names: Sequence[str]) -> None:
        self._capture(TIMING_EVENT, dict(payload), tracker_names)

    def set(self, fields: Mapping[str, Any]) -> None:
        for key, value in fields.items():
            if key == "userId":
                self._user_id = value
            else:
                self._fields[key] = value

    def shutdown(self) -> None:
        """
        Flush pending events and close every channel.

        Should be called at application shutdown to ensure all events
        are sent before exit.
        """
        for client in (self._default, *self._named.values()):
            if client is None:
                continue
            try:
                client.shutdown()
            except Exception:
                self.logger.exception("Error during analytics channel shutdown")


__all__ = (
    "PAGEVIEW_EVENT",
    "TIMING_EVENT",
    "AnalyticsOptions",
    "PostHogAnalyticsBackend",
    "WebAnalyticsBackend",
)
