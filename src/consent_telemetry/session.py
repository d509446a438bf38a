# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""
Telemetry session: the single object wiring consent, channels and backends.

Construct one at startup and pass it to every call site. Nothing in this package
keeps module-level mutable state, so tests can build a fresh session each time.

Example:
    >>> session = TelemetrySession.from_settings(initial_url="https://lbry.tv/?utm_source=x")
    >>> session.start()
    >>> session.on_location_changed("/$/discover", "?t=new")
    >>> session.dispatcher.startup()
"""

from __future__ import annotations

import logging

from typing import TYPE_CHECKING, Self

from consent_telemetry.backends.analytics import AnalyticsOptions, PostHogAnalyticsBackend
from consent_telemetry.backends.crash import PostHogCrashBackend
from consent_telemetry.backends.event_api import EventApiClient
from consent_telemetry.common.tasks import BackgroundTasks
from consent_telemetry.config.settings import TelemetrySettings, get_settings
from consent_telemetry.consent import ConsentStore
from consent_telemetry.dispatcher import EventDispatcher
from consent_telemetry.platform import Location, PlatformVariant, create_adapter
from consent_telemetry.remote import RemoteEventAPI
from consent_telemetry.reporting import ErrorReporter
from consent_telemetry.trackers import TrackerRegistry, traffic_source_from_url


if TYPE_CHECKING:
    from consent_telemetry.backends.analytics import WebAnalyticsBackend
    from consent_telemetry.backends.crash import CrashTelemetryBackend
    from consent_telemetry.platform import PlatformAdapter


logger = logging.getLogger(__name__)


class TelemetrySession:
    """Owns the consent store, tracker registry and every dispatch surface."""

    def __init__(
        self,
        settings: TelemetrySettings,
        adapter: PlatformAdapter,
        *,
        analytics: WebAnalyticsBackend,
        crash_backend: CrashTelemetryBackend,
        event_api: EventApiClient,
        initial_url: str | None = None,
    ) -> None:
        if adapter.variant is not settings.platform:
            logger.warning(
                "Adapter variant %s does not match configured platform %s",
                adapter.variant,
                settings.platform,
            )
        self.settings = settings
        self.adapter = adapter
        self.analytics = analytics
        self.crash_backend = crash_backend
        self.event_api = event_api
        self.initial_url = initial_url
        self.tasks = BackgroundTasks()
        self._started = False

        traffic_source = (
            traffic_source_from_url(initial_url, settings.traffic_source_param)
            if adapter.variant is PlatformVariant.WEB
            else None
        )
        self.registry = TrackerRegistry.build(adapter.variant, traffic_source, settings=settings)
        self.consent = ConsentStore(adapter)
        self.dispatcher = EventDispatcher(
            self.consent,
            analytics,
            adapter,
            self.tasks,
            secondary_tracker_name=settings.secondary_tracker_name,
            is_production=settings.is_production,
        )
        self.errors = ErrorReporter(
            self.consent, event_api, crash_backend, is_production=settings.is_production
        )
        self.remote = RemoteEventAPI(
            self.consent,
            event_api,
            self.tasks,
            platform=adapter.variant,
            is_production=settings.is_production,
            dev_api_override=settings.dev_api_override,
        )

    @classmethod
    def from_settings(
        cls,
        settings: TelemetrySettings | None = None,
        *,
        initial_url: str | None = None,
        adapter: PlatformAdapter | None = None,
    ) -> Self:
        """Build a session with the default PostHog and HTTP backends."""
        settings = settings or get_settings()
        return cls(
            settings,
            adapter or create_adapter(settings),
            analytics=PostHogAnalyticsBackend(host=settings.analytics_host),
            crash_backend=PostHogCrashBackend(
                settings.crash_api_key,
                host=settings.analytics_host,
                disabled=not settings.is_production,
            ),
            event_api=EventApiClient.from_settings(settings),
            initial_url=initial_url,
        )

    @property
    def started(self) -> bool:
        return self._started

    def start(self) -> None:
        """Initialize the analytics channels and report the first page view.

        Later route changes are reported through `on_location_changed`.
        """
        if self._started:
            logger.debug("Telemetry session already started")
            return
        self._started = True
        self.analytics.initialize(
            self.registry,
            AnalyticsOptions(
                test_mode=not self.settings.is_production,
                cookie_domain=self.settings.cookie_domain,
                site_speed_sample_rate=self.settings.site_speed_sample_rate,
            ),
        )
        if self.adapter.variant is PlatformVariant.DESKTOP:
            self.analytics.set({"checkProtocolTask": None})
            self.analytics.set({"location": self.settings.desktop_origin})
        location = Location.from_url(self.initial_url) if self.initial_url else Location()
        self.dispatcher.page_view(self.adapter.compute_initial_path(location))

    def on_location_changed(self, path: str, query: str = "") -> None:
        """Navigation hook: report one page view per route transition."""
        if query and not query.startswith("?"):
            query = f"?{query}"
        self.dispatcher.page_view(f"{path}{query}")

    async def aclose(self) -> None:
        """Wait for background calls, then flush and close every backend."""
        await self.tasks.drain()
        self.tasks.close()
        for backend in (self.analytics, self.crash_backend):
            if shutdown := getattr(backend, "shutdown", None):
                shutdown()
        await self.event_api.aclose()


__all__ = ("TelemetrySession",)
