# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""
Consent-gated dispatch to the web-analytics channels.

Page views, events and timings go to the named secondary channel only. The default
channel receives initialization and `set` calls but no page views or events from
here. Disabled consent is a silent no-op, never an error.
"""

from __future__ import annotations

import logging

from typing import TYPE_CHECKING

from consent_telemetry.platform import PlatformVariant
from consent_telemetry.records import EventRecord, TimingRecord


if TYPE_CHECKING:
    import asyncio

    from consent_telemetry.backends.analytics import WebAnalyticsBackend
    from consent_telemetry.common.tasks import BackgroundTasks
    from consent_telemetry.consent import ConsentStore
    from consent_telemetry.platform import PlatformAdapter


logger = logging.getLogger(__name__)


class EventDispatcher:
    """Public event-emission surface for web analytics."""

    def __init__(
        self,
        consent: ConsentStore,
        backend: WebAnalyticsBackend,
        adapter: PlatformAdapter,
        tasks: BackgroundTasks,
        *,
        secondary_tracker_name: str = "tracker2",
        is_production: bool = False,
    ) -> None:
        self._consent = consent
        self._backend = backend
        self._adapter = adapter
        self._tasks = tasks
        self._channels = (secondary_tracker_name,)
        self._is_production = is_production

    @property
    def _events_allowed(self) -> bool:
        return self._consent.third_party_enabled and self._is_production

    def page_view(self, path: str) -> None:
        if not self._consent.third_party_enabled:
            logger.debug("Third-party analytics disabled; skipping page view")
            return
        self._backend.pageview(path, self._channels)

    def event(
        self,
        category: str,
        action: str,
        label: str | None = None,
        value: float | None = None,
    ) -> None:
        if not self._events_allowed:
            logger.debug("Analytics event %s/%s skipped", category, action)
            return
        record = EventRecord(category=category, action=action, label=label, value=value)
        self._backend.event(record.to_payload(), self._channels)

    def timing_event(
        self, category: str, action: str, value_ms: float, label: str | None = None
    ) -> None:
        if not self._events_allowed:
            logger.debug("Timing event %s/%s skipped", category, action)
            return
        record = TimingRecord(category=category, variable=action, value_ms=value_ms, label=label)
        self._backend.timing(record.to_payload(), self._channels)

    def set_user(self, user_id: str | None) -> asyncio.Task[None] | None:
        """Associate `user_id` with the analytics session.

        On platforms that report their app version, a version event is sent in the
        background; the returned task may be discarded.
        """
        if not (self._consent.third_party_enabled and user_id):
            return None
        self._backend.set({"userId": user_id})
        if self._adapter.variant is PlatformVariant.DESKTOP:
            return self._tasks.spawn(self._report_app_version(), name="app-version")
        return None

    async def _report_app_version(self) -> None:
        version = await self._adapter.get_app_version()
        if version:
            self.event("Desktop-Version", version)

    def video_start(self, claim_id: str, duration_s: float) -> None:
        self.timing_event("Media", "TimeToStart", round(duration_s * 1000), claim_id)

    def video_buffer(self, claim_id: str, current_time_s: float) -> None:
        self.timing_event("Media", "BufferTimestamp", current_time_s * 1000, claim_id)

    def tag_follow(self, tag: str, following: bool, location: str | None = None) -> None:
        self.event("Tag-Follow" if following else "Tag-Unfollow", tag)

    def channel_block(self, uri: str, blocked: bool, location: str | None = None) -> None:
        self.event("Channel-Hidden" if blocked else "Channel-Unhidden", uri)

    def email_provided(self) -> None:
        self.event("Engagement", "Email-Provided")

    def email_verified(self) -> None:
        self.event("Engagement", "Email-Verified")

    def reward_eligible(self) -> None:
        self.event("Engagement", "Reward-Eligible")

    def open_url(self, url: str) -> None:
        self.event("Engagement", "Open-Url", url)

    def startup(self) -> None:
        self.event("Startup", "Startup")

    def ready(self, time_to_ready_ms: float) -> None:
        self.event("Startup", "App-Ready")
        self.timing_event("Startup", "App-Ready", time_to_ready_ms)


__all__ = ("EventDispatcher",)
