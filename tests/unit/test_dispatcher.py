# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""
Tests for consent-gated analytics dispatch.

Validates:
- Page views depend on third-party consent only
- Events and timings also require a production build
- Everything is routed to the named secondary channel
- Derived events map to fixed category/action pairs
"""

from __future__ import annotations

import asyncio

import pytest

from consent_telemetry.common.tasks import BackgroundTasks
from consent_telemetry.consent import ConsentStore
from consent_telemetry.dispatcher import EventDispatcher
from consent_telemetry.platform import DesktopAdapter, WebAdapter
from consent_telemetry.storage import MemoryStore


pytestmark = [pytest.mark.unit, pytest.mark.telemetry]

SECONDARY = ("tracker2",)


def make_dispatcher(
    analytics,
    *,
    third_party: bool = True,
    production: bool = True,
    desktop: bool = False,
    version: str | None = "0.53.1",
) -> EventDispatcher:
    if desktop or not third_party:

        async def provider() -> str | None:
            return version

        adapter = DesktopAdapter(MemoryStore(), version_provider=provider)
    else:
        adapter = WebAdapter()
    consent = ConsentStore(adapter)
    consent.set_third_party(third_party)
    return EventDispatcher(
        consent,
        analytics,
        adapter,
        BackgroundTasks(),
        secondary_tracker_name="tracker2",
        is_production=production,
    )


class TestPageView:
    @pytest.mark.parametrize("production", [True, False])
    def test_sent_to_secondary_channel_when_consented(self, analytics, production) -> None:
        make_dispatcher(analytics, production=production).page_view("/$/discover")

        assert analytics.calls == [("pageview", "/$/discover", SECONDARY)]

    @pytest.mark.parametrize("production", [True, False])
    def test_skipped_without_consent(self, analytics, production) -> None:
        make_dispatcher(analytics, third_party=False, production=production).page_view("/")

        assert analytics.calls == []

    def test_consent_checked_at_call_time(self, analytics) -> None:
        dispatcher = make_dispatcher(analytics, desktop=True)
        dispatcher.page_view("/a")
        dispatcher._consent.set_third_party(False)
        dispatcher.page_view("/b")

        assert analytics.calls == [("pageview", "/a", SECONDARY)]

    def test_order_is_preserved(self, analytics) -> None:
        dispatcher = make_dispatcher(analytics)
        for path in ("/1", "/2", "/3"):
            dispatcher.page_view(path)

        assert [call[1] for call in analytics.calls] == ["/1", "/2", "/3"]


class TestEvents:
    def test_event_payload_omits_unset_fields(self, analytics) -> None:
        make_dispatcher(analytics).event("Engagement", "Email-Provided")

        assert analytics.calls == [
            ("event", {"category": "Engagement", "action": "Email-Provided"}, SECONDARY)
        ]

    def test_event_with_label_and_value(self, analytics) -> None:
        make_dispatcher(analytics).event("Cat", "Act", "lbl", 0)

        assert analytics.calls[0][1] == {"category": "Cat", "action": "Act", "label": "lbl", "value": 0}

    def test_event_without_consent_does_not_raise(self, analytics) -> None:
        make_dispatcher(analytics, third_party=False).event("Engagement", "Email-Provided")

        assert analytics.calls == []

    def test_event_skipped_outside_production(self, analytics) -> None:
        dispatcher = make_dispatcher(analytics, production=False)
        dispatcher.event("Startup", "Startup")
        dispatcher.timing_event("Startup", "App-Ready", 10)

        assert analytics.calls == []

    def test_timing_event(self, analytics) -> None:
        make_dispatcher(analytics).timing_event("Startup", "App-Ready", 1500)

        assert analytics.calls == [
            ("timing", {"category": "Startup", "variable": "App-Ready", "value": 1500}, SECONDARY)
        ]


class TestDerivedEvents:
    def test_video_start_converts_seconds_to_rounded_ms(self, analytics) -> None:
        make_dispatcher(analytics).video_start("claim1", 1.2346)

        assert analytics.calls[0][1] == {
            "category": "Media",
            "variable": "TimeToStart",
            "value": 1235,
            "label": "claim1",
        }

    def test_video_buffer(self, analytics) -> None:
        make_dispatcher(analytics).video_buffer("claim1", 12.5)

        kind, payload, _ = analytics.calls[0]
        assert kind == "timing"
        assert payload["variable"] == "BufferTimestamp"
        assert payload["value"] == 12500
        assert payload["label"] == "claim1"

    @pytest.mark.parametrize(("following", "category"), [(True, "Tag-Follow"), (False, "Tag-Unfollow")])
    def test_tag_follow(self, analytics, following, category) -> None:
        make_dispatcher(analytics).tag_follow("science", following, "home")

        assert analytics.calls[0][1] == {"category": category, "action": "science"}

    @pytest.mark.parametrize(("blocked", "category"), [(True, "Channel-Hidden"), (False, "Channel-Unhidden")])
    def test_channel_block(self, analytics, blocked, category) -> None:
        make_dispatcher(analytics).channel_block("lbry://@chan", blocked)

        assert analytics.calls[0][1] == {"category": category, "action": "lbry://@chan"}

    @pytest.mark.parametrize(
        ("method", "action"),
        [
            ("email_provided", "Email-Provided"),
            ("email_verified", "Email-Verified"),
            ("reward_eligible", "Reward-Eligible"),
        ],
    )
    def test_engagement_events(self, analytics, method, action) -> None:
        getattr(make_dispatcher(analytics), method)()

        assert analytics.calls[0][1] == {"category": "Engagement", "action": action}

    def test_open_url(self, analytics) -> None:
        make_dispatcher(analytics).open_url("https://example.com")

        assert analytics.calls[0][1] == {
            "category": "Engagement",
            "action": "Open-Url",
            "label": "https://example.com",
        }

    def test_startup(self, analytics) -> None:
        make_dispatcher(analytics).startup()

        assert analytics.calls[0][1] == {"category": "Startup", "action": "Startup"}

    def test_ready_sends_event_and_timing(self, analytics) -> None:
        make_dispatcher(analytics).ready(3200)

        assert [call[0] for call in analytics.calls] == ["event", "timing"]
        assert analytics.calls[0][1] == {"category": "Startup", "action": "App-Ready"}
        assert analytics.calls[1][1]["value"] == 3200


class TestSetUser:
    def test_web_sets_user_id(self, analytics) -> None:
        task = make_dispatcher(analytics).set_user("user-1")

        assert task is None
        assert analytics.fields == {"userId": "user-1"}
        assert analytics.of_kind("event") == []

    @pytest.mark.parametrize("user_id", ["", None])
    def test_empty_user_id_is_ignored(self, analytics, user_id) -> None:
        make_dispatcher(analytics).set_user(user_id)

        assert analytics.calls == []

    def test_skipped_without_consent(self, analytics) -> None:
        make_dispatcher(analytics, third_party=False).set_user("user-1")

        assert analytics.calls == []

    @pytest.mark.asyncio
    async def test_desktop_reports_app_version(self, analytics) -> None:
        dispatcher = make_dispatcher(analytics, desktop=True)
        task = dispatcher.set_user("user-1")

        assert task is not None
        await task
        assert analytics.of_kind("event") == [
            ("event", {"category": "Desktop-Version", "action": "0.53.1"}, SECONDARY)
        ]

    @pytest.mark.asyncio
    async def test_desktop_version_failure_is_swallowed(self, analytics) -> None:
        async def broken() -> str:
            raise RuntimeError("native bridge unavailable")

        adapter = DesktopAdapter(MemoryStore(), version_provider=broken)
        consent = ConsentStore(adapter)
        consent.set_third_party(True)
        tasks = BackgroundTasks()
        dispatcher = EventDispatcher(consent, analytics, adapter, tasks, is_production=True)

        dispatcher.set_user("user-1")
        await tasks.drain()

        assert analytics.fields == {"userId": "user-1"}
        assert analytics.of_kind("event") == []

    def test_desktop_without_running_loop(self, analytics) -> None:
        async def provider() -> str:
            return "0.53.1"

        adapter = DesktopAdapter(MemoryStore(), version_provider=provider)
        consent = ConsentStore(adapter)
        consent.set_third_party(True)
        tasks = BackgroundTasks()
        dispatcher = EventDispatcher(consent, analytics, adapter, tasks, is_production=True)

        assert dispatcher.set_user("user-1") is None
        asyncio.run(tasks.drain())
        tasks.close()

        assert analytics.of_kind("event")[0][1]["category"] == "Desktop-Version"
