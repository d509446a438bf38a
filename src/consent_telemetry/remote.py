# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Consent-gated first-party structured events (views, publishes, searches)."""

from __future__ import annotations

import logging

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from consent_telemetry.platform import PlatformVariant
from consent_telemetry.records import ClaimResult, ViewLogParams


if TYPE_CHECKING:
    import asyncio

    from consent_telemetry.backends.event_api import EventApiClient
    from consent_telemetry.common.tasks import BackgroundTasks
    from consent_telemetry.consent import ConsentStore


logger = logging.getLogger(__name__)


class RemoteEventAPI:
    """Facade over the first-party event API.

    `log_view` returns the API result to the awaiting caller. The other operations
    are fire-and-forget: they return the background task, which may be discarded.
    """

    def __init__(
        self,
        consent: ConsentStore,
        client: EventApiClient,
        tasks: BackgroundTasks,
        *,
        platform: PlatformVariant,
        is_production: bool = False,
        dev_api_override: bool = False,
    ) -> None:
        self._consent = consent
        self._client = client
        self._tasks = tasks
        self._platform = platform
        self._is_production = is_production
        self._dev_api_override = dev_api_override

    @property
    def _internal_allowed(self) -> bool:
        return self._consent.internal_enabled and self._is_production

    async def log_view(self, params: ViewLogParams) -> Any | None:
        if not (self._consent.internal_enabled and (self._is_production or self._dev_api_override)):
            return None
        if self._platform is PlatformVariant.WEB:
            params = params.for_web()
        return await self._client.call("file", "view", params.to_payload())

    def log_publish(self, claim: ClaimResult | Mapping[str, Any]) -> asyncio.Task[Any] | None:
        if not self._internal_allowed:
            return None
        if not isinstance(claim, ClaimResult):
            claim = ClaimResult.model_validate(claim)
        payload = claim.to_publish_params().to_payload()
        return self._tasks.spawn(self._client.call("event", "publish", payload), name="log-publish")

    def log_search(self) -> asyncio.Task[Any] | None:
        if not self._internal_allowed:
            return None
        return self._tasks.spawn(self._client.call("event", "search"), name="log-search")

    def log_search_feedback(self, query: str, vote: int | str) -> asyncio.Task[Any] | None:
        # Not gated by consent flags.
        if not self._is_production:
            return None
        return self._tasks.spawn(
            self._client.call("feedback", "search", {"query": query, "vote": vote}),
            name="log-search-feedback",
        )


__all__ = ("RemoteEventAPI",)
