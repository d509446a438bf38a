# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""
Analytics channels active for a session.

The registry is built once at startup and never changes afterwards. The first
descriptor is the default channel; later descriptors are named channels that must be
addressed explicitly.
"""

from __future__ import annotations

import logging

from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING
from urllib.parse import parse_qs, urlsplit

from pydantic import BaseModel, ConfigDict

from consent_telemetry.platform import PlatformVariant


if TYPE_CHECKING:
    from consent_telemetry.config.settings import TelemetrySettings


logger = logging.getLogger(__name__)


class TrackerDescriptor(BaseModel):
    """One analytics channel, optionally addressable by name."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str | None = None


def traffic_source_from_url(url: str | None, param: str = "utm_source") -> str | None:
    """Read the traffic source query parameter from the initial URL."""
    if not url:
        return None
    values = parse_qs(urlsplit(url).query).get(param)
    return values[0] if values else None


class TrackerRegistry(Sequence[TrackerDescriptor]):
    """Ordered, immutable set of tracker descriptors."""

    __slots__ = ("_trackers",)

    def __init__(self, trackers: Sequence[TrackerDescriptor]) -> None:
        self._trackers = tuple(trackers)

    @classmethod
    def build(
        cls,
        platform: PlatformVariant,
        traffic_source: str | None,
        *,
        settings: TelemetrySettings,
    ) -> TrackerRegistry:
        """Select the channels for this platform and inbound traffic source.

        Desktop reports to a single channel. Web reports to its primary channel plus
        the named secondary channel, except for visitors arriving from the excluded
        traffic source, who are never reported to the secondary channel.
        """
        if platform is PlatformVariant.DESKTOP:
            return cls((TrackerDescriptor(id=settings.desktop_tracker_id),))

        trackers = [TrackerDescriptor(id=settings.web_tracker_id)]
        if traffic_source == settings.excluded_traffic_source:
            logger.debug("Traffic source %s excluded from the secondary channel", traffic_source)
        else:
            trackers.append(
                TrackerDescriptor(
                    id=settings.web_secondary_tracker_id, label=settings.secondary_tracker_name
                )
            )
        return cls(trackers)

    def __getitem__(self, index):  # type: ignore[override]
        return self._trackers[index]

    def __len__(self) -> int:
        return len(self._trackers)

    def __iter__(self) -> Iterator[TrackerDescriptor]:
        return iter(self._trackers)

    def __repr__(self) -> str:
        return f"TrackerRegistry({list(self._trackers)!r})"

    @property
    def default(self) -> TrackerDescriptor:
        return self._trackers[0]

    @property
    def names(self) -> tuple[str, ...]:
        """Labels of the named channels, in registration order."""
        return tuple(tracker.label for tracker in self._trackers[1:] if tracker.label)

    def named(self, name: str) -> TrackerDescriptor | None:
        return next((tracker for tracker in self._trackers if tracker.label == name), None)


__all__ = ("TrackerDescriptor", "TrackerRegistry", "traffic_source_from_url")
