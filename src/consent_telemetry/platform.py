# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""
Platform variant capabilities.

The client ships as a browser-hosted build and a desktop-embedded build. Everything
that differs between them (consent defaults, consent persistence, the local app
version query, and how the first page path is derived) sits behind `PlatformAdapter`
so the rest of the package never branches on the variant directly.
"""

from __future__ import annotations

import logging

from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import TYPE_CHECKING, NamedTuple, Protocol, TypeAlias, runtime_checkable
from urllib.parse import urlsplit

from consent_telemetry.exceptions import ConfigurationError, PersistenceError


if TYPE_CHECKING:
    from consent_telemetry.config.settings import TelemetrySettings
    from consent_telemetry.storage import KeyValueStore


logger = logging.getLogger(__name__)

VersionProvider: TypeAlias = Callable[[], Awaitable[str | None]]


class PlatformVariant(StrEnum):
    """Build variant of the client."""

    WEB = "web"
    DESKTOP = "desktop"

    @classmethod
    def from_string(cls, value: str) -> PlatformVariant:
        try:
            return cls(value.strip().lower())
        except ValueError as e:
            raise ConfigurationError(
                f"Unknown platform variant: {value!r}",
                suggestions=[f"Use one of: {', '.join(member.value for member in cls)}"],
            ) from e


class Location(NamedTuple):
    """The parts of a page URL used to derive page-view paths."""

    path: str = "/"
    search: str = ""
    fragment: str = ""

    @classmethod
    def from_url(cls, url: str) -> Location:
        parts = urlsplit(url)
        return cls(
            path=parts.path or "/",
            search=f"?{parts.query}" if parts.query else "",
            fragment=parts.fragment,
        )


@runtime_checkable
class PlatformAdapter(Protocol):
    """Capabilities that differ between platform variants."""

    variant: PlatformVariant

    @property
    def default_consent(self) -> bool:
        """Initial value of both consent flags."""
        ...

    @property
    def consent_pinned(self) -> bool:
        """True when consent cannot be changed by the user."""
        ...

    def persist_flag(self, key: str, *, enabled: bool) -> None: ...

    def read_persisted_flag(self, key: str) -> bool | None: ...

    async def get_app_version(self) -> str | None: ...

    def compute_initial_path(self, location: Location) -> str: ...


class WebAdapter:
    """Browser-hosted variant: consent is always granted and never persisted."""

    variant = PlatformVariant.WEB

    @property
    def default_consent(self) -> bool:
        return True

    @property
    def consent_pinned(self) -> bool:
        return True

    def persist_flag(self, key: str, *, enabled: bool) -> None:
        logger.debug("Consent is pinned on the web variant; not persisting %s", key)

    def read_persisted_flag(self, key: str) -> bool | None:
        return None

    async def get_app_version(self) -> str | None:
        return None

    def compute_initial_path(self, location: Location) -> str:
        return f"{location.path}{location.search}"


async def _unknown_version() -> str | None:
    return None


def fixed_version(version: str | None) -> VersionProvider:
    """Version provider reporting a version known at startup."""

    async def provider() -> str | None:
        return version

    return provider


class DesktopAdapter:
    """Desktop-embedded variant: consent is off by default and persisted locally.

    Persisted values are the strings "true" and "false". Only the exact string
    "true" counts as granted.
    """

    variant = PlatformVariant.DESKTOP

    def __init__(self, store: KeyValueStore, *, version_provider: VersionProvider | None = None) -> None:
        self.store = store
        self._version_provider = version_provider or _unknown_version

    @property
    def default_consent(self) -> bool:
        return False

    @property
    def consent_pinned(self) -> bool:
        return False

    def persist_flag(self, key: str, *, enabled: bool) -> None:
        try:
            self.store.set(key, "true" if enabled else "false")
        except OSError as e:
            raise PersistenceError(
                "Could not persist consent flag", details={"key": key, "enabled": enabled}
            ) from e

    def read_persisted_flag(self, key: str) -> bool | None:
        value = self.store.get(key)
        if value is None:
            return None
        return value == "true"

    async def get_app_version(self) -> str | None:
        return await self._version_provider()

    def compute_initial_path(self, location: Location) -> str:
        # The app is served from a local .html file; the route follows the file name.
        _, sep, route = location.path.partition(".html")
        if sep and (route or location.search):
            return f"{route}{location.search}"
        return _path_from_fragment(location.fragment)


def _path_from_fragment(fragment: str) -> str:
    route = fragment.lstrip("#")
    if not route:
        return "/"
    return route if route.startswith("/") else f"/{route}"


def create_adapter(
    settings: TelemetrySettings,
    *,
    store: KeyValueStore | None = None,
    version_provider: VersionProvider | None = None,
) -> PlatformAdapter:
    """Build the adapter matching `settings.platform`."""
    if settings.platform is PlatformVariant.WEB:
        return WebAdapter()
    if store is None:
        from consent_telemetry.storage import JsonFileStore

        store = JsonFileStore(settings.consent_store_path)
    if version_provider is None and settings.app_version:
        version_provider = fixed_version(settings.app_version)
    return DesktopAdapter(store, version_provider=version_provider)


__all__ = (
    "DesktopAdapter",
    "Location",
    "PlatformAdapter",
    "PlatformVariant",
    "VersionProvider",
    "WebAdapter",
    "create_adapter",
    "fixed_version",
)
