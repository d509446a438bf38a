# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0

"""Unit test fixtures."""

from __future__ import annotations

import os

from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

from consent_telemetry.backends.analytics import AnalyticsOptions
from consent_telemetry.backends.event_api import EventApiClient
from consent_telemetry.config.settings import TelemetrySettings
from consent_telemetry.storage import MemoryStore


class RecordingAnalytics:
    """Web-analytics backend that records every call in order."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any, tuple[str, ...]]] = []
        self.trackers: list[Any] = []
        self.options: AnalyticsOptions | None = None
        self.fields: dict[str, Any] = {}

    def initialize(self, trackers: Sequence[Any], options: AnalyticsOptions) -> None:
        self.trackers = list(trackers)
        self.options = options
        self.calls.append(("initialize", len(self.trackers), ()))

    def pageview(self, path: str, tracker_names: Sequence[str]) -> None:
        self.calls.append(("pageview", path, tuple(tracker_names)))

    def event(self, payload: Mapping[str, Any], tracker_names: Sequence[str]) -> None:
        self.calls.append(("event", dict(payload), tuple(tracker_names)))

    def timing(self, payload: Mapping[str, Any], tracker_names: Sequence[str]) -> None:
        self.calls.append(("timing", dict(payload), tuple(tracker_names)))

    def set(self, fields: Mapping[str, Any]) -> None:
        self.fields.update(fields)
        self.calls.append(("set", dict(fields), ()))

    def of_kind(self, kind: str) -> list[tuple[str, Any, tuple[str, ...]]]:
        return [call for call in self.calls if call[0] == kind]


class RecordingCrash:
    """Crash backend that records captures and hands out sequential ids."""

    def __init__(self) -> None:
        self.captures: list[tuple[BaseException, dict[str, Any]]] = []

    def capture_exception(self, error: BaseException, extras: Mapping[str, Any]) -> str | None:
        self.captures.append((error, dict(extras)))
        return f"event-{len(self.captures)}"


@pytest.fixture(autouse=True)
def isolated_test_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Ensure all tests run in isolated environment.

    - Temporary HOME and XDG config directory
    - No CONSENT_TELEMETRY_* variables or .env file leaking in
    - Settings cache reset between tests
    """
    from consent_telemetry.config.settings import reset_settings

    fake_home = tmp_path / "home"
    fake_home.mkdir(exist_ok=True)
    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(fake_home / ".config"))
    monkeypatch.setenv("APPDATA", str(fake_home / "AppData"))
    for name in list(os.environ):
        if name.startswith("CONSENT_TELEMETRY_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)

    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def make_settings(tmp_path: Path) -> Callable[..., TelemetrySettings]:
    """Factory for settings with a consent file inside tmp_path."""

    def _make(**overrides: Any) -> TelemetrySettings:
        values: dict[str, Any] = {
            "environment": "production",
            "platform": "web",
            "consent_store_path": tmp_path / "consent.json",
        }
        values.update(overrides)
        return TelemetrySettings(**values)

    return _make


@pytest.fixture
def analytics() -> RecordingAnalytics:
    return RecordingAnalytics()


@pytest.fixture
def crash() -> RecordingCrash:
    return RecordingCrash()


@pytest.fixture
def event_api() -> AsyncMock:
    client = AsyncMock(spec=EventApiClient)
    client.call.return_value = {"ok": True}
    return client


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()
