# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""
Consent flags gating what telemetry may leave the device.

Two independent flags:
- internal: first-party events and crash reports
- third party: web-analytics channels

Flags only change through explicit toggles. Reads and writes are last-writer-wins;
a dispatch uses whatever value is current when it checks.
"""

from __future__ import annotations

import logging

from typing import TYPE_CHECKING, Final

from pydantic.dataclasses import dataclass


if TYPE_CHECKING:
    from consent_telemetry.platform import PlatformAdapter


logger = logging.getLogger(__name__)

SHARE_INTERNAL: Final[str] = "shareInternal"
SHARE_THIRD_PARTY: Final[str] = "shareThirdParty"


@dataclass(frozen=True)
class ConsentFlags:
    """Snapshot of both consent flags."""

    internal_enabled: bool
    third_party_enabled: bool


class ConsentStore:
    """Holds the consent flags for one telemetry session.

    Flags start from the platform default. Where the platform persists consent, a
    persisted grant overrides the default at construction time.
    """

    def __init__(self, adapter: PlatformAdapter) -> None:
        self._adapter = adapter
        default = adapter.default_consent
        self._internal = default
        self._third_party = default
        if not adapter.consent_pinned:
            if adapter.read_persisted_flag(SHARE_INTERNAL):
                self._internal = True
            if adapter.read_persisted_flag(SHARE_THIRD_PARTY):
                self._third_party = True
        logger.debug(
            "Consent initialized (internal=%s, third_party=%s)", self._internal, self._third_party
        )

    @property
    def internal_enabled(self) -> bool:
        return self._internal

    @property
    def third_party_enabled(self) -> bool:
        return self._third_party

    def get(self) -> ConsentFlags:
        return ConsentFlags(internal_enabled=self._internal, third_party_enabled=self._third_party)

    def set_internal(self, enabled: bool) -> None:
        """Grant or revoke internal analytics consent. No-op where consent is pinned."""
        if self._adapter.consent_pinned:
            return
        self._internal = enabled
        self._adapter.persist_flag(SHARE_INTERNAL, enabled=enabled)

    def set_third_party(self, enabled: bool) -> None:
        """Grant or revoke third-party analytics consent. No-op where consent is pinned."""
        if self._adapter.consent_pinned:
            return
        self._third_party = enabled
        self._adapter.persist_flag(SHARE_THIRD_PARTY, enabled=enabled)


__all__ = ("SHARE_INTERNAL", "SHARE_THIRD_PARTY", "ConsentFlags", "ConsentStore")
