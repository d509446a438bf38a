# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""
Tests for outbound payload records.

Unset optional fields must be absent from payloads, while explicit zero or empty
values are kept.
"""

from __future__ import annotations

import pytest

from consent_telemetry.records import (
    ClaimResult,
    EventRecord,
    PublishLogParams,
    TimingRecord,
    ViewLogParams,
)


pytestmark = [pytest.mark.unit, pytest.mark.telemetry]


class TestEventPayloads:
    def test_omits_unset_label_and_value(self) -> None:
        payload = EventRecord(category="Engagement", action="Email-Provided").to_payload()

        assert payload == {"category": "Engagement", "action": "Email-Provided"}

    def test_keeps_zero_and_empty_values(self) -> None:
        payload = EventRecord(category="c", action="a", label="", value=0).to_payload()

        assert payload["label"] == ""
        assert payload["value"] == 0

    def test_timing_serializes_value_key(self) -> None:
        payload = TimingRecord(category="Media", variable="TimeToStart", value_ms=1250).to_payload()

        assert payload == {"category": "Media", "variable": "TimeToStart", "value": 1250}

    def test_timing_with_label(self) -> None:
        payload = TimingRecord(
            category="Media", variable="BufferTimestamp", value_ms=5, label="abc"
        ).to_payload()

        assert payload["label"] == "abc"


class TestViewParams:
    def test_for_web_drops_time_to_start(self) -> None:
        params = ViewLogParams(uri="u", outpoint="o", claim_id="c", time_to_start=42)

        assert params.for_web().to_payload() == {"uri": "u", "outpoint": "o", "claim_id": "c"}
        assert params.to_payload()["time_to_start"] == 42


class TestClaimResult:
    def test_publish_params_with_signing_channel(self) -> None:
        claim = ClaimResult.model_validate({
            "permanent_url": "lbry://video#abc",
            "claim_id": "abc",
            "txid": "deadbeef",
            "nout": 0,
            "signing_channel": {"claim_id": "chan123", "name": "@chan"},
            "amount": "0.01",
        })

        assert claim.to_publish_params().to_payload() == {
            "uri": "lbry://video#abc",
            "claim_id": "abc",
            "outpoint": "deadbeef:0",
            "channel_claim_id": "chan123",
        }

    def test_publish_params_without_signing_channel(self) -> None:
        claim = ClaimResult(permanent_url="lbry://x#1", claim_id="1", txid="ff", nout=3)
        payload = claim.to_publish_params().to_payload()

        assert payload["outpoint"] == "ff:3"
        assert "channel_claim_id" not in payload

    def test_publish_params_reject_unknown_fields(self) -> None:
        with pytest.raises(ValueError):
            PublishLogParams(uri="u", claim_id="c", outpoint="o", extra="nope")  # type: ignore[call-arg]
