# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""
Typed records for outbound telemetry payloads.

Optional fields default to None and are left out of the serialized payload. An
unset label is absent on the wire; a label of "" or a value of 0 is sent as is.
"""

from __future__ import annotations

from typing import Annotated, Any, Self

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, NonNegativeInt


RECORD_CONFIG = ConfigDict(
    frozen=True,
    serialize_by_alias=True,
    validate_by_alias=True,
    validate_by_name=True,
    extra="forbid",
)


class TelemetryRecord(BaseModel):
    """Base for records that serialize to an outbound payload."""

    model_config = RECORD_CONFIG

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the backend, omitting unset optional fields."""
        return self.model_dump(mode="json", exclude_none=True)


class EventRecord(TelemetryRecord):
    """A generic analytics event."""

    category: str
    action: str
    label: str | None = None
    value: float | None = None


class TimingRecord(TelemetryRecord):
    """A timing metric in milliseconds."""

    category: str
    variable: str
    value_ms: Annotated[float, Field(alias="value")]
    label: str | None = None


class ViewLogParams(TelemetryRecord):
    """Parameters of a first-party `file/view` call."""

    uri: str
    outpoint: str
    claim_id: str
    time_to_start: Annotated[
        NonNegativeFloat | None,
        Field(default=None, description="Milliseconds until playback started. Desktop only."),
    ]

    def for_web(self) -> Self:
        """Copy without the start latency, which the web variant does not report."""
        return self.model_copy(update={"time_to_start": None})


class PublishLogParams(TelemetryRecord):
    """Parameters of a first-party `event/publish` call."""

    uri: str
    claim_id: str
    outpoint: str
    channel_claim_id: str | None = None


class SigningChannel(BaseModel):
    """Reference to the channel that signed a claim."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    claim_id: str


class ClaimResult(BaseModel):
    """The subset of a publish result needed to log the publish."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    permanent_url: str
    claim_id: str
    txid: str
    nout: NonNegativeInt
    signing_channel: SigningChannel | None = None

    @property
    def outpoint(self) -> str:
        return f"{self.txid}:{self.nout}"

    def to_publish_params(self) -> PublishLogParams:
        return PublishLogParams(
            uri=self.permanent_url,
            claim_id=self.claim_id,
            outpoint=self.outpoint,
            channel_claim_id=self.signing_channel.claim_id if self.signing_channel else None,
        )


__all__ = (
    "ClaimResult",
    "EventRecord",
    "PublishLogParams",
    "SigningChannel",
    "TelemetryRecord",
    "TimingRecord",
    "ViewLogParams",
)
