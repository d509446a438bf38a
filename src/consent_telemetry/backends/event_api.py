# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Client for the platform's first-party event-collection API.

Calls are form-encoded POSTs to `{base_url}/{namespace}/{action}`. The API replies
with `{"success": bool, "error": str | null, "data": ...}`; `call` returns `data`
or raises `BackendError`.

Usage:
    client = EventApiClient("https://api.lbry.com", auth_token="...")
    await client.call("event", "search", {})
    await client.aclose()
"""

from __future__ import annotations

import logging

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Self

import httpx

from pydantic.types import SecretStr

from consent_telemetry.exceptions import BackendError


if TYPE_CHECKING:
    from consent_telemetry.config.settings import TelemetrySettings


logger = logging.getLogger(__name__)


class EventApiClient:
    """Async client for the first-party event API.

    Without an injected `client`, each call opens a short-lived `httpx.AsyncClient`,
    so calls are safe from any event loop.
    """

    def __init__(
        self,
        base_url: str,
        *,
        auth_token: SecretStr | str | None = None,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._auth_token = auth_token.get_secret_value() if isinstance(auth_token, SecretStr) else auth_token
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, settings: TelemetrySettings) -> Self:
        return cls(
            settings.effective_api_url,
            auth_token=settings.auth_token,
            timeout=settings.request_timeout,
        )

    def _form(self, params: Mapping[str, Any]) -> dict[str, str]:
        form = {key: _form_value(value) for key, value in params.items() if value is not None}
        if self._auth_token:
            form["auth_token"] = self._auth_token
        return form

    async def call(self, namespace: str, action: str, params: Mapping[str, Any] | None = None) -> Any:
        """POST an event and return the response `data` field."""
        url = f"{self.base_url}/{namespace}/{action}"
        form = self._form(params or {})
        logger.debug("Calling event API %s/%s", namespace, action)
        if self._client is not None:
            response = await self._client.post(url, data=form, timeout=self.timeout)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, data=form)
        return _unwrap(response, namespace, action)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _unwrap(response: httpx.Response, namespace: str, action: str) -> Any:
    details = {"namespace": namespace, "action": action, "status_code": response.status_code}
    try:
        body = response.json()
    except ValueError as e:
        raise BackendError("Event API returned a non-JSON response", details=details) from e
    if not isinstance(body, dict):
        raise BackendError("Event API returned an unexpected response", details=details)
    if not body.get("success"):
        raise BackendError(str(body.get("error") or "Event API call failed"), details=details)
    return body.get("data")


__all__ = ("EventApiClient",)
