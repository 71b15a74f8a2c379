"""Async client for the Gemini generateContent REST endpoint.

Every failure leaves this module as one of AuthError, QuotaError or
ProviderError so callers never inspect raw provider messages.
"""
from __future__ import annotations
import logging
from typing import Any, Protocol

import httpx

from gemini_relay.common.errors import AuthError, ProviderError, QuotaError, RelayError
from gemini_relay.common.schema import MODEL_ID

LOGGER = logging.getLogger("gemini_relay.relay.gemini")


class TextProvider(Protocol):
    model: str

    async def generate(self, prompt: str) -> str:
        ...


def classify_failure(
    message: str,
    *,
    http_status: int | None = None,
    status: str | None = None,
    reason: str | None = None,
) -> RelayError:
    """Map a provider failure to a tagged error.

    Message checks come first and "API key" wins over "quota", so exactly
    one variant is chosen.
    """
    if "API key" in message:
        return AuthError(message)
    if "quota" in message:
        return QuotaError(message)
    if reason == "API_KEY_INVALID" or status == "UNAUTHENTICATED" or http_status == 401:
        return AuthError(message)
    if status == "RESOURCE_EXHAUSTED" or http_status == 429:
        return QuotaError(message)
    return ProviderError(message)


def _error_from_response(r: httpx.Response) -> RelayError:
    try:
        err = r.json().get("error") or {}
    except (ValueError, AttributeError):
        err = {}
    if not isinstance(err, dict):
        err = {}
    message = str(err.get("message") or f"HTTP {r.status_code}")
    reason = None
    for d in err.get("details") or []:
        if isinstance(d, dict) and d.get("reason"):
            reason = d["reason"]
            break
    return classify_failure(
        message,
        http_status=r.status_code,
        status=err.get("status"),
        reason=reason,
    )


def extract_text(data: dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate; "" when there are none."""
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(p.get("text", "") for p in parts if isinstance(p, dict))


class GeminiClient:
    """One outbound generateContent call per prompt, no retries."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://generativelanguage.googleapis.com",
        model: str = MODEL_ID,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self.base_url}/v1beta/models/{self.model}:generateContent"

    async def generate(self, prompt: str) -> str:
        headers = {"x-goog-api-key": self.api_key}
        payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.post(self.url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise classify_failure(str(e) or type(e).__name__) from e

        if r.is_error:
            raise _error_from_response(r)

        try:
            data = r.json()
            return extract_text(data)
        except (ValueError, AttributeError, TypeError) as e:
            LOGGER.error("Malformed Gemini response: %s", e)
            raise ProviderError(f"Malformed Gemini response: {e}") from e
