"""Relay handler: validate a prompt, forward it once, shape the reply."""
from __future__ import annotations
import logging
from typing import Any

from gemini_relay.common.errors import (
    EmptyResponseError,
    InvalidTypeError,
    MissingPromptError,
    ProviderError,
    RelayError,
    TooLongError,
)
from gemini_relay.common.schema import MAX_PROMPT_CHARS, GenerationResponse, utc_timestamp
from gemini_relay.relay.gemini_client import TextProvider

LOGGER = logging.getLogger("gemini_relay.relay.handler")


def validate_prompt(payload: Any) -> str:
    """
    Return the prompt from a decoded JSON body or raise a ClientInputError.

    Args:
        payload: Decoded request body. Anything other than an object counts
            as a body without a prompt.
    """
    prompt = payload.get("prompt") if isinstance(payload, dict) else None
    if prompt is None or prompt == "":
        raise MissingPromptError()
    if not isinstance(prompt, str):
        raise InvalidTypeError()
    # Counts code points; astral characters count once, not as surrogate pairs.
    if len(prompt) > MAX_PROMPT_CHARS:
        raise TooLongError()
    return prompt


async def relay_prompt(payload: Any, provider: TextProvider) -> GenerationResponse:
    prompt = validate_prompt(payload)

    try:
        text = await provider.generate(prompt)
        if not text:
            raise EmptyResponseError("Empty response from Gemini")
    except RelayError as e:
        LOGGER.error("Gemini API error: %s", e.detail)
        raise
    except Exception as e:
        LOGGER.error("Gemini API error: %s", e)
        raise ProviderError(str(e)) from e

    LOGGER.info("Gemini API success - prompt length: %d chars", len(prompt))
    return GenerationResponse(text=text, model=provider.model, timestamp=utc_timestamp())
