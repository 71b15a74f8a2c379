"""Pydantic models for request/response bodies."""
from __future__ import annotations
from datetime import datetime, timezone

from pydantic import BaseModel

MODEL_ID = "gemini-2.0-flash"
MAX_PROMPT_CHARS = 10_000


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a trailing Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class GenerationResponse(BaseModel):
    """Text produced by the provider for a single prompt."""
    text: str
    model: str
    timestamp: str


class HealthOut(BaseModel):
    status: str
    timestamp: str
    environment: str
    version: str


class ErrorOut(BaseModel):
    error: str
    message: str
