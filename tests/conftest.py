from __future__ import annotations

import pytest

from gemini_relay.common.settings import Settings


class FakeProvider:
    """Stands in for GeminiClient; records prompts instead of calling out."""

    model = "gemini-2.0-flash"

    def __init__(self, text: str = "Hello test", exc: Exception | None = None) -> None:
        self.text = text
        self.exc = exc
        self.calls: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.calls.append(prompt)
        if self.exc is not None:
            raise self.exc
        return self.text


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, gemini_api_key="test-key", environment="test")


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()
