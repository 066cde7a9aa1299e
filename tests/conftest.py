"""Shared fixtures."""

import asyncio

import pytest

from subtitle_translator.errors import ProviderError
from subtitle_translator.providers import TranslationProvider


class FakeProvider(TranslationProvider):
    """Prefixes every text with the target language; records each call."""

    provider_id = "fake"

    def __init__(self, fail_on=(), delays=None, error=None):
        super().__init__({})
        self.calls = []
        self.fail_on = set(fail_on)
        self.delays = delays or {}
        self.error = error
        self.active = 0
        self.max_active = 0

    async def translate(self, text, source_language, target_language):
        self.calls.append(text)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delays.get(text, 0))
            if text in self.fail_on:
                raise self.error or ProviderError("service unavailable", 503)
            return f"[{target_language}] {text}"
        finally:
            self.active -= 1


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def make_provider():
    return FakeProvider
