# Shared fixtures: a scripted stand-in for the Gemini adapter.

from typing import AsyncIterator, Optional

import pytest

from chatproxy.errors import BackendError
from chatproxy.models.base import BaseModelAdapter


class FakeAdapter(BaseModelAdapter):
    """Returns scripted text/fragments and records every call."""

    model_name = "fake-model"

    def __init__(
        self,
        text: str = "",
        fragments: Optional[list[str]] = None,
        error: Optional[str] = None,
        fail_after: Optional[int] = None,
    ):
        self.text = text
        self.fragments = fragments or []
        self.error = error
        self.fail_after = fail_after
        self.calls: list[tuple] = []
        self.api_keys: list[str] = []
        self.pulled = 0
        self.stream_closed = False

    def factory(self, api_key: str) -> "FakeAdapter":
        self.api_keys.append(api_key)
        return self

    async def generate_once(self, contents, system_instruction, temperature) -> str:
        self.calls.append(("once", contents, system_instruction, temperature))
        if self.error:
            raise BackendError(self.error)
        return self.text

    async def generate_stream(self, contents, system_instruction, temperature) -> AsyncIterator[str]:
        self.calls.append(("stream", contents, system_instruction, temperature))
        try:
            for i, fragment in enumerate(self.fragments):
                if self.fail_after is not None and i == self.fail_after:
                    raise BackendError(self.error or "stream broken")
                self.pulled += 1
                yield fragment
        finally:
            self.stream_closed = True


@pytest.fixture
def fake_adapter():
    return FakeAdapter()


async def collect(aiter) -> list:
    return [item async for item in aiter]


async def from_list(items: list[str]) -> AsyncIterator[str]:
    for item in items:
        yield item
