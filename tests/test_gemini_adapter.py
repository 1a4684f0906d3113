# Tests for GeminiAdapter — the google-genai client is mocked.

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from chatproxy.config import AppSettings
from chatproxy.errors import BackendError
from chatproxy.models.gemini import GeminiAdapter
from chatproxy.models.registry import get_adapter
from chatproxy.services.transcoder import transcode_stream
from conftest import collect


def _chunks(texts, fail_with=None, state=None):
    async def gen():
        try:
            for t in texts:
                if state is not None:
                    state["pulled"] += 1
                yield MagicMock(text=t)
            if fail_with is not None:
                raise fail_with
        finally:
            if state is not None:
                state["closed"] = True
    return gen()


@pytest.fixture
def mock_client():
    client = MagicMock()
    # `async with client.aio as aio` hands back the same async client
    client.aio.__aenter__ = AsyncMock(return_value=client.aio)
    client.aio.__aexit__ = AsyncMock(return_value=False)
    return client


@pytest.fixture
def adapter():
    return GeminiAdapter(api_key="test-key", model_name="gemini-2.0-flash")


class TestGenerateOnce:
    async def test_returns_text(self, adapter, mock_client):
        mock_client.aio.models.generate_content = AsyncMock(return_value=MagicMock(text="Hi there"))
        with patch("chatproxy.models.gemini.genai.Client", return_value=mock_client) as client_cls:
            text = await adapter.generate_once("hello", "Be brief", 0.5)

        assert text == "Hi there"
        client_cls.assert_called_once_with(api_key="test-key")
        kwargs = mock_client.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-2.0-flash"
        assert kwargs["contents"] == "hello"
        assert kwargs["config"].temperature == 0.5

    async def test_client_closed_after_call(self, adapter, mock_client):
        mock_client.aio.models.generate_content = AsyncMock(return_value=MagicMock(text="ok"))
        with patch("chatproxy.models.gemini.genai.Client", return_value=mock_client):
            await adapter.generate_once("hello", "sys", 1.0)
        mock_client.aio.__aexit__.assert_awaited_once()

    async def test_none_text_becomes_empty(self, adapter, mock_client):
        mock_client.aio.models.generate_content = AsyncMock(return_value=MagicMock(text=None))
        with patch("chatproxy.models.gemini.genai.Client", return_value=mock_client):
            assert await adapter.generate_once("hello", "sys", 1.0) == ""

    async def test_sdk_error_wrapped(self, adapter, mock_client):
        mock_client.aio.models.generate_content = AsyncMock(side_effect=RuntimeError("API key not valid"))
        with patch("chatproxy.models.gemini.genai.Client", return_value=mock_client):
            with pytest.raises(BackendError) as exc:
                await adapter.generate_once("hello", "sys", 1.0)
        assert exc.value.detail == "API key not valid"
        assert exc.value.model == "gemini-2.0-flash"
        mock_client.aio.__aexit__.assert_awaited_once()


class TestGenerateStream:
    async def test_yields_fragments(self, adapter, mock_client):
        mock_client.aio.models.generate_content_stream = AsyncMock(
            return_value=_chunks(["Hi", None, " there"])
        )
        with patch("chatproxy.models.gemini.genai.Client", return_value=mock_client):
            fragments = await collect(adapter.generate_stream("hello", "sys", 1.0))
        assert fragments == ["Hi", "", " there"]
        mock_client.aio.__aexit__.assert_awaited_once()

    async def test_mid_stream_error(self, adapter, mock_client):
        mock_client.aio.models.generate_content_stream = AsyncMock(
            return_value=_chunks(["Hi"], fail_with=ConnectionError("reset"))
        )
        seen = []
        with patch("chatproxy.models.gemini.genai.Client", return_value=mock_client):
            with pytest.raises(BackendError, match="reset"):
                async for fragment in adapter.generate_stream("hello", "sys", 1.0):
                    seen.append(fragment)
        assert seen == ["Hi"]
        mock_client.aio.__aexit__.assert_awaited_once()

    async def test_no_call_until_iterated(self, adapter, mock_client):
        mock_client.aio.models.generate_content_stream = AsyncMock(return_value=_chunks([]))
        with patch("chatproxy.models.gemini.genai.Client", return_value=mock_client) as client_cls:
            stream = adapter.generate_stream("hello", "sys", 1.0)
            client_cls.assert_not_called()
            await collect(stream)
        client_cls.assert_called_once()

    async def test_early_close_releases_sdk_stream_and_client(self, adapter, mock_client):
        state = {"pulled": 0, "closed": False}
        mock_client.aio.models.generate_content_stream = AsyncMock(
            return_value=_chunks(["a", "b", "c"], state=state)
        )
        with patch("chatproxy.models.gemini.genai.Client", return_value=mock_client):
            packets = transcode_stream(adapter.generate_stream("hello", "sys", 1.0))
            first = await packets.__anext__()
            await packets.aclose()

        assert first.data.content == "a"
        assert state["closed"] is True
        assert state["pulled"] == 1
        mock_client.aio.__aexit__.assert_awaited_once()


def test_registry_uses_configured_model():
    adapter = get_adapter("k", AppSettings(gemini_model="gemini-test"))
    assert isinstance(adapter, GeminiAdapter)
    assert adapter.model_name == "gemini-test"
