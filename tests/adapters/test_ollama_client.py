"""Unit tests for OllamaClient with a fake aiohttp session."""

import aiohttp
import pytest
from unittest.mock import patch

from codeagent.adapters.llm.ollama_client import OllamaClient, ShowModelResponse
from codeagent.domain.errors import TransportError
from codeagent.domain.stream import reassemble


def _mock_aiohttp_session(status=200, lines=(), data=None, body="", error=None):
    """Return a class that replaces aiohttp.ClientSession and records posts."""
    calls = []

    class FakeContent:
        def __init__(self, items):
            self._items = list(items)

        def __aiter__(self):
            return self

        async def __anext__(self):
            if not self._items:
                raise StopAsyncIteration
            return self._items.pop(0)

    class FakeResponse:
        def __init__(self):
            self.status = status
            self.content = FakeContent(lines)

        async def json(self):
            return data

        async def text(self):
            return body

        async def __aenter__(self):
            return self

        async def __aexit__(self, *args):
            pass

    class FakeSession:
        def __init__(self, **kwargs):
            self.kwargs = kwargs

        def post(self, url, **kwargs):
            if error is not None:
                raise error
            calls.append({"url": url, **kwargs})
            return FakeResponse()

        async def __aenter__(self):
            return self

        async def __aexit__(self, *args):
            pass

    FakeSession.calls = calls
    return FakeSession


def _collect(agen):
    async def _run():
        return [line async for line in agen]

    return _run()


class TestStreamGenerate:
    @pytest.mark.asyncio
    async def test_yields_decoded_lines(self):
        session = _mock_aiohttp_session(
            lines=[b'{"response":"Hi"}\n', b'{"response":"!","done":true}\n']
        )
        client = OllamaClient("http://ollama:11434/")
        with patch("codeagent.adapters.llm.ollama_client.aiohttp.ClientSession", session):
            lines = await _collect(client.stream_generate("User: hi", model="m", system="s"))
        assert lines == ['{"response":"Hi"}\n', '{"response":"!","done":true}\n']
        call = session.calls[0]
        assert call["url"] == "http://ollama:11434/api/generate"
        assert call["json"] == {"model": "m", "prompt": "User: hi", "system": "s", "stream": True}

    @pytest.mark.asyncio
    async def test_empty_system_is_omitted(self):
        session = _mock_aiohttp_session(lines=[])
        client = OllamaClient("http://ollama")
        with patch("codeagent.adapters.llm.ollama_client.aiohttp.ClientSession", session):
            await _collect(client.stream_generate("p", model="m", system=""))
        assert "system" not in session.calls[0]["json"]

    @pytest.mark.asyncio
    async def test_feeds_reassembler(self):
        session = _mock_aiohttp_session(
            lines=[b'{"response":"a"}\n', b"raw line\n", b'{"done":true}\n']
        )
        client = OllamaClient("http://ollama")
        with patch("codeagent.adapters.llm.ollama_client.aiohttp.ClientSession", session):
            result = await reassemble(client.stream_generate("p", model="m"), lambda _: None)
        assert result.text == "araw line"

    @pytest.mark.asyncio
    async def test_bad_status(self):
        session = _mock_aiohttp_session(status=404, body="model not found")
        client = OllamaClient("http://ollama")
        with patch("codeagent.adapters.llm.ollama_client.aiohttp.ClientSession", session):
            with pytest.raises(TransportError, match="unexpected status code: 404"):
                await _collect(client.stream_generate("p", model="m"))

    @pytest.mark.asyncio
    async def test_connection_error(self):
        session = _mock_aiohttp_session(error=aiohttp.ClientConnectionError("refused"))
        client = OllamaClient("http://ollama")
        with patch("codeagent.adapters.llm.ollama_client.aiohttp.ClientSession", session):
            with pytest.raises(TransportError, match="failed to send request"):
                await _collect(client.stream_generate("p", model="m"))


class TestShowModel:
    @pytest.mark.asyncio
    async def test_parses_response(self):
        session = _mock_aiohttp_session(
            data={
                "license": "MIT",
                "parameters": "context_length: 8192",
                "details": {"family": "qwen", "parameter_size": "30B"},
                "model_info": {"ignored": True},
            }
        )
        client = OllamaClient("http://ollama")
        with patch("codeagent.adapters.llm.ollama_client.aiohttp.ClientSession", session):
            info = await client.show_model("qwen")
        assert isinstance(info, ShowModelResponse)
        assert info.details.family == "qwen"
        assert info.parameters == "context_length: 8192"
        assert session.calls[0]["json"] == {"name": "qwen"}

    @pytest.mark.asyncio
    async def test_bad_status(self):
        session = _mock_aiohttp_session(status=500, body="oops")
        client = OllamaClient("http://ollama")
        with patch("codeagent.adapters.llm.ollama_client.aiohttp.ClientSession", session):
            with pytest.raises(TransportError):
                await client.show_model("qwen")
