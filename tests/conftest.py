from types import SimpleNamespace

import anthropic
import httpx
import pytest


def api_connection_error() -> anthropic.APIConnectionError:
    return anthropic.APIConnectionError(
        request=httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    )


class FakeStream:
    def __init__(self, chunks, error=None):
        self.chunks = chunks
        self.error = error

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    @property
    def text_stream(self):
        return self._texts()

    async def _texts(self):
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error


class FakeAsyncClient:
    """Stands in for anthropic.AsyncAnthropic in streaming calls."""

    def __init__(self, chunks=(), error=None, open_error=None):
        self.chunks = list(chunks)
        self.error = error
        self.open_error = open_error
        self.calls = []
        self.messages = SimpleNamespace(stream=self._stream)

    def _stream(self, **kwargs):
        self.calls.append(kwargs)
        if self.open_error is not None:
            raise self.open_error
        return FakeStream(self.chunks, self.error)


class FakeClient:
    """Stands in for anthropic.Anthropic in the context call."""

    def __init__(self, text="", blocks=None, error=None):
        self.error = error
        self.calls = []
        content = list(blocks or [])
        if text:
            content.append(SimpleNamespace(type="text", text=text))
        self.content = content
        self.messages = SimpleNamespace(create=self._create)

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(content=self.content)


LINES = [
    '{"term":"emergency plumber san diego","category":"Positive","adGroup":"Emergency Plumbing",'
    '"positivePhrase":"emergency plumber","negativePhrase":"","competitorBrand":"","locationExclusion":""}',
    '{"term":"plumber jobs","category":"Negative","adGroup":"General","positivePhrase":"",'
    '"negativePhrase":"jobs","competitorBrand":"","locationExclusion":""}',
    '{"term":"roto rooter prices","category":"Competitor","adGroup":"General","positivePhrase":"",'
    '"negativePhrase":"","competitorBrand":"Roto-Rooter","locationExclusion":""}',
]


@pytest.fixture
def streamed_lines():
    return list(LINES)


@pytest.fixture(autouse=True)
def api_env(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
    monkeypatch.delenv("ANALYZER_MODEL", raising=False)
    monkeypatch.delenv("ANALYZER_TIMEOUT", raising=False)
