"""Tests for ResilientAnthropicClient - retry policy and error mapping with the SDK mocked.

Invariants:
    - 429 retried honouring Retry-After, then LLMAPIError("rate_limit")
    - 5xx, connection errors and 529 retried with backoff
    - Timeouts and other 4xx fail immediately without retry
    - Text blocks are concatenated; non-text blocks ignored
"""

from types import SimpleNamespace

import anthropic
import httpx
import pytest

from teaminsight.core.errors import ErrorContext, LLMAPIError
from teaminsight.infrastructure.anthropic_client import ResilientAnthropicClient

_REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def _status_error(cls, status, headers=None):
    response = httpx.Response(status, request=_REQUEST, headers=headers or {})
    return cls(f"HTTP {status}", response=response, body=None)


def _reply(*blocks):
    return SimpleNamespace(
        content=list(blocks),
        usage=SimpleNamespace(input_tokens=10, output_tokens=5),
    )


def _text(text):
    return SimpleNamespace(type="text", text=text)


class _FakeMessages:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def sleeps(monkeypatch):
    recorded = []

    async def _no_sleep(seconds):
        recorded.append(seconds)

    monkeypatch.setattr(
        "teaminsight.infrastructure.anthropic_client.asyncio.sleep", _no_sleep,
    )
    return recorded


def _client(outcomes, max_retries=3):
    client = ResilientAnthropicClient(
        "sk-ant-test", "claude-test", default_max_tokens=256, max_retries=max_retries,
        base_delay_ms=100, max_delay_ms=1000,
    )
    fake = _FakeMessages(outcomes)
    client.client = SimpleNamespace(messages=fake)
    return client, fake


async def test_success_joins_text_blocks(sleeps):
    client, fake = _client([
        _reply(_text("שלום "), SimpleNamespace(type="tool_use"), _text("צוות")),
    ])
    text = await client.complete(system="ROLE: x", content="{}")
    assert text == "שלום צוות"
    call = fake.calls[0]
    assert call["model"] == "claude-test"
    assert call["max_tokens"] == 256
    assert call["system"] == "ROLE: x"
    assert call["messages"] == [{"role": "user", "content": "{}"}]


async def test_max_tokens_override(sleeps):
    client, fake = _client([_reply(_text("ok"))])
    await client.complete(system="s", content="c", max_tokens=4096)
    assert fake.calls[0]["max_tokens"] == 4096


async def test_rate_limit_retried_with_retry_after(sleeps):
    client, fake = _client([
        _status_error(anthropic.RateLimitError, 429, {"retry-after": "2"}),
        _reply(_text("ok")),
    ])
    assert await client.complete(system="s", content="c") == "ok"
    assert len(fake.calls) == 2
    assert sleeps == [2.0]


async def test_rate_limit_exhausted_raises(sleeps):
    client, _ = _client(
        [_status_error(anthropic.RateLimitError, 429, {"retry-after": "1"})] * 3,
        max_retries=2,
    )
    with pytest.raises(LLMAPIError) as exc:
        await client.complete(system="s", content="c")
    assert exc.value.api_error_type == "rate_limit"
    assert exc.value.context.retry_after_ms == 1000


async def test_server_error_retried(sleeps):
    client, fake = _client([
        _status_error(anthropic.InternalServerError, 500),
        anthropic.APIConnectionError(request=_REQUEST),
        _reply(_text("ok")),
    ])
    assert await client.complete(system="s", content="c") == "ok"
    assert len(fake.calls) == 3
    assert len(sleeps) == 2


async def test_overloaded_529_retried(sleeps):
    client, fake = _client([
        _status_error(anthropic.APIStatusError, 529),
        _reply(_text("ok")),
    ])
    assert await client.complete(system="s", content="c") == "ok"
    assert len(fake.calls) == 2


async def test_transient_exhausted_raises_connection_error(sleeps):
    client, fake = _client(
        [_status_error(anthropic.InternalServerError, 503)] * 2, max_retries=1,
    )
    with pytest.raises(LLMAPIError) as exc:
        await client.complete(system="s", content="c")
    assert exc.value.api_error_type == "connection_error"
    assert len(fake.calls) == 2


async def test_timeout_not_retried(sleeps):
    client, fake = _client([anthropic.APITimeoutError(request=_REQUEST)])
    ctx = ErrorContext(team_id="T1", session_id="S1", oracle="controller")
    with pytest.raises(LLMAPIError) as exc:
        await client.complete(system="s", content="c", context=ctx)
    assert exc.value.api_error_type == "timeout"
    assert exc.value.context.session_id == "S1"
    assert len(fake.calls) == 1
    assert sleeps == []


async def test_client_error_not_retried(sleeps):
    client, fake = _client([_status_error(anthropic.BadRequestError, 400)])
    with pytest.raises(LLMAPIError) as exc:
        await client.complete(system="s", content="c")
    assert exc.value.api_error_type == "client_error"
    assert len(fake.calls) == 1


def test_backoff_within_jitter_bounds():
    client, _ = _client([])
    for attempt in range(5):
        delay = client._backoff(attempt)
        expected = min(1000, (2 ** attempt) * 100)
        assert expected * 0.75 <= delay <= expected * 1.25
