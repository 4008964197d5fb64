"""Tests for fill-in-middle completion."""

import pytest

from acai.completion_client import (
    FILL_IN_SYSTEM_PROMPT,
    CompletionClient,
    reassemble,
    split_context,
)
from acai.models import Message
from acai.providers import ANTHROPIC_URL, MISTRAL_FIM_URL, Model, Provider


def test_split_and_reassemble_around_marker():
    prefix, suffix = split_context("foo(<fim>)bar")
    assert (prefix, suffix) == ("foo(", ")bar")
    assert reassemble(prefix, "X", suffix) == "foo(X)bar"


def test_split_without_marker():
    assert split_context("def add(a, b):") == ("def add(a, b):", None)
    assert reassemble("def add(a, b):", "\n    return a + b", None) == "def add(a, b):\n    return a + b"


def test_split_uses_first_marker_only():
    assert split_context("a<fim>b<fim>c") == ("a", "b<fim>c")


@pytest.mark.asyncio
async def test_mistral_posts_prefix_and_suffix_to_fim_endpoint(fake_provider, replies):
    fake = fake_provider((200, replies["mistral"]("X")))
    async with fake.client() as http:
        client = CompletionClient(Provider.MISTRAL, Model.CODESTRAL, http_client=http)
        result = await client.complete("foo(<fim>)bar")

    assert result == "foo(X)bar"
    assert str(fake.requests[0].url) == MISTRAL_FIM_URL
    assert fake.requests[0].headers["authorization"] == "Bearer test-mistral_api_key"
    assert fake.bodies[0] == {
        "model": "codestral-latest",
        "prompt": "foo(",
        "suffix": ")bar",
        "stream": False,
        "temperature": 0.0,
        "max_tokens": 1028,
    }
    assert client.get_message_history() == [Message.user("foo("), Message.assistant("X")]


@pytest.mark.asyncio
async def test_mistral_without_marker_omits_suffix(fake_provider, replies):
    fake = fake_provider((200, replies["mistral"](" + 1")))
    async with fake.client() as http:
        client = CompletionClient(Provider.MISTRAL, Model.CODESTRAL, http_client=http).set_top_p(0.5)
        result = await client.complete("x = 1")

    assert result == "x = 1 + 1"
    assert "suffix" not in fake.bodies[0]
    assert fake.bodies[0]["top_p"] == 0.5


@pytest.mark.asyncio
async def test_chat_providers_complete_prefix_only(fake_provider, replies):
    fake = fake_provider((200, replies["anthropic"]("X")))
    async with fake.client() as http:
        client = CompletionClient(Provider.ANTHROPIC, Model.CLAUDE3_HAIKU, http_client=http)
        result = await client.complete("foo(<fim>)bar")

    assert result == "foo(X)bar"
    assert str(fake.requests[0].url) == ANTHROPIC_URL
    assert fake.bodies[0]["system"] == FILL_IN_SYSTEM_PROMPT
    assert fake.bodies[0]["messages"] == [{"role": "user", "content": "foo("}]


@pytest.mark.asyncio
async def test_no_context_sends_nothing(fake_provider, replies):
    fake = fake_provider((200, replies["mistral"]("X")))
    async with fake.client() as http:
        client = CompletionClient(Provider.MISTRAL, Model.CODESTRAL, http_client=http)
        assert await client.complete(None) is None

    assert fake.requests == []


@pytest.mark.asyncio
async def test_empty_reply_yields_none(fake_provider):
    fake = fake_provider((200, {"choices": []}))
    async with fake.client() as http:
        client = CompletionClient(Provider.MISTRAL, Model.CODESTRAL, http_client=http)
        assert await client.complete("foo(<fim>)bar") is None
    assert client.get_message_history() == [Message.user("foo(")]
