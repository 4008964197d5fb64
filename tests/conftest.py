"""Shared test fixtures for acai."""

import json

import httpx
import pytest

from acai.config import config
from acai.providers import CREDENTIAL_VARS


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point storage at a temp dir, disable history and provide fake credentials."""
    monkeypatch.setattr(config, "data_dir", tmp_path / "data")
    monkeypatch.setattr(config, "save_history", False)
    for var in CREDENTIAL_VARS.values():
        monkeypatch.setenv(var, f"test-{var.lower()}")
    return config


class FakeProvider:
    """
    Records requests and answers with canned (status, payload) pairs.

    A str payload is sent as plain text, anything else as JSON. The last
    response is repeated once the queue runs out.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, payload = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(payload, str):
            return httpx.Response(status, text=payload)
        return httpx.Response(status, json=payload)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    @property
    def bodies(self):
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def fake_provider():
    return FakeProvider


def openai_reply(text):
    return {
        "id": "chatcmpl-1",
        "model": "gpt-4o",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": text}, "finish_reason": "stop"}],
    }


def anthropic_reply(*texts):
    return {
        "id": "msg_1",
        "model": "claude-3-5-sonnet-20240620",
        "content": [{"type": "text", "text": t} for t in texts],
        "stop_reason": "end_turn",
    }


def google_reply(*texts):
    return {
        "candidates": [
            {"content": {"role": "model", "parts": [{"text": t} for t in texts]}, "finishReason": "STOP"}
        ]
    }


@pytest.fixture
def replies():
    """Builders for provider success payloads."""
    return {
        "openai": openai_reply,
        "mistral": openai_reply,
        "anthropic": anthropic_reply,
        "google": google_reply,
    }
