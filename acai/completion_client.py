"""Fill-in-middle code completion client."""

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from .adapters import parse_mistral
from .chat_client import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE, ChatCompletionClient
from .config import config
from .models import Message
from .providers import MISTRAL_FIM_URL, Model, Provider, auth_headers
from .transport import post_json

logger = logging.getLogger(__name__)

# Separates the prefix from the suffix in submitted context
FIM_MARKER = "<fim>"

FILL_IN_SYSTEM_PROMPT = (
    "You are a code completion engine. Continue the code you are given. "
    "Reply with the continuation only: no explanations, no Markdown fences, "
    "and do not repeat the code you were given."
)


def split_context(text: str) -> Tuple[str, Optional[str]]:
    """Split text at the first marker into prefix and optional suffix."""
    index = text.find(FIM_MARKER)
    if index == -1:
        return text, None
    return text[:index], text[index + len(FIM_MARKER):]


def reassemble(prefix: str, reply: str, suffix: Optional[str]) -> str:
    """prefix + reply + suffix, the suffix omitted when there is none."""
    if suffix is None:
        return f"{prefix}{reply}"
    return f"{prefix}{reply}{suffix}"


class CompletionClient:
    """
    Single-turn completion between a prefix and an optional suffix.

    Mistral's FIM endpoint receives both; other providers only see the
    prefix through their chat endpoint.
    """

    def __init__(
        self,
        provider: Provider,
        model: Model,
        token: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.provider = provider
        self.model = model
        self.token = token if token is not None else config.credential_for(provider)

        self.temperature: Optional[float] = DEFAULT_TEMPERATURE
        self.top_p: Optional[float] = None
        self.max_tokens: Optional[int] = DEFAULT_MAX_TOKENS

        self.messages: List[Message] = []
        self._http_client = http_client

    def set_temperature(self, temperature: Optional[float]) -> "CompletionClient":
        if temperature is not None:
            self.temperature = temperature
        return self

    def set_top_p(self, top_p: Optional[float]) -> "CompletionClient":
        if top_p is not None:
            self.top_p = top_p
        return self

    def set_max_tokens(self, max_tokens: Optional[int]) -> "CompletionClient":
        if max_tokens is not None:
            self.max_tokens = max_tokens
        return self

    def build_fim_request(self, prefix: str, suffix: Optional[str]) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "model": self.model.value,
            "prompt": prefix,
            "stream": False,
        }
        if suffix is not None:
            body["suffix"] = suffix
        for key, value in (
            ("temperature", self.temperature),
            ("max_tokens", self.max_tokens),
            ("top_p", self.top_p),
        ):
            if value is not None:
                body[key] = value
        return body

    async def send_message(self, prefix: str, suffix: Optional[str] = None) -> Optional[Message]:
        """Request the text between prefix and suffix."""
        self.messages.append(Message.user(prefix))

        if self.provider == Provider.MISTRAL:
            body = self.build_fim_request(prefix, suffix)
            logger.info(f"Requesting fill-in-middle from {self.model.value} (suffix={'yes' if suffix is not None else 'no'})")
            data = await post_json(
                MISTRAL_FIM_URL,
                body,
                auth_headers(self.provider, self.token),
                self.model,
                http_client=self._http_client,
            )
            reply = parse_mistral(data)
        else:
            chat = (
                ChatCompletionClient(
                    self.provider,
                    self.model,
                    FILL_IN_SYSTEM_PROMPT,
                    token=self.token,
                    http_client=self._http_client,
                )
                .set_temperature(self.temperature)
                .set_top_p(self.top_p)
                .set_max_tokens(self.max_tokens)
            )
            logger.info(f"Requesting completion from {self.model.value} through chat endpoint")
            reply = await chat.send_message(Message.user(prefix))

        if reply is not None:
            self.messages.append(reply)
        return reply

    async def complete(self, context: Optional[str]) -> Optional[str]:
        """
        Complete context containing at most one FIM marker.

        Returns the reassembled text, or None when there is no context or
        no reply.
        """
        if context is None:
            return None

        prefix, suffix = split_context(context)
        reply = await self.send_message(prefix, suffix)
        if reply is None:
            return None
        return reassemble(prefix, reply.content, suffix)

    def get_message_history(self) -> List[Message]:
        return list(self.messages)
