"""Multi-turn chat completion client over the supported providers."""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

import httpx

from .adapters import parse_response, to_google_content
from .config import config
from .models import Message, Role
from .providers import Model, Provider, auth_headers, chat_endpoint
from .transport import post_json

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.0
DEFAULT_MAX_TOKENS = 1028

# Providers that take the system prompt as the first history message
INLINE_SYSTEM_PROVIDERS = (Provider.OPENAI, Provider.MISTRAL)


class ChatCompletionClient:
    """
    Chat session against one provider and model.

    Handles:
    - Credential lookup at construction (ConfigurationError when missing)
    - Generation parameters set through chained setters
    - Provider-specific request bodies and response parsing
    - Conversation history, which keeps the system prompt in-list only
      for OpenAI and Mistral
    """

    def __init__(
        self,
        provider: Provider,
        model: Model,
        system_prompt: str,
        token: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.provider = provider
        self.model = model
        self.system = system_prompt
        self.token = token if token is not None else config.credential_for(provider)

        self.temperature: Optional[float] = DEFAULT_TEMPERATURE
        self.top_p: Optional[float] = None
        self.top_k: Optional[int] = None
        self.max_tokens: Optional[int] = DEFAULT_MAX_TOKENS
        self.stop: Optional[List[str]] = None
        self.presence_penalty: Optional[float] = None
        self.frequency_penalty: Optional[float] = None
        self.logit_bias: Optional[Dict[str, float]] = None
        self.user: Optional[str] = None
        self.stream = False

        if provider in INLINE_SYSTEM_PROVIDERS:
            self.messages: List[Message] = [Message.system(system_prompt)]
        else:
            self.messages = []

        self._http_client = http_client
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Configuration (None leaves the current value untouched)
    # ------------------------------------------------------------------

    def set_temperature(self, temperature: Optional[float]) -> "ChatCompletionClient":
        if temperature is not None:
            self.temperature = temperature
        return self

    def set_top_p(self, top_p: Optional[float]) -> "ChatCompletionClient":
        if top_p is not None:
            self.top_p = top_p
        return self

    def set_top_k(self, top_k: Optional[int]) -> "ChatCompletionClient":
        if top_k is not None:
            self.top_k = top_k
        return self

    def set_max_tokens(self, max_tokens: Optional[int]) -> "ChatCompletionClient":
        if max_tokens is not None:
            self.max_tokens = max_tokens
        return self

    def set_stop(self, stop: Optional[List[str]]) -> "ChatCompletionClient":
        if stop is not None:
            self.stop = list(stop)
        return self

    def set_presence_penalty(self, presence_penalty: Optional[float]) -> "ChatCompletionClient":
        if presence_penalty is not None:
            self.presence_penalty = presence_penalty
        return self

    def set_frequency_penalty(self, frequency_penalty: Optional[float]) -> "ChatCompletionClient":
        if frequency_penalty is not None:
            self.frequency_penalty = frequency_penalty
        return self

    def set_logit_bias(self, logit_bias: Optional[Dict[str, float]]) -> "ChatCompletionClient":
        if logit_bias is not None:
            self.logit_bias = dict(logit_bias)
        return self

    def set_user(self, user: Optional[str]) -> "ChatCompletionClient":
        if user is not None:
            self.user = user
        return self

    def set_stream(self, stream: Optional[bool]) -> "ChatCompletionClient":
        if stream is not None:
            self.stream = stream
        return self

    # ------------------------------------------------------------------
    # Conversation
    # ------------------------------------------------------------------

    def build_request(self) -> Dict[str, Any]:
        """Request body for the current history."""
        return BODY_BUILDERS[self.provider](self)

    async def send_message(self, message: Message) -> Optional[Message]:
        """
        Append a message, send the conversation, and return the reply.

        The reply (when present) is appended to history. Returns None when
        the provider produced no text. Transport, protocol and decode
        failures propagate; the outgoing message stays in history.
        """
        async with self._lock:
            self.messages.append(message)

            body = self.build_request()
            url = chat_endpoint(self.provider, self.model, self.token)
            headers = auth_headers(self.provider, self.token)

            logger.info(
                f"Sending {len(self.messages)} messages to {self.provider.value}/{self.model.value}"
            )
            data = await post_json(url, body, headers, self.model, http_client=self._http_client)

            reply = parse_response(self.provider, data)
            if reply is not None:
                self.messages.append(reply)
            else:
                logger.info(f"{self.model.display_name} returned no content")
            return reply

    def get_message_history(self) -> List[Message]:
        """Full conversation with exactly one leading system message."""
        if self.provider in INLINE_SYSTEM_PROVIDERS:
            return list(self.messages)
        return [Message.system(self.system)] + list(self.messages)


# ============================================================================
# Request Builders
# ============================================================================

def _optional(**params: Any) -> Dict[str, Any]:
    return {k: v for k, v in params.items() if v is not None}


def _build_openai_body(client: ChatCompletionClient) -> Dict[str, Any]:
    body = {
        "model": client.model.value,
        "messages": [m.to_wire() for m in client.messages],
        "stream": client.stream,
    }
    body.update(_optional(
        temperature=client.temperature,
        top_p=client.top_p,
        max_tokens=client.max_tokens,
        stop=client.stop,
        presence_penalty=client.presence_penalty,
        frequency_penalty=client.frequency_penalty,
        logit_bias=client.logit_bias,
        user=client.user,
    ))
    return body


def _build_anthropic_body(client: ChatCompletionClient) -> Dict[str, Any]:
    body = {
        "model": client.model.value,
        "system": client.system,
        "messages": [m.to_wire() for m in client.messages if m.role != Role.SYSTEM],
        "stream": client.stream,
    }
    body.update(_optional(
        temperature=client.temperature,
        max_tokens=client.max_tokens,
        top_p=client.top_p,
        top_k=client.top_k,
    ))
    return body


def _build_google_body(client: ChatCompletionClient) -> Dict[str, Any]:
    return {
        "system_instruction": {"parts": {"text": client.system}},
        "contents": [to_google_content(m) for m in client.messages],
    }


BODY_BUILDERS: Dict[Provider, Callable[[ChatCompletionClient], Dict[str, Any]]] = {
    Provider.OPENAI: _build_openai_body,
    Provider.MISTRAL: _build_openai_body,
    Provider.ANTHROPIC: _build_anthropic_body,
    Provider.GOOGLE: _build_google_body,
}
