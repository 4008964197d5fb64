"""
Provider response adapters.

Each adapter validates one provider's success payload and turns it into
a canonical assistant message. A well-formed response without text
yields None; a payload that does not match the schema raises DecodeError.
"""

from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ValidationError

from .errors import DecodeError
from .models import Message, Role
from .providers import Provider


# ============================================================================
# OpenAI / Mistral
# ============================================================================

class _ChoiceMessage(BaseModel):
    role: Optional[str] = None
    content: Optional[str] = None


class _Choice(BaseModel):
    index: int = 0
    message: Optional[_ChoiceMessage] = None
    finish_reason: Optional[str] = None


class ChatCompletionResponse(BaseModel):
    """choices[] schema shared by OpenAI and Mistral."""
    id: Optional[str] = None
    model: Optional[str] = None
    choices: List[_Choice] = []


# ============================================================================
# Anthropic
# ============================================================================

class _ContentBlock(BaseModel):
    type: str
    text: Optional[str] = None


class AnthropicResponse(BaseModel):
    id: Optional[str] = None
    model: Optional[str] = None
    content: List[_ContentBlock] = []
    stop_reason: Optional[str] = None


# ============================================================================
# Google
# ============================================================================

class _Part(BaseModel):
    text: Optional[str] = None


class _Content(BaseModel):
    role: Optional[str] = None
    parts: List[_Part] = []


class _Candidate(BaseModel):
    content: Optional[_Content] = None
    finish_reason: Optional[str] = None


class GoogleResponse(BaseModel):
    candidates: List[_Candidate] = []


def _validate(schema: type, data: Any, provider: Provider):
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise DecodeError(f"Unexpected {provider.value} response: {e}") from e


def _assistant(text: Optional[str]) -> Optional[Message]:
    if not text:
        return None
    return Message(role=Role.ASSISTANT, content=text)


def parse_openai(data: Any) -> Optional[Message]:
    response = _validate(ChatCompletionResponse, data, Provider.OPENAI)
    if not response.choices or response.choices[0].message is None:
        return None
    return _assistant(response.choices[0].message.content)


def parse_mistral(data: Any) -> Optional[Message]:
    response = _validate(ChatCompletionResponse, data, Provider.MISTRAL)
    if not response.choices or response.choices[0].message is None:
        return None
    return _assistant(response.choices[0].message.content)


def parse_anthropic(data: Any) -> Optional[Message]:
    response = _validate(AnthropicResponse, data, Provider.ANTHROPIC)
    texts = [block.text for block in response.content if block.type == "text" and block.text]
    return _assistant("".join(texts))


def parse_google(data: Any) -> Optional[Message]:
    response = _validate(GoogleResponse, data, Provider.GOOGLE)
    if not response.candidates or response.candidates[0].content is None:
        return None
    texts = [part.text for part in response.candidates[0].content.parts if part.text]
    return _assistant("".join(texts))


RESPONSE_ADAPTERS: Dict[Provider, Callable[[Any], Optional[Message]]] = {
    Provider.ANTHROPIC: parse_anthropic,
    Provider.OPENAI: parse_openai,
    Provider.MISTRAL: parse_mistral,
    Provider.GOOGLE: parse_google,
}


def parse_response(provider: Provider, data: Any) -> Optional[Message]:
    """Parse a success payload with the provider's adapter."""
    return RESPONSE_ADAPTERS[provider](data)


# Google names the assistant "model" and has no in-list system role
GOOGLE_ROLES: Dict[Role, str] = {
    Role.USER: "user",
    Role.ASSISTANT: "model",
    Role.SYSTEM: "user",
}


def to_google_content(message: Message) -> Dict[str, Any]:
    """Render a canonical message as a Google `contents` entry."""
    return {
        "role": GOOGLE_ROLES[message.role],
        "parts": {"text": message.content},
    }
