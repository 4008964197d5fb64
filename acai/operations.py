"""
AI operations used by the command line and the code actions.

Each operation resolves its model, renders a user prompt from an
optional instruction and an optional code context, runs one request
and saves the resulting conversation.
"""

import logging
from dataclasses import dataclass, field
from typing import ClassVar, Dict, List, Optional, Type

import httpx

from .chat_client import ChatCompletionClient
from .completion_client import CompletionClient
from .config import config
from .history import DataDir
from .models import Message
from .prompts import PromptBuilder
from .providers import Model, Provider, ProviderModel, resolve

logger = logging.getLogger(__name__)


@dataclass
class Operation:
    """Options shared by every operation."""
    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    prompt: Optional[str] = None
    context: Optional[str] = None
    http_client: Optional[httpx.AsyncClient] = field(default=None, repr=False)

    default_model: ClassVar[ProviderModel] = (Provider.OPENAI, Model.GPT4O)

    def provider_model(self) -> ProviderModel:
        return resolve(self.model or "", self.default_model)

    def _save(self, messages: List[Message]) -> None:
        if config.save_history:
            DataDir().save_messages(messages)


@dataclass
class ChatOperation(Operation):
    """Operation answered by a chat completion."""

    system_prompt: ClassVar[str] = ""

    def render(self) -> Optional[str]:
        """User message text, or None when there is no prompt and no code."""
        data: Dict[str, str] = {}
        if self.prompt:
            data["prompt"] = self.prompt
        if self.context:
            data["context"] = self.context
        if not data:
            return None
        return PromptBuilder().build(data)

    async def send(self) -> Optional[Message]:
        content = self.render()
        if content is None:
            logger.info(f"{type(self).__name__}: no prompt or context, nothing to send")
            return None

        provider, model = self.provider_model()
        client = (
            ChatCompletionClient(provider, model, self.system_prompt, http_client=self.http_client)
            .set_temperature(self.temperature)
            .set_top_p(self.top_p)
            .set_max_tokens(self.max_tokens)
        )

        response = await client.send_message(Message.user(content))
        self._save(client.get_message_history())
        return response


@dataclass
class Instruct(ChatOperation):
    system_prompt: ClassVar[str] = (
        "You are a helpful coding assistant. Follow the instructions in the prompt and in the "
        "comments of the provided code snippet and reply with the complete updated snippet. "
        "The answer should be in plain text without Markdown formatting."
    )


@dataclass
class Document(ChatOperation):
    system_prompt: ClassVar[str] = (
        "Add documentation to the provided code snippet. Use the documentation comment style "
        "that is idiomatic for the language and keep the code itself unchanged. Reply with the "
        "documented snippet only. The answer should be in plain text without Markdown formatting."
    )


@dataclass
class Fix(ChatOperation):
    system_prompt: ClassVar[str] = (
        "Fix the bugs in the provided code snippet. Keep the structure and naming of the code "
        "and change only what is needed. Reply with the corrected snippet only. The answer "
        "should be in plain text without Markdown formatting."
    )


@dataclass
class Optimize(ChatOperation):
    system_prompt: ClassVar[str] = (
        "Optimize the provided code snippet for readability and performance without changing "
        "its behaviour. Reply with the optimized snippet only. The answer should be in plain "
        "text without Markdown formatting."
    )


@dataclass
class Suggest(ChatOperation):
    system_prompt: ClassVar[str] = (
        "Add todo comments to the provided code snippet. The todo comments are to be added to "
        "parts of the code that can be improved or fixed. Each the todo comment should explain "
        "what needs to be done and give a short explanation of why the change should be made. "
        "The answer should be in plain text without Markdown formatting."
    )


@dataclass
class Complete(Operation):
    """Fill-in-middle completion of the context."""

    default_model: ClassVar[ProviderModel] = (Provider.MISTRAL, Model.CODESTRAL)

    async def send(self) -> Optional[str]:
        if not self.context:
            return None

        provider, model = self.provider_model()
        client = (
            CompletionClient(provider, model, http_client=self.http_client)
            .set_temperature(self.temperature)
            .set_top_p(self.top_p)
            .set_max_tokens(self.max_tokens)
        )

        result = await client.complete(self.context)
        self._save(client.get_message_history())
        return result


CHAT_OPERATIONS: Dict[str, Type[ChatOperation]] = {
    "instruct": Instruct,
    "document": Document,
    "fix": Fix,
    "optimize": Optimize,
    "suggest": Suggest,
}
