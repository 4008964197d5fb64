"""Data models shared by the clients and the language server."""

from enum import Enum
from typing import Any, Dict, List

from cattrs.errors import BaseValidationError
from lsprotocol.converters import get_converter
from lsprotocol.types import Range
from pydantic import BaseModel, ConfigDict, field_serializer, field_validator


# ============================================================================
# Canonical Message Model
# ============================================================================

class Role(str, Enum):
    """Provider-agnostic message role."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """One conversation turn. Immutable once built."""
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(role=Role.ASSISTANT, content=content)

    def to_wire(self) -> Dict[str, str]:
        """{role, content} dict as OpenAI, Mistral and Anthropic expect it."""
        return {"role": self.role.value, "content": self.content}


# ============================================================================
# Code Action Resolution Data
# ============================================================================

# Converts lsprotocol types to and from their JSON form
lsp_converter = get_converter()


class CodeActionData(BaseModel):
    """Resolution data round-tripped by the editor between offer and resolve."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str
    document_uri: str
    range: Range

    @field_validator("range", mode="before")
    @classmethod
    def _structure_range(cls, value: Any) -> Range:
        if isinstance(value, Range):
            return value
        try:
            return lsp_converter.structure(value, Range)
        except (BaseValidationError, KeyError, TypeError, ValueError) as e:
            raise ValueError(f"invalid range {value!r}") from e

    @field_serializer("range")
    def _unstructure_range(self, value: Range) -> Dict[str, Any]:
        return lsp_converter.unstructure(value)


def dump_messages(messages: List[Message]) -> List[Dict[str, str]]:
    """Serialize messages to plain {role, content} dicts."""
    return [m.to_wire() for m in messages]
