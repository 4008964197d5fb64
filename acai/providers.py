"""Provider and model catalog."""

from enum import Enum
from typing import Dict, Tuple


class Provider(str, Enum):
    """LLM vendor, fixed for the lifetime of a client."""
    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    MISTRAL = "mistral"
    GOOGLE = "google"


class Model(str, Enum):
    """Known models. The value is the identifier sent on the wire."""
    GPT4O = "gpt-4o"
    GPT4_TURBO = "gpt-4-turbo-preview"
    GPT3_TURBO = "gpt-3-turbo"
    CLAUDE3_5_SONNET = "claude-3-5-sonnet-20240620"
    CLAUDE3_OPUS = "claude-3-opus-20240229"
    CLAUDE3_SONNET = "claude-3-sonnet-20240229"
    CLAUDE3_HAIKU = "claude-3-haiku-20240307"
    CODESTRAL = "codestral-latest"
    GEMINI_FLASH = "gemini-1.5-flash-latest"
    GEMINI_PRO = "gemini-1.5-pro-latest"

    @property
    def display_name(self) -> str:
        """Human readable name, never used in requests."""
        return DISPLAY_NAMES[self]

    def __str__(self) -> str:
        return self.value


DISPLAY_NAMES: Dict[Model, str] = {
    Model.GPT4O: "GPT-4o",
    Model.GPT4_TURBO: "GPT-4-Turbo",
    Model.GPT3_TURBO: "GPT-3-Turbo",
    Model.CLAUDE3_5_SONNET: "Claude 3.5 Sonnet",
    Model.CLAUDE3_OPUS: "Claude 3 Opus",
    Model.CLAUDE3_SONNET: "Claude 3 Sonnet",
    Model.CLAUDE3_HAIKU: "Claude 3 Haiku",
    Model.CODESTRAL: "Codestral",
    Model.GEMINI_FLASH: "Gemini 1.5 Flash",
    Model.GEMINI_PRO: "Gemini 1.5 Pro",
}


ProviderModel = Tuple[Provider, Model]


# Friendly aliases accepted on the command line
MODEL_ALIASES: Dict[str, ProviderModel] = {
    "gpt-4o": (Provider.OPENAI, Model.GPT4O),
    "gpt-4-turbo": (Provider.OPENAI, Model.GPT4_TURBO),
    "gpt-3-turbo": (Provider.OPENAI, Model.GPT3_TURBO),
    "sonnet": (Provider.ANTHROPIC, Model.CLAUDE3_5_SONNET),
    "opus": (Provider.ANTHROPIC, Model.CLAUDE3_OPUS),
    "opus3": (Provider.ANTHROPIC, Model.CLAUDE3_OPUS),
    "sonnet3": (Provider.ANTHROPIC, Model.CLAUDE3_SONNET),
    "haiku": (Provider.ANTHROPIC, Model.CLAUDE3_HAIKU),
    "haiku3": (Provider.ANTHROPIC, Model.CLAUDE3_HAIKU),
    "codestral": (Provider.MISTRAL, Model.CODESTRAL),
    "gemini-flash": (Provider.GOOGLE, Model.GEMINI_FLASH),
    "gemini-pro": (Provider.GOOGLE, Model.GEMINI_PRO),
}


def resolve(name: str, default: ProviderModel) -> ProviderModel:
    """Map a friendly model name to its provider and model, or return default."""
    return MODEL_ALIASES.get(name, default)


CREDENTIAL_VARS: Dict[Provider, str] = {
    Provider.ANTHROPIC: "CLAUDE_API_KEY",
    Provider.OPENAI: "OPENAI_API_KEY",
    Provider.MISTRAL: "MISTRAL_API_KEY",
    Provider.GOOGLE: "GOOGLE_API_KEY",
}

ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
OPENAI_URL = "https://api.openai.com/v1/chat/completions"
MISTRAL_URL = "https://api.mistral.ai/v1/chat/completions"
MISTRAL_FIM_URL = "https://api.mistral.ai/v1/fim/completions"
GOOGLE_URL_TEMPLATE = (
    "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent?key={token}"
)


def chat_endpoint(provider: Provider, model: Model, token: str) -> str:
    """Chat endpoint URL for a provider. Google embeds model and key in the URL."""
    if provider == Provider.GOOGLE:
        return GOOGLE_URL_TEMPLATE.format(model=model.value, token=token)
    return {
        Provider.ANTHROPIC: ANTHROPIC_URL,
        Provider.OPENAI: OPENAI_URL,
        Provider.MISTRAL: MISTRAL_URL,
    }[provider]


def auth_headers(provider: Provider, token: str) -> Dict[str, str]:
    """Authentication headers for a provider (Google authenticates in the URL)."""
    if provider == Provider.ANTHROPIC:
        return {"x-api-key": token, "anthropic-version": ANTHROPIC_VERSION}
    if provider in (Provider.OPENAI, Provider.MISTRAL):
        return {"Authorization": f"Bearer {token}"}
    return {}
