"""Error types raised by the provider clients and the editor mediation layer."""

from typing import Any, Optional


class AcaiError(Exception):
    """Base class for every error surfaced to callers."""


class ConfigurationError(AcaiError):
    """Required configuration (usually a provider credential) is missing."""


class TransportError(AcaiError):
    """Connection or I/O failure while talking to a provider."""


class ProviderError(AcaiError):
    """
    Provider answered with a non-success status.

    The message holds the model display name followed by the
    pretty-printed response body.
    """

    def __init__(self, model: str, status_code: int, body: Any, formatted: str):
        super().__init__(f"{model}\n\n{formatted}")
        self.model = model
        self.status_code = status_code
        self.body = body


class DecodeError(AcaiError):
    """Response body is not JSON or does not match the provider schema."""


class InvalidActionError(AcaiError):
    """Code action resolution data could not be decoded."""

    def __init__(self, message: str, action_id: Optional[str] = None):
        super().__init__(message)
        self.action_id = action_id
