"""Acai configuration."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigurationError
from .providers import CREDENTIAL_VARS, Provider

load_dotenv()


def _default_data_dir() -> Path:
    base = os.getenv("XDG_DATA_HOME") or os.path.join(os.path.expanduser("~"), ".local", "share")
    return Path(base) / "acai"


@dataclass
class Config:
    """Configuration loaded from environment variables."""

    # Storage
    data_dir: Path = field(default_factory=lambda:
        Path(os.getenv("ACAI_DATA_DIR") or _default_data_dir()).expanduser())
    save_history: bool = field(default_factory=lambda:
        os.getenv("ACAI_SAVE_HISTORY", "true").lower() == "true")

    # Logging
    log_level: str = field(default_factory=lambda:
        "DEBUG" if os.getenv("DEBUG") else os.getenv("ACAI_LOG_LEVEL", "INFO").upper())

    # HTTP
    http_timeout: float = field(default_factory=lambda: float(os.getenv("ACAI_HTTP_TIMEOUT", "300")))
    connect_timeout: float = field(default_factory=lambda: float(os.getenv("ACAI_CONNECT_TIMEOUT", "10")))

    @property
    def log_path(self) -> Path:
        """File that receives the full log."""
        return self.data_dir / "acai.log"

    def credential_for(self, provider: Provider) -> str:
        """
        Look up the API key for a provider.

        Raises ConfigurationError naming the variable when it is unset or blank.
        """
        var = CREDENTIAL_VARS[provider]
        token = os.getenv(var, "").strip()
        if not token:
            raise ConfigurationError(f"Environment variable {var} is not set ({provider.value} API key)")
        return token


# Global config instance
config = Config()
