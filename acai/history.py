"""Saved conversation histories."""

import json
import logging
import time
import uuid
from pathlib import Path
from typing import List, Optional

from .config import config
from .models import Message, dump_messages

logger = logging.getLogger(__name__)


class DataDir:
    """Writes each finished conversation to its own JSON file."""

    def __init__(self, base: Optional[Path] = None):
        self.base = base or config.data_dir

    @property
    def messages_dir(self) -> Path:
        return self.base / "messages"

    def save_messages(self, messages: List[Message]) -> Optional[Path]:
        """
        Save messages as a JSON array of {role, content}.

        Returns the written path, or None when saving failed. Failures are
        logged; they never fail the operation that produced the messages.
        """
        if not messages:
            return None

        name = f"{time.strftime('%Y%m%d-%H%M%S')}-{uuid.uuid4().hex[:8]}.json"
        path = self.messages_dir / name
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(dump_messages(messages), indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Failed to save message history to {path}: {e}")
            return None

        logger.debug(f"Saved {len(messages)} messages to {path}")
        return path
