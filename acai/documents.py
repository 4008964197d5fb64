"""Text of the documents the editor has open."""

import asyncio
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from lsprotocol.types import Position, Range

logger = logging.getLogger(__name__)


def split_lines(text: str) -> List[str]:
    """Split on newlines, dropping carriage returns and the empty tail after a final newline."""
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def position_offset(text: str, position: Position) -> int:
    """Index into text of a line/character position, clamped to the text."""
    offset = 0
    for _ in range(position.line):
        newline = text.find("\n", offset)
        if newline == -1:
            return len(text)
        offset = newline + 1
    line_end = text.find("\n", offset)
    if line_end == -1:
        line_end = len(text)
    return min(offset + position.character, line_end)


def _clamp(start: int, end: int, count: int) -> Tuple[int, int]:
    start = min(start, count)
    end = min(max(end, start), count)
    return start, end


class DocumentStore:
    """
    In-memory map from document URI to full text.

    Handles:
    - First text on open (a reopened document keeps its tracked text)
    - Whole-text replacement on save and on full-sync changes
    - Character-range splicing for incremental changes
    - Line-range extraction for code action context

    One lock guards the map; it is held only for the map access itself.
    Entries are never removed.
    """

    def __init__(self):
        self._sources: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def insert_on_open(self, uri: str, text: str) -> bool:
        """Track a newly opened document. Returns False if it was already tracked."""
        async with self._lock:
            if uri in self._sources:
                logger.debug(f"Already tracking {uri}, keeping existing text")
                return False
            self._sources[uri] = text
        logger.info(f"Tracking {uri} ({len(text)} chars)")
        return True

    async def replace_on_save(self, uri: str, text: Optional[str]) -> bool:
        """Overwrite the text of a saved document. No text means nothing to do."""
        if text is None:
            return False
        async with self._lock:
            self._sources[uri] = text
        logger.debug(f"Updated {uri} on save ({len(text)} chars)")
        return True

    async def apply_changes(self, uri: str, changes: Sequence) -> bool:
        """
        Apply content change events in order.

        A change without a range replaces the whole text. A ranged change
        replaces the characters between its start and end positions.
        Ranged changes to an untracked document are ignored.
        """
        async with self._lock:
            source = self._sources.get(uri)
            for change in changes:
                change_range = getattr(change, "range", None)
                if change_range is None:
                    source = change.text
                    continue
                if source is None:
                    logger.warning(f"Ignoring ranged change to untracked document {uri}")
                    return False
                start = position_offset(source, change_range.start)
                end = max(position_offset(source, change_range.end), start)
                source = source[:start] + change.text + source[end:]
            if source is None:
                return False
            self._sources[uri] = source
        return True

    async def close(self, uri: str) -> None:
        """Closing keeps the tracked text."""
        logger.debug(f"Closed {uri}")

    async def get(self, uri: str) -> Optional[str]:
        async with self._lock:
            return self._sources.get(uri)

    async def extract_selection(self, uri: str, range: Range) -> Tuple[Optional[str], Range]:
        """
        Text of lines [range.start.line, range.end.line) and the range it covers.

        The text is None when the document is untracked. Line numbers past
        the end of the tracked text are clamped and the returned range is
        narrowed to match; a fully out-of-range request yields an empty
        string.
        """
        async with self._lock:
            source = self._sources.get(uri)
        if source is None:
            return None, range

        lines = split_lines(source)
        start, end = _clamp(range.start.line, range.end.line, len(lines))
        text = "\n".join(lines[start:end])
        if (start, end) == (range.start.line, range.end.line):
            return text, range

        logger.warning(
            f"Range {range.start.line}-{range.end.line} clamped to {start}-{end} "
            f"for {uri} ({len(lines)} lines)"
        )
        clamped = Range(
            start=range.start if start == range.start.line else Position(line=start, character=0),
            end=range.end if end == range.end.line else Position(line=end, character=0),
        )
        return text, clamped

    async def extract_range(self, uri: str, range: Range) -> Optional[str]:
        """Lines [range.start.line, range.end.line) joined by newlines, None when untracked."""
        text, _ = await self.extract_selection(uri, range)
        return text

    @property
    def document_count(self) -> int:
        return len(self._sources)
