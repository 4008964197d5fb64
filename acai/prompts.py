"""User prompt rendering for the chat operations."""

from pathlib import Path
from typing import Dict, Mapping, Union

DEFAULT_TEMPLATE = "{prompt}\n\n{context}"


class _Blank(Dict[str, str]):
    """Placeholders without a value render as empty text."""

    def __missing__(self, key: str) -> str:
        return ""


class PromptBuilder:
    """Fills `{prompt}` and `{context}` placeholders of a str.format template."""

    def __init__(self, template: str = DEFAULT_TEMPLATE):
        self.template = template

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "PromptBuilder":
        return cls(Path(path).read_text(encoding="utf-8"))

    def build(self, data: Mapping[str, str]) -> str:
        return self.template.format_map(_Blank(data)).strip()
