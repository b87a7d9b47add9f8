"""Exceptions raised while reading OPF documents."""
from __future__ import annotations

from pathlib import Path

__all__ = [
    "OpfParseError",
    "OpfIOError",
    "OpfXmlError",
    "OpfEncodingError",
    "CoverDecodeError",
]


class OpfParseError(RuntimeError):
    """Base class for everything this package raises."""


class OpfIOError(OpfParseError):
    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        super().__init__(f"I/O error on {self.path}: {reason}")


class OpfXmlError(OpfParseError):
    """Malformed markup reported by the XML tokenizer."""

    def __init__(self, path: Path | str, reason: str, position: tuple[int, int] | None = None) -> None:
        self.path = Path(path)
        self.position = position
        where = f" (line {position[0]}, column {position[1]})" if position else ""
        super().__init__(f"XML parsing error in {self.path}{where}: {reason}")


class OpfEncodingError(OpfXmlError):
    """Byte content that is not valid UTF-8 text."""


class CoverDecodeError(OpfParseError):
    """Cover href holds percent-escapes that are not valid UTF-8."""
