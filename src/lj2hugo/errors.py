"""Error taxonomy for record conversion."""

from __future__ import annotations

from pathlib import Path


class ConversionError(Exception):
    """Base error for a single record conversion."""

    def __init__(self, path: Path | str, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"{self.path}: {message}")


class ReadError(ConversionError):
    """The primary record file is missing or unreadable."""


class ParseError(ConversionError):
    """XML or schema decode failure, or a malformed event time."""


class WriteError(ConversionError):
    """The output file could not be created or written."""
