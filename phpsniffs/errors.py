# phpsniffs/errors.py
"""
Exception hierarchy for phpsniffs.

  PhpSniffsError (base)
  ├── TokenizerError   - source could not be lexed or brackets do not balance
  └── SniffError       - a sniff could not be configured or located

Diagnostics emitted by sniffs are *output*, not exceptions; nothing here is
raised for a style violation.
"""

from __future__ import annotations

from typing import Optional


class PhpSniffsError(Exception):
    """Base exception for all phpsniffs errors."""
    pass


class TokenizerError(PhpSniffsError):
    """
    Raised when a file cannot be turned into a linked token stream.

    Carries the 1-based position of the offending input so the runner can
    report it against the file.
    """

    def __init__(
        self,
        message: str,
        line: int = 0,
        column: int = 0,
        filename: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column
        self.filename = filename

    def __str__(self) -> str:
        where = self.filename or "<string>"
        if self.line:
            return f"{where}:{self.line}:{self.column}: {self.message}"
        return f"{where}: {self.message}"


class SniffError(PhpSniffsError):
    """Raised for unknown sniff names or invalid sniff options."""
    pass


__all__ = [
    "PhpSniffsError",
    "SniffError",
    "TokenizerError",
]
