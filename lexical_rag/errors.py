from __future__ import annotations

from typing import Optional


class LexicalRagError(Exception):
    """Base class for errors raised by lexical_rag."""


class DocumentReadError(LexicalRagError):
    """A document could not be read, decoded or parsed."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Cannot read document {source!r}: {reason}")


class BackendError(LexicalRagError):
    """The text-generation backend failed or returned an unusable response."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ConfigError(LexicalRagError):
    """Configuration file is unreadable or invalid."""
