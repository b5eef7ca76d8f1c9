"""Error types shared across the loader, cache, and CLI."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from grimoire.models.index import Index


class ErrorCode(StrEnum):
    SOURCE_UNAVAILABLE = "SOURCE_UNAVAILABLE"
    PARSE_FAILURE = "PARSE_FAILURE"
    TOO_MANY_REDIRECTS = "TOO_MANY_REDIRECTS"
    NO_USABLE_SOURCES = "NO_USABLE_SOURCES"
    CACHE_WRITE_FAILED = "CACHE_WRITE_FAILED"


class GrimoireError(Exception):
    """Base error carrying a machine-readable code.

    ``recoverable`` tells callers whether retrying the same operation later
    may succeed (network hiccups) or not (bad content, redirect loops).
    """

    def __init__(self, code: ErrorCode, message: str, *, recoverable: bool = False) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.recoverable = recoverable


class CacheWriteError(GrimoireError):
    """The built index could not be persisted.

    The freshly built index is attached so a caller can still answer the
    current request from memory.
    """

    def __init__(self, message: str, index: Index) -> None:
        super().__init__(ErrorCode.CACHE_WRITE_FAILED, message, recoverable=True)
        self.index = index
