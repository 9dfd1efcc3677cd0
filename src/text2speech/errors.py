"""Exception types raised while turning text into speech."""

from __future__ import annotations

from typing import Any


class SynthesisError(Exception):
    """Base class for all synthesis failures."""


class EmptyInputError(SynthesisError, ValueError):
    """Raised when there is no speakable text to synthesize."""

    def __init__(self, message: str = "No text to speak"):
        super().__init__(message)


class UnsupportedLanguageError(SynthesisError, ValueError):
    """Raised when a language code is not present in the catalog."""

    def __init__(self, code: str | None):
        super().__init__(f"Language not supported: {code}")
        self.code = code


class FetchError(SynthesisError):
    """Wrap transport or remote status failures for a single fragment."""

    def __init__(
        self,
        chunk_index: int,
        detail: Any,
        status_code: int | None = None,
    ):
        super().__init__(f"Fragment {chunk_index} failed: {detail}")
        self.chunk_index = chunk_index
        self.detail = detail
        self.status_code = status_code


class SynthesisTimeoutError(FetchError):
    """Raised when a live stream does not complete within its deadline."""


class SinkWriteError(SynthesisError):
    """Raised when the destination cannot be opened or written to."""


__all__ = [
    "EmptyInputError",
    "FetchError",
    "SinkWriteError",
    "SynthesisError",
    "SynthesisTimeoutError",
    "UnsupportedLanguageError",
]
