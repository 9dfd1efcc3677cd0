"""Chunked text-to-speech synthesis over a length-limited remote endpoint."""

from .errors import (
    EmptyInputError,
    FetchError,
    SinkWriteError,
    SynthesisError,
    SynthesisTimeoutError,
    UnsupportedLanguageError,
)
from .services.synthesizer import TextToSpeech

__all__ = [
    "EmptyInputError",
    "FetchError",
    "SinkWriteError",
    "SynthesisError",
    "SynthesisTimeoutError",
    "TextToSpeech",
    "UnsupportedLanguageError",
]
