"""
Text Segmenter for the fragment-based synthesis pipeline.

The remote endpoint only accepts short pieces of text, so input is split into
chunks that stay under a character ceiling without ever cutting a word in half.

Architecture:
    text → segment() → [Chunk, ...] → RequestBuilder → OrderedAssembler

Punctuation and whitespace act purely as boundaries: they are dropped and the
surviving tokens are rejoined with single spaces.

Usage:
    chunks = segment("Hello world. This is a test.", max_chars=20)
    # [Chunk(index=0, text='Hello world This is'), Chunk(index=1, text='a test')]
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from ..errors import EmptyInputError

logger = logging.getLogger(__name__)

# Sentence and clause punctuation plus newline and space
BOUNDARY_CHARACTERS = "¡!()[]¿?.,;:—«»\n "

_BOUNDARY_PATTERN = re.compile("[" + re.escape(BOUNDARY_CHARACTERS) + "]")


@dataclass(frozen=True)
class Chunk:
    """A bounded piece of input text that is synthesized on its own."""

    index: int
    text: str

    @property
    def length(self) -> int:
        return len(self.text)


def split_tokens(text: str) -> List[str]:
    """Split ``text`` on boundary characters, dropping empty tokens."""

    return [token for token in _BOUNDARY_PATTERN.split(text) if token]


def segment(text: Optional[str], max_chars: int) -> List[Chunk]:
    """
    Split text into ordered chunks shorter than ``max_chars``.

    Tokens are appended greedily, joined by one space, as long as the chunk
    stays strictly below ``max_chars``. When the next token would reach or
    exceed the ceiling the chunk is closed and a new one starts with that
    token. A single token that is itself ``max_chars`` or longer is never
    split and becomes its own oversized chunk.

    Args:
        text: Input text. ``None`` and empty strings are rejected.
        max_chars: Exclusive upper bound on chunk length.

    Returns:
        Chunks in source order, indexed from 0.

    Raises:
        EmptyInputError: If there is no speakable token in ``text``.
        ValueError: If ``max_chars`` is smaller than 1.
    """
    if not text:
        raise EmptyInputError()
    if max_chars < 1:
        raise ValueError(f"max_chars must be positive, got {max_chars}")

    tokens = split_tokens(text)
    if not tokens:
        raise EmptyInputError()

    parts: List[str] = []
    current = ""
    for token in tokens:
        candidate = f"{current} {token}" if current else token
        if not current or len(candidate) < max_chars:
            current = candidate
        else:
            parts.append(current)
            current = token
    parts.append(current)

    chunks = [Chunk(index=index, text=part) for index, part in enumerate(parts)]

    oversized = sum(1 for chunk in chunks if chunk.length >= max_chars)
    if oversized:
        logger.warning(
            "%d chunk(s) exceed the %d character limit (unsplittable tokens)",
            oversized,
            max_chars,
        )
    logger.debug(
        "Segmented %d chars into %d chunk(s) (max_chars=%d)",
        len(text),
        len(chunks),
        max_chars,
    )
    return chunks


__all__ = ["BOUNDARY_CHARACTERS", "Chunk", "segment", "split_tokens"]
