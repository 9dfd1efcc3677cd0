"""Build request descriptors for individual text fragments."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Mapping, Optional, Protocol, Sequence
from urllib.parse import quote, urlencode

from ..languages import Language
from .segmenter import Chunk

# Browser identities rotated across fragment requests
DEFAULT_USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.4 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64; rv:125.0) Gecko/20100101 Firefox/125.0",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:125.0) Gecko/20100101 Firefox/125.0",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36 Edg/124.0.0.0",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.4 Mobile/15E148 Safari/604.1",
)


def utf16_length(text: str) -> int:
    """Length in UTF-16 code units, the unit the endpoint counts in."""
    return len(text.encode("utf-16-le")) // 2


class IdentityProvider(Protocol):
    """Strategy producing the client identity sent with each request."""

    def user_agent(self) -> str: ...


class RandomUserAgentProvider:
    """Pick a browser user-agent at random for every request."""

    def __init__(
        self,
        user_agents: Sequence[str] = DEFAULT_USER_AGENTS,
        rng: Optional[random.Random] = None,
    ):
        if not user_agents:
            raise ValueError("user_agents must not be empty")
        self._user_agents = tuple(user_agents)
        self._rng = rng or random.Random()

    def user_agent(self) -> str:
        return self._rng.choice(self._user_agents)


@dataclass(frozen=True)
class RequestDescriptor:
    """Everything the fetcher needs to retrieve one fragment."""

    url: str
    chunk_index: int
    total_chunks: int
    headers: Mapping[str, str] = field(default_factory=dict)


class RequestBuilder:
    """Turn chunks of a single language into endpoint requests."""

    def __init__(
        self,
        language: Language,
        base_url: str,
        identity: Optional[IdentityProvider] = None,
    ):
        self.language = language
        self.base_url = base_url
        self.identity = identity or RandomUserAgentProvider()

    def query_string(self, text: str, index: int, total: int) -> str:
        params = [
            ("ie", "UTF-8"),
            ("tl", self.language.code),
            ("q", text),
            ("total", total),
            ("idx", index),
            ("client", "tw-ob"),
            ("textlen", utf16_length(text)),
        ]
        # quote (not quote_plus) so spaces become %20 like encodeURIComponent
        return urlencode(params, quote_via=quote, safe="!'()*-._~")

    def build(self, chunk: Chunk, index: int, total: int) -> RequestDescriptor:
        if total < 1 or not 0 <= index < total:
            raise ValueError(f"Fragment index {index} out of range for total {total}")
        return RequestDescriptor(
            url=f"{self.base_url}?{self.query_string(chunk.text, index, total)}",
            chunk_index=index,
            total_chunks=total,
            headers={"User-Agent": self.identity.user_agent()},
        )

    def build_all(self, chunks: Sequence[Chunk]) -> list[RequestDescriptor]:
        total = len(chunks)
        return [self.build(chunk, index, total) for index, chunk in enumerate(chunks)]


__all__ = [
    "DEFAULT_USER_AGENTS",
    "IdentityProvider",
    "RandomUserAgentProvider",
    "RequestBuilder",
    "RequestDescriptor",
    "utf16_length",
]
