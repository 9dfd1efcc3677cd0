"""High-level text-to-speech entry points."""

from __future__ import annotations

import logging
from typing import AsyncGenerator, List, Optional

from ..config import Settings, get_settings
from ..languages import DEFAULT_CATALOG, Language, LanguageCatalog
from .assembler import OrderedAssembler, SinkDestination
from .fetcher import FragmentFetcher, HttpFragmentFetcher
from .request_builder import IdentityProvider, RequestBuilder, RequestDescriptor
from .segmenter import Chunk, segment

logger = logging.getLogger(__name__)


class TextToSpeech:
    """
    Synthesize arbitrary text for one language.

    Text is segmented into chunks the remote endpoint accepts, each chunk is
    turned into a request, and the fetched fragments are reassembled in order
    either into a file (``synthesize_to_sink``) or a live byte stream
    (``synthesize_to_stream``).
    """

    def __init__(
        self,
        language: Optional[str] = None,
        *,
        settings: Optional[Settings] = None,
        catalog: LanguageCatalog = DEFAULT_CATALOG,
        fetcher: Optional[FragmentFetcher] = None,
        identity: Optional[IdentityProvider] = None,
    ):
        self.settings = settings or get_settings()
        self.catalog = catalog
        self.language: Language = catalog.get(language or self.settings.default_language)
        self.fetcher: FragmentFetcher = fetcher or HttpFragmentFetcher(
            timeout=self.settings.request_timeout
        )
        self.identity = identity
        self.builder = RequestBuilder(self.language, self.settings.base_url, identity)
        self.assembler = OrderedAssembler(
            self.fetcher,
            max_concurrency=self.settings.max_concurrent_fetches,
            timeout=self.settings.stream_timeout,
        )

    def with_language(self, code: str) -> "TextToSpeech":
        """Return a synthesizer sharing this one's transport for another language."""
        if self.catalog.get(code) == self.language:
            return self
        return TextToSpeech(
            code,
            settings=self.settings,
            catalog=self.catalog,
            fetcher=self.fetcher,
            identity=self.identity,
        )

    def tokenize(self, text: Optional[str]) -> List[Chunk]:
        return segment(text, self.settings.max_chars)

    def build_requests(self, text: Optional[str]) -> List[RequestDescriptor]:
        chunks = self.tokenize(text)
        logger.debug(f"Prepared {len(chunks)} fragment request(s) for '{self.language.code}'")
        return self.builder.build_all(chunks)

    async def synthesize_to_sink(self, text: Optional[str], destination: SinkDestination) -> int:
        """Fetch fragments sequentially and write them to ``destination``."""
        descriptors = self.build_requests(text)
        return await self.assembler.write_to_sink(descriptors, destination)

    def synthesize_to_stream(self, text: Optional[str]) -> AsyncGenerator[bytes, None]:
        """
        Return an ordered audio byte stream for ``text``.

        Segmentation happens immediately, so ``EmptyInputError`` is raised here
        rather than on first iteration. Iteration may raise ``FetchError``.
        """
        descriptors = self.build_requests(text)
        return self.assembler.stream(descriptors)

    async def save(self, filepath: SinkDestination, text: Optional[str]) -> int:
        return await self.synthesize_to_sink(text, filepath)

    def stream(self, text: Optional[str]) -> AsyncGenerator[bytes, None]:
        return self.synthesize_to_stream(text)

    async def aclose(self) -> None:
        close = getattr(self.fetcher, "aclose", None)
        if close is not None:
            await close()


__all__ = ["TextToSpeech"]
