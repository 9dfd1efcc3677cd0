"""
Synthesis services.

- segmenter: splits text into chunks under the endpoint's length limit
- request_builder: turns chunks into endpoint requests
- fetcher: retrieves one audio fragment per request over HTTP
- assembler: reassembles fragments in chunk order (file sink or live stream)
- synthesizer: ties the pieces together per language

    text ──▶ segment() ──▶ RequestBuilder ──▶ OrderedAssembler ──▶ file / stream
                                                   │
                                                   ▼
                                          HttpFragmentFetcher
"""

from .assembler import OrderedAssembler, ReorderBuffer
from .fetcher import HttpFragmentFetcher
from .request_builder import RandomUserAgentProvider, RequestBuilder, RequestDescriptor
from .segmenter import Chunk, segment
from .synthesizer import TextToSpeech

__all__ = [
    "Chunk",
    "HttpFragmentFetcher",
    "OrderedAssembler",
    "RandomUserAgentProvider",
    "ReorderBuffer",
    "RequestBuilder",
    "RequestDescriptor",
    "TextToSpeech",
    "segment",
]
