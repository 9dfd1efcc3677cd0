import asyncio
import pathlib
import sys
from typing import Callable

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from text2speech.config import Settings, get_settings  # noqa: E402
from text2speech.services.request_builder import RequestDescriptor  # noqa: E402


class StubIdentity:
    """Identity provider returning numbered user agents."""

    def __init__(self) -> None:
        self.calls = 0

    def user_agent(self) -> str:
        self.calls += 1
        return f"test-agent/{self.calls}"


class RecordingFetcher:
    """Fetcher that answers with ``"<index>/<total>"`` and records every request."""

    def __init__(self, delays: dict[int, float] | None = None) -> None:
        self.delays = delays or {}
        self.requests: list[RequestDescriptor] = []
        self.completed: list[int] = []

    async def __call__(self, descriptor: RequestDescriptor) -> bytes:
        self.requests.append(descriptor)
        delay = self.delays.get(descriptor.chunk_index, 0)
        if delay:
            await asyncio.sleep(delay)
        self.completed.append(descriptor.chunk_index)
        return f"{descriptor.chunk_index}/{descriptor.total_chunks}".encode()


def make_descriptors(total: int) -> list[RequestDescriptor]:
    return [
        RequestDescriptor(
            url=f"http://tts.test/fragment?idx={index}",
            chunk_index=index,
            total_chunks=total,
        )
        for index in range(total)
    ]


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        tts_base_url="http://tts.test/translate_tts",
        max_chars=20,
        default_language="en",
    )


@pytest.fixture
def stub_identity() -> StubIdentity:
    return StubIdentity()


@pytest.fixture
def fetcher() -> RecordingFetcher:
    return RecordingFetcher()


@pytest.fixture
def fetcher_factory() -> Callable[..., RecordingFetcher]:
    return RecordingFetcher


@pytest.fixture
def descriptors() -> Callable[[int], list[RequestDescriptor]]:
    return make_descriptors

