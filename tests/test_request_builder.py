import random

import pytest

from text2speech.languages import Language
from text2speech.services.request_builder import (
    DEFAULT_USER_AGENTS,
    RandomUserAgentProvider,
    RequestBuilder,
)
from text2speech.services.segmenter import Chunk

ENGLISH = Language(code="en", display_name="English")


def make_builder(identity) -> RequestBuilder:
    return RequestBuilder(ENGLISH, "http://tts.test/translate_tts", identity)


def test_build_encodes_query_in_endpoint_order(stub_identity) -> None:
    builder = make_builder(stub_identity)

    descriptor = builder.build(Chunk(index=0, text="Hello world"), 0, 2)

    assert descriptor.url == (
        "http://tts.test/translate_tts?ie=UTF-8&tl=en&q=Hello%20world"
        "&total=2&idx=0&client=tw-ob&textlen=11"
    )
    assert descriptor.chunk_index == 0
    assert descriptor.total_chunks == 2
    assert descriptor.headers == {"User-Agent": "test-agent/1"}


def test_build_percent_encodes_non_ascii_text(stub_identity) -> None:
    builder = make_builder(stub_identity)

    descriptor = builder.build(Chunk(index=1, text="Qué tal & más"), 1, 3)

    assert "q=Qu%C3%A9%20tal%20%26%20m%C3%A1s" in descriptor.url
    assert "textlen=13" in descriptor.url
    assert "idx=1" in descriptor.url


def test_textlen_counts_utf16_code_units(stub_identity) -> None:
    builder = make_builder(stub_identity)

    descriptor = builder.build(Chunk(index=0, text="hi \U0001F600"), 0, 1)

    assert descriptor.url.endswith("textlen=5")


def test_each_request_gets_a_fresh_identity(stub_identity) -> None:
    builder = make_builder(stub_identity)
    chunks = [Chunk(index=i, text=f"part {i}") for i in range(3)]

    descriptors = builder.build_all(chunks)

    assert [d.headers["User-Agent"] for d in descriptors] == [
        "test-agent/1",
        "test-agent/2",
        "test-agent/3",
    ]
    assert [d.chunk_index for d in descriptors] == [0, 1, 2]
    assert {d.total_chunks for d in descriptors} == {3}


def test_build_rejects_index_outside_total(stub_identity) -> None:
    builder = make_builder(stub_identity)

    with pytest.raises(ValueError):
        builder.build(Chunk(index=2, text="late"), 2, 2)


def test_random_user_agent_provider_draws_from_pool() -> None:
    provider = RandomUserAgentProvider(rng=random.Random(7))

    agents = {provider.user_agent() for _ in range(50)}

    assert agents <= set(DEFAULT_USER_AGENTS)
    assert len(agents) > 1


def test_random_user_agent_provider_requires_pool() -> None:
    with pytest.raises(ValueError):
        RandomUserAgentProvider(user_agents=[])


def test_builder_defaults_to_random_identity() -> None:
    builder = RequestBuilder(ENGLISH, "http://tts.test/translate_tts")

    descriptor = builder.build(Chunk(index=0, text="hi"), 0, 1)

    assert descriptor.headers["User-Agent"] in DEFAULT_USER_AGENTS
