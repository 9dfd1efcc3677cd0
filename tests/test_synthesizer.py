"""Tests for the TextToSpeech facade."""

from __future__ import annotations

import io
from urllib.parse import parse_qs, urlsplit

import pytest

from text2speech.config import Settings
from text2speech.errors import EmptyInputError, FetchError, UnsupportedLanguageError
from text2speech.languages import LanguageCatalog
from text2speech.services.fetcher import HttpFragmentFetcher
from text2speech.services.synthesizer import TextToSpeech


def _query(url: str) -> dict[str, str]:
    return {key: values[0] for key, values in parse_qs(urlsplit(url).query).items()}


@pytest.mark.asyncio
async def test_synthesize_to_sink_writes_fragments_in_order(tmp_path, settings, fetcher, stub_identity):
    tts = TextToSpeech("en", settings=settings, fetcher=fetcher, identity=stub_identity)
    target = tmp_path / "hello.mp3"

    written = await tts.synthesize_to_sink("Hello world. This is a test.", target)

    assert target.read_bytes() == b"0/21/2"
    assert written == 6
    queries = [_query(d.url) for d in fetcher.requests]
    assert [q["q"] for q in queries] == ["Hello world This is", "a test"]
    assert [q["tl"] for q in queries] == ["en", "en"]
    assert fetcher.requests[0].url.startswith("http://tts.test/translate_tts?")


@pytest.mark.asyncio
async def test_save_is_an_alias_for_sink_mode(tmp_path, settings, fetcher):
    tts = TextToSpeech(settings=settings, fetcher=fetcher)
    target = tmp_path / "saved.mp3"

    await tts.save(target, "Short")

    assert target.read_bytes() == b"0/1"


@pytest.mark.asyncio
async def test_synthesize_to_stream_yields_ordered_audio(settings, fetcher_factory):
    fetcher = fetcher_factory(delays={0: 0.03, 1: 0.01})
    tts = TextToSpeech(settings=settings, fetcher=fetcher)

    audio = b"".join([chunk async for chunk in tts.stream("Hello world. This is a test.")])

    assert audio == b"0/21/2"
    assert fetcher.completed == [1, 0]


@pytest.mark.parametrize("text", ["", None, "?!"])
def test_stream_rejects_empty_text_before_any_request(settings, fetcher, text):
    tts = TextToSpeech(settings=settings, fetcher=fetcher)

    with pytest.raises(EmptyInputError):
        tts.synthesize_to_stream(text)

    assert fetcher.requests == []


@pytest.mark.asyncio
async def test_sink_rejects_empty_text_before_any_request(tmp_path, settings, fetcher):
    tts = TextToSpeech(settings=settings, fetcher=fetcher)

    with pytest.raises(EmptyInputError):
        await tts.synthesize_to_sink("", tmp_path / "empty.mp3")

    assert fetcher.requests == []
    assert not (tmp_path / "empty.mp3").exists()


@pytest.mark.asyncio
async def test_stream_propagates_fetch_errors(settings):
    async def failing(descriptor):
        raise FetchError(descriptor.chunk_index, "remote endpoint returned 500", status_code=500)

    tts = TextToSpeech(settings=settings, fetcher=failing)

    with pytest.raises(FetchError):
        async for _ in tts.stream("Hello"):
            pass


def test_unsupported_language_fails_at_setup(settings, fetcher):
    with pytest.raises(UnsupportedLanguageError) as excinfo:
        TextToSpeech("xx", settings=settings, fetcher=fetcher)

    assert excinfo.value.code == "xx"


def test_language_lookup_is_case_insensitive(settings, fetcher):
    tts = TextToSpeech("EN-US", settings=settings, fetcher=fetcher)

    assert tts.language.code == "en-us"
    assert tts.language.display_name == "English (United States)"


def test_default_language_comes_from_settings(fetcher):
    settings = Settings(default_language="fr")

    tts = TextToSpeech(settings=settings, fetcher=fetcher)

    assert tts.language.code == "fr"


@pytest.mark.asyncio
async def test_with_language_shares_transport(settings, fetcher):
    tts = TextToSpeech(settings=settings, fetcher=fetcher)

    french = tts.with_language("fr")
    await french.synthesize_to_sink("Bonjour", io.BytesIO())

    assert tts.with_language("EN") is tts
    assert french.fetcher is fetcher
    assert _query(fetcher.requests[0].url)["tl"] == "fr"


def test_injected_catalog_replaces_default(fetcher):
    settings = Settings(default_language="tlh")
    catalog = LanguageCatalog({"tlh": "Klingon"})

    tts = TextToSpeech(settings=settings, catalog=catalog, fetcher=fetcher)

    assert tts.language.display_name == "Klingon"
    with pytest.raises(UnsupportedLanguageError):
        tts.with_language("en")


def test_tokenize_uses_configured_limit(settings, fetcher):
    tts = TextToSpeech(settings=settings, fetcher=fetcher)

    assert [chunk.text for chunk in tts.tokenize("Hello world. This is a test.")] == [
        "Hello world This is",
        "a test",
    ]


def test_default_fetcher_is_http(settings):
    tts = TextToSpeech(settings=settings)

    assert isinstance(tts.fetcher, HttpFragmentFetcher)
