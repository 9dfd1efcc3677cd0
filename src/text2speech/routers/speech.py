"""Speech synthesis HTTP routes."""

from __future__ import annotations

import logging
from typing import AsyncGenerator

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse
from pydantic import BaseModel

from ..errors import EmptyInputError, FetchError
from ..services.synthesizer import TextToSpeech

logger = logging.getLogger(__name__)
router = APIRouter(tags=["speech"])


class LanguageInfo(BaseModel):
    code: str
    name: str


class MissingTextResponse(BaseModel):
    code: int = -1
    message: str


def get_synthesizer(request: Request) -> TextToSpeech:
    return request.app.state.synthesizer


def _missing_text(request: Request) -> JSONResponse:
    host = request.headers.get("host", "localhost")
    payload = MissingTextResponse(message=f"Missing text. Please try: {host}?text=your+text")
    return JSONResponse(payload.model_dump())


def _select_language(synthesizer: TextToSpeech, lang: str | None) -> TextToSpeech:
    if not lang:
        return synthesizer
    if lang not in synthesizer.catalog:
        logger.warning(
            f"Unsupported language '{lang}', falling back to '{synthesizer.language.code}'"
        )
        return synthesizer
    return synthesizer.with_language(lang)


@router.get("/", response_model=None)
async def synthesize_speech(
    request: Request,
    text: str | None = Query(default=None),
    lang: str | None = Query(default=None),
    synthesizer: TextToSpeech = Depends(get_synthesizer),
) -> Response:
    """Stream synthesized audio for ``text`` in the requested language."""

    if not text:
        return _missing_text(request)

    speaker = _select_language(synthesizer, lang)
    try:
        audio = speaker.synthesize_to_stream(text)
    except EmptyInputError:
        return _missing_text(request)

    # Pull the first fragment before committing to a 200 so an immediate
    # upstream failure can still be reported as a proper status code.
    try:
        first = await audio.__anext__()
    except FetchError as exc:
        await audio.aclose()
        logger.error(f"Speech synthesis failed before streaming: {exc}")
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    async def body() -> AsyncGenerator[bytes, None]:
        try:
            yield first
            async for fragment in audio:
                yield fragment
        except FetchError as exc:
            logger.error(f"Speech stream terminated early: {exc}")
            raise
        finally:
            await audio.aclose()

    return StreamingResponse(body(), media_type="audio/mpeg")


@router.get("/api/languages", response_model=list[LanguageInfo])
async def list_languages(
    synthesizer: TextToSpeech = Depends(get_synthesizer),
) -> list[LanguageInfo]:
    return [
        LanguageInfo(code=language.code, name=language.display_name)
        for language in synthesizer.catalog
    ]


__all__ = ["router"]
