"""Language catalog accepted by the remote synthesis endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping

from .errors import UnsupportedLanguageError


@dataclass(frozen=True)
class Language:
    code: str
    display_name: str


# code: display name
_DEFAULT_LANGUAGE_NAMES = {
    "af": "Afrikaans",
    "sq": "Albanian",
    "ar": "Arabic",
    "hy": "Armenian",
    "ca": "Catalan",
    "zh": "Chinese",
    "zh-cn": "Chinese (Mandarin/China)",
    "zh-tw": "Chinese (Mandarin/Taiwan)",
    "zh-yue": "Chinese (Cantonese)",
    "hr": "Croatian",
    "cs": "Czech",
    "da": "Danish",
    "nl": "Dutch",
    "en": "English",
    "en-au": "English (Australia)",
    "en-uk": "English (United Kingdom)",
    "en-us": "English (United States)",
    "eo": "Esperanto",
    "fi": "Finnish",
    "fr": "French",
    "de": "German",
    "el": "Greek",
    "ht": "Haitian Creole",
    "hi": "Hindi",
    "hu": "Hungarian",
    "is": "Icelandic",
    "id": "Indonesian",
    "it": "Italian",
    "ja": "Japanese",
    "ko": "Korean",
    "la": "Latin",
    "lv": "Latvian",
    "mk": "Macedonian",
    "no": "Norwegian",
    "pl": "Polish",
    "pt": "Portuguese",
    "pt-br": "Portuguese (Brazil)",
    "ro": "Romanian",
    "ru": "Russian",
    "sr": "Serbian",
    "sk": "Slovak",
    "es": "Spanish",
    "es-es": "Spanish (Spain)",
    "es-us": "Spanish (United States)",
    "sw": "Swahili",
    "sv": "Swedish",
    "ta": "Tamil",
    "th": "Thai",
    "tr": "Turkish",
    "vi": "Vietnamese",
    "cy": "Welsh",
}


class LanguageCatalog:
    """Immutable, case-insensitive lookup of supported languages."""

    def __init__(self, languages: Mapping[str, str]):
        self._languages: Mapping[str, Language] = MappingProxyType(
            {
                code.lower(): Language(code=code.lower(), display_name=name)
                for code, name in languages.items()
            }
        )

    @staticmethod
    def _normalize(code: str | None) -> str:
        return (code or "").strip().lower()

    def __contains__(self, code: object) -> bool:
        if not isinstance(code, str):
            return False
        return self._normalize(code) in self._languages

    def __iter__(self) -> Iterator[Language]:
        return iter(self._languages.values())

    def __len__(self) -> int:
        return len(self._languages)

    def get(self, code: str | None) -> Language:
        """Return the language for ``code`` or raise ``UnsupportedLanguageError``."""

        language = self._languages.get(self._normalize(code))
        if language is None:
            raise UnsupportedLanguageError(code)
        return language

    def resolve(self, code: str | None, fallback: str) -> Language:
        """Return ``code`` when supported, otherwise the ``fallback`` language."""

        if code and code in self:
            return self.get(code)
        return self.get(fallback)


DEFAULT_CATALOG = LanguageCatalog(_DEFAULT_LANGUAGE_NAMES)


__all__ = ["DEFAULT_CATALOG", "Language", "LanguageCatalog"]
