"""
Translation clients used before synthesis.

The batch pipeline only needs ``translate``; callers decide which languages
are worth translating.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, ClassVar

import aiohttp

from shared.config import ServiceConfig
from shared.http_client import AsyncHTTPClient, UpstreamResponseError
from shared.utils import setup_logging

from .catalog import CATALOG
from .exceptions import TranslationError

logger = setup_logging("translation")

MOCK_TRANSLATION_URL = "mock"


class TranslationClient(ABC):
    """Translate text between two language codes."""

    async def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        if source_lang == target_lang:
            return text
        return await self._translate(text, source_lang, target_lang)

    @abstractmethod
    async def _translate(self, text: str, source_lang: str, target_lang: str) -> str:
        pass

    @abstractmethod
    async def list_languages(self) -> list[dict[str, Any]]:
        pass


class LibreTranslateClient(TranslationClient):
    """Client for a LibreTranslate-compatible HTTP service."""

    # LibreTranslate only knows simplified Chinese under its script tag
    WIRE_CODES: ClassVar[dict[str, str]] = {"zh": "zh-Hans"}

    def __init__(
        self,
        http: AsyncHTTPClient,
        url: str,
        api_key: str = "",
        languages_url: str | None = None,
    ) -> None:
        self.http = http
        self.url = url
        self.api_key = api_key
        self.languages_url = languages_url

    def _wire_code(self, code: str) -> str:
        return self.WIRE_CODES.get(code, code)

    async def _translate(self, text: str, source_lang: str, target_lang: str) -> str:
        payload = {
            "q": text,
            "source": self._wire_code(source_lang),
            "target": self._wire_code(target_lang),
            "format": "text",
        }
        if self.api_key:
            payload["api_key"] = self.api_key

        try:
            data = await self.http.post(self.url, data=payload)
        except UpstreamResponseError as exc:
            logger.error(f"Translation {source_lang}->{target_lang} failed: {exc.status} {exc.body}")
            raise TranslationError(
                f"Translation failed ({exc.status}): {exc.body}", status=exc.status, body=exc.body
            ) from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.error(f"Translation {source_lang}->{target_lang} request failed: {exc!r}")
            raise TranslationError(f"Translation request failed: {exc!s}") from exc
        except ValueError as exc:
            logger.error(f"Translation {source_lang}->{target_lang} returned an unreadable body: {exc}")
            raise TranslationError(f"Translation service returned invalid JSON: {exc}") from exc

        translated = data.get("translatedText") if isinstance(data, dict) else None
        if not isinstance(translated, str):
            raise TranslationError("Translation service returned no translatedText")

        logger.info(f"Translated {len(text)} chars {source_lang}->{target_lang}")
        return translated

    async def list_languages(self) -> list[dict[str, Any]]:
        if not self.languages_url:
            return []
        try:
            data = await self.http.get(self.languages_url)
        except UpstreamResponseError as exc:
            raise TranslationError(
                f"Language list failed ({exc.status}): {exc.body}", status=exc.status, body=exc.body
            ) from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise TranslationError(f"Language list request failed: {exc!s}") from exc
        except ValueError as exc:
            raise TranslationError(f"Language list returned invalid JSON: {exc}") from exc
        return data if isinstance(data, list) else []


class MockTranslationClient(TranslationClient):
    """Offline stand-in that tags text with the target language."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, str]] = []

    async def _translate(self, text: str, source_lang: str, target_lang: str) -> str:
        self.calls.append((text, source_lang, target_lang))
        return f"[{target_lang.upper()}] {text}"

    async def list_languages(self) -> list[dict[str, Any]]:
        return [
            {"code": code, "name": CATALOG.language_name(code)}
            for code in sorted(CATALOG.translation_languages)
        ]


def build_translation_client(http: AsyncHTTPClient, service_config: ServiceConfig) -> TranslationClient:
    url = service_config.get("libre_translate_url", "")
    if not url or url == MOCK_TRANSLATION_URL:
        logger.warning("LIBRE_TRANSLATE_URL not set to a service, using mock translations")
        return MockTranslationClient()
    return LibreTranslateClient(
        http,
        url,
        api_key=service_config.get("libre_translate_api_key", ""),
        languages_url=service_config.get("libre_translate_languages_url"),
    )
