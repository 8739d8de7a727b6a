import asyncio
from abc import ABC, abstractmethod
from typing import Any, ClassVar

import aiohttp

from services.audio_collections.catalog import CATALOG, VoiceCatalog
from services.audio_collections.exceptions import SynthesisError
from services.audio_collections.stream import drain_stream
from shared.enums import TTSProviderName
from shared.http_client import AsyncHTTPClient, UpstreamResponseError
from shared.tts_models import AudioFormatInfo, ProviderStatus, TTSSettings
from shared.utils import setup_logging

logger = setup_logging("tts-provider")

DEFAULT_CHUNK_SIZE = 16384


class TTSProvider(ABC):
    """Abstract base class for remote TTS providers.

    A provider turns text into audio bytes. It knows nothing about files,
    collections or translation.
    """

    name: ClassVar[TTSProviderName]
    display_name: ClassVar[str]

    def __init__(
        self,
        http: AsyncHTTPClient,
        api_key: str,
        base_url: str,
        catalog: VoiceCatalog = CATALOG,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.http = http
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.catalog = catalog
        self.chunk_size = chunk_size

    @abstractmethod
    async def synthesize(
        self,
        text: str,
        voice_id: str,
        output_format: str,
        sample_rate: int | None = None,
        **options: Any,
    ) -> bytes:
        """Synthesize speech and return the complete audio body."""
        pass

    @abstractmethod
    async def preview(self, voice_id: str, sample_text: str | None = None) -> bytes:
        """Synthesize a short canned phrase with a lightweight format."""
        pass

    async def status(self) -> ProviderStatus:
        return ProviderStatus(provider=self.name, configured=bool(self.api_key), endpoint=self.base_url)

    def supports_format(self, output_format: str) -> bool:
        return self.catalog.find_format(self.name, output_format) is not None

    def resolve_settings(self, settings: TTSSettings) -> TTSSettings:
        """Fill provider defaults into batch settings. Subclasses override."""
        return settings

    def _require_format(self, output_format: str) -> AudioFormatInfo:
        audio_format = self.catalog.find_format(self.name, output_format)
        if audio_format is None:
            raise SynthesisError(
                self.display_name, f"Unsupported {self.display_name} output format '{output_format}'"
            )
        return audio_format

    def _check_request(self, text: str, voice_id: str) -> None:
        if not self.api_key:
            raise SynthesisError(self.display_name, f"{self.display_name} API key not configured")
        if not text or not text.strip():
            raise SynthesisError(self.display_name, "Text is required")
        if not voice_id:
            raise SynthesisError(self.display_name, "Voice is required")

    async def _post_audio(
        self,
        url: str,
        body: dict[str, Any],
        headers: dict[str, str],
        params: dict[str, str] | None = None,
    ) -> bytes:
        """Issue the single synthesis POST and drain the streamed audio body."""
        try:
            async with self.http.stream_post(url, data=body, headers=headers, params=params) as response:
                audio = await drain_stream(response.content.iter_chunked(self.chunk_size))
        except UpstreamResponseError as exc:
            logger.error(f"{self.display_name} API error: {exc.status} {exc.body}")
            raise SynthesisError.from_upstream(self.display_name, exc.status, exc.body) from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.error(f"{self.display_name} request failed: {exc!r}")
            raise SynthesisError(self.display_name, f"{self.display_name} request failed: {exc!s}") from exc

        return bytes(audio)
