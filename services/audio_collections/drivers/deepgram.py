from typing import Any, ClassVar

from shared.enums import TTSProviderName
from shared.tts_models import TTSSettings
from shared.utils import setup_logging

from .base import TTSProvider

logger = setup_logging("deepgram-tts")


class DeepgramTTSProvider(TTSProvider):
    """Deepgram Aura text-to-speech over the ``/speak`` REST endpoint."""

    name: ClassVar[TTSProviderName] = TTSProviderName.DEEPGRAM
    display_name: ClassVar[str] = "Deepgram"

    PREVIEW_FORMAT: ClassVar[str] = "mp3"

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Token {self.api_key}",
            "Content-Type": "application/json",
        }

    def resolve_settings(self, settings: TTSSettings) -> TTSSettings:
        # Deepgram has no model or voice-setting knobs
        update: dict[str, Any] = dict.fromkeys(settings.provider_options())
        audio_format = self.catalog.find_format(self.name, settings.output_format)
        if audio_format is None or not audio_format.supports_sample_rate:
            update["sample_rate"] = None
        elif settings.sample_rate is None:
            update["sample_rate"] = self.catalog.default_sample_rate(self.name)
        return settings.model_copy(update=update)

    async def synthesize(
        self,
        text: str,
        voice_id: str,
        output_format: str = "mp3",
        sample_rate: int | None = None,
        **options: Any,
    ) -> bytes:
        """
        Synthesize speech with Deepgram.

        Args:
            text: Text to speak
            voice_id: Aura model id, e.g. ``aura-2-thalia-en``
            output_format: Catalog format id (mp3, wav, ogg, flac)
            sample_rate: Only sent for linear PCM/WAV output
            **options: Ignored, Deepgram has no voice-setting knobs

        Returns:
            Raw audio bytes
        """
        self._check_request(text, voice_id)
        audio_format = self._require_format(output_format)

        params = {
            "model": voice_id,
            "encoding": audio_format.encoding or audio_format.format_id,
        }
        if audio_format.container:
            params["container"] = audio_format.container
        if audio_format.supports_sample_rate and sample_rate:
            params["sample_rate"] = str(sample_rate)

        logger.info(f"Deepgram TTS: voice={voice_id}, format={output_format}, text_len={len(text)}")
        return await self._post_audio(f"{self.base_url}/speak", {"text": text}, self._headers(), params)

    async def preview(self, voice_id: str, sample_text: str | None = None) -> bytes:
        # Aura ids end with their language, e.g. aura-2-celeste-es
        language = voice_id.rsplit("-", 1)[-1]
        text = sample_text or self.catalog.preview_text(language)
        return await self.synthesize(text, voice_id, self.PREVIEW_FORMAT)
